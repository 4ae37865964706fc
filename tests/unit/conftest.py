"""Shared fixtures for unit tests

In-memory repositories stand in for the SQLAlchemy adapters. Reads take a
copy and then yield to the event loop, so concurrent use cases can act on
stale reads the way they would against a database. Conditional updates
never yield, so each one is atomic.
"""

import asyncio
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.repositories import (
    CreditAccountRepository,
    CreditTransactionRepository,
    PaymentOrderRepository,
    PricingRuleRepository,
    RedeemCodeRepository,
    UserRegistrationRepository,
    UserRepository,
    VerificationCodeRepository,
)
from src.app.services.ledger_service import LedgerService
from src.app.services.payment_provider import (
    PaymentProvider,
    PaymentProviderError,
    PaymentProviderRegistry,
    PaymentResponse,
    PaymentVerification,
    RefundResponse,
)
from src.app.services.pricing_resolver import PricingResolver
from src.app.services.unit_of_work import UnitOfWork
from src.domain.credit_account import CreditAccount
from src.domain.credit_transaction import CreditTransaction
from src.domain.payment_order import PaymentOrder, PaymentOrderStatus, can_transition as order_can_transition
from src.domain.pricing_rule import PricingRule
from src.domain.redeem_code import RedeemCode, RedeemCodeUsage
from src.domain.user import User
from src.domain.user_registration import (
    RegistrationStatus,
    UserRegistration,
    VerificationCode,
    VerificationPurpose,
    can_transition as registration_can_transition,
)


def clone(entity):
    """Detached copy, like a fresh row load"""
    if entity is None:
        return None
    return type(entity)(**entity.model_dump())


async def _yield():
    await asyncio.sleep(0)


class FakeUnitOfWork(UnitOfWork):
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


class InMemoryCreditAccountRepository(CreditAccountRepository):
    def __init__(self):
        self.rows: dict[int, CreditAccount] = {}
        self.cas_failures = 0

    async def get_by_user_id(self, user_id: int) -> Optional[CreditAccount]:
        found = clone(next((r for r in self.rows.values() if r.user_id == user_id), None))
        await _yield()
        return found

    async def create(self, account: CreditAccount) -> Optional[CreditAccount]:
        if any(row.user_id == account.user_id for row in self.rows.values()):
            return None
        account = clone(account)
        account.id = len(self.rows) + 1
        self.rows[account.id] = account
        return clone(account)

    async def compare_and_set_balance(
        self,
        account_id: int,
        expected_balance: int,
        new_balance: int,
        earned_delta: int = 0,
        spent_delta: int = 0,
    ) -> bool:
        row = self.rows[account_id]
        if row.balance != expected_balance:
            self.cas_failures += 1
            return False
        row.balance = new_balance
        row.total_earned += earned_delta
        row.total_spent += spent_delta
        row.updated_at = datetime.utcnow()
        return True

    async def get_all(self) -> List[CreditAccount]:
        return [clone(row) for row in self.rows.values()]

    def balance_of(self, user_id: int) -> int:
        for row in self.rows.values():
            if row.user_id == user_id:
                return row.balance
        return 0


class InMemoryCreditTransactionRepository(CreditTransactionRepository):
    def __init__(self):
        self.rows: List[CreditTransaction] = []

    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        transaction = clone(transaction)
        transaction.id = len(self.rows) + 1
        self.rows.append(transaction)
        return clone(transaction)

    async def get_by_user_id(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[CreditTransaction], int]:
        rows = sorted((r for r in self.rows if r.user_id == user_id), key=lambda r: r.id, reverse=True)
        return [clone(r) for r in rows[offset:offset + limit]], len(rows)

    async def list_by_account(self, account_id: int) -> List[CreditTransaction]:
        return [clone(r) for r in self.rows if r.account_id == account_id]


class InMemoryPricingRuleRepository(PricingRuleRepository):
    def __init__(self):
        self.rows: dict[str, PricingRule] = {}

    def add(self, path: str, credits: int, is_folder: bool = False, inheritable: bool = True,
            enabled: bool = True) -> PricingRule:
        rule = PricingRule(
            id=len(self.rows) + 1,
            path=path,
            credits=credits,
            is_folder=is_folder,
            inheritable=inheritable,
            enabled=enabled,
            created_by=1,
        )
        self.rows[path] = rule
        return rule

    async def get_by_path(self, path: str, include_deleted: bool = False) -> Optional[PricingRule]:
        rule = self.rows.get(path)
        if rule is None or (rule.is_deleted and not include_deleted):
            return None
        return clone(rule)

    async def find_enabled_exact(self, path: str) -> Optional[PricingRule]:
        rule = self.rows.get(path)
        if rule is None or rule.is_deleted or not rule.enabled:
            return None
        return clone(rule)

    async def find_inheritable_folders(self, paths: Sequence[str]) -> List[PricingRule]:
        wanted = set(paths)
        return [
            clone(r) for r in self.rows.values()
            if r.path in wanted and r.is_folder and r.inheritable and r.enabled and not r.is_deleted
        ]

    async def save(self, rule: PricingRule) -> PricingRule:
        rule = clone(rule)
        if rule.id is None:
            rule.id = len(self.rows) + 1
        self.rows[rule.path] = rule
        return clone(rule)

    async def list(self, limit: int = 20, offset: int = 0) -> Tuple[List[PricingRule], int]:
        rows = sorted((r for r in self.rows.values() if not r.is_deleted), key=lambda r: r.path)
        return [clone(r) for r in rows[offset:offset + limit]], len(rows)


class InMemoryRedeemCodeRepository(RedeemCodeRepository):
    def __init__(self):
        self.rows: dict[int, RedeemCode] = {}
        self.usages: List[RedeemCodeUsage] = []

    async def create_many(self, codes: List[RedeemCode]) -> List[RedeemCode]:
        created = []
        for code in codes:
            code = clone(code)
            code.id = len(self.rows) + 1
            self.rows[code.id] = code
            created.append(clone(code))
        return created

    async def get_by_code(self, code: str) -> Optional[RedeemCode]:
        found = clone(next((r for r in self.rows.values() if r.code == code), None))
        await _yield()
        return found

    async def try_consume(self, code_id: int, now: datetime) -> bool:
        row = self.rows.get(code_id)
        if row is None or not row.can_use(now):
            return False
        row.used_count += 1
        return True

    async def create_usage(self, usage: RedeemCodeUsage) -> RedeemCodeUsage:
        usage = clone(usage)
        usage.id = len(self.usages) + 1
        self.usages.append(usage)
        return clone(usage)

    async def list(self, limit: int = 20, offset: int = 0) -> Tuple[List[RedeemCode], int]:
        rows = sorted(self.rows.values(), key=lambda r: r.id, reverse=True)
        return [clone(r) for r in rows[offset:offset + limit]], len(rows)


class InMemoryPaymentOrderRepository(PaymentOrderRepository):
    def __init__(self):
        self.rows: dict[str, PaymentOrder] = {}

    async def create(self, order: PaymentOrder) -> PaymentOrder:
        order = clone(order)
        order.id = len(self.rows) + 1
        self.rows[order.order_no] = order
        return clone(order)

    async def get_by_order_no(self, order_no: str) -> Optional[PaymentOrder]:
        found = clone(self.rows.get(order_no))
        await _yield()
        return found

    async def transition_status(
        self,
        order_no: str,
        expected: PaymentOrderStatus,
        target: PaymentOrderStatus,
        **values: Any,
    ) -> bool:
        if not order_can_transition(expected, target):
            return False
        row = self.rows.get(order_no)
        if row is None or row.status != expected:
            return False
        row.status = target
        for key, value in values.items():
            setattr(row, key, value)
        return True

    async def update_payment_data(self, order_no: str, payment_data: str) -> None:
        self.rows[order_no].payment_data = payment_data

    async def get_by_user_id(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[PaymentOrder], int]:
        rows = sorted((r for r in self.rows.values() if r.user_id == user_id), key=lambda r: r.id, reverse=True)
        return [clone(r) for r in rows[offset:offset + limit]], len(rows)

    async def expire_overdue(self, cutoff: datetime) -> int:
        count = 0
        for row in self.rows.values():
            if row.status == PaymentOrderStatus.PENDING and row.expires_at < cutoff:
                row.status = PaymentOrderStatus.EXPIRED
                count += 1
        return count


class InMemoryUserRegistrationRepository(UserRegistrationRepository):
    def __init__(self):
        self.rows: dict[int, UserRegistration] = {}
        self._next_id = 1

    async def create(self, registration: UserRegistration) -> UserRegistration:
        if any(r.email == registration.email or r.username == registration.username for r in self.rows.values()):
            raise ValueError("UNIQUE constraint failed")
        registration = clone(registration)
        registration.id = self._next_id
        self._next_id += 1
        self.rows[registration.id] = registration
        return clone(registration)

    async def get_by_id(self, registration_id: int) -> Optional[UserRegistration]:
        found = clone(self.rows.get(registration_id))
        await _yield()
        return found

    async def get_by_token(self, token: str) -> Optional[UserRegistration]:
        return clone(next((r for r in self.rows.values() if r.token == token), None))

    async def get_by_email(self, email: str) -> Optional[UserRegistration]:
        return clone(next((r for r in self.rows.values() if r.email == email), None))

    async def get_by_username(self, username: str) -> Optional[UserRegistration]:
        return clone(next((r for r in self.rows.values() if r.username == username), None))

    async def transition_status(
        self,
        registration_id: int,
        expected: RegistrationStatus,
        target: RegistrationStatus,
        **values: Any,
    ) -> bool:
        if not registration_can_transition(expected, target):
            return False
        row = self.rows.get(registration_id)
        if row is None or row.status != expected:
            return False
        row.status = target
        for key, value in values.items():
            setattr(row, key, value)
        return True

    async def list_pending(self, limit: int = 20, offset: int = 0) -> Tuple[List[UserRegistration], int]:
        rows = sorted(
            (r for r in self.rows.values()
             if r.status in (RegistrationStatus.PENDING, RegistrationStatus.VERIFIED)),
            key=lambda r: r.id,
        )
        return [clone(r) for r in rows[offset:offset + limit]], len(rows)

    async def delete_expired_pending(self, now: datetime) -> int:
        expired = [
            r.id for r in self.rows.values()
            if r.status == RegistrationStatus.PENDING and r.expires_at < now
        ]
        for registration_id in expired:
            del self.rows[registration_id]
        return len(expired)

    async def delete(self, registration_id: int) -> None:
        self.rows.pop(registration_id, None)


class InMemoryVerificationCodeRepository(VerificationCodeRepository):
    def __init__(self):
        self.rows: List[VerificationCode] = []

    async def create(self, code: VerificationCode) -> VerificationCode:
        code = clone(code)
        code.id = len(self.rows) + 1
        self.rows.append(code)
        return clone(code)

    async def get_latest(self, email: str, purpose: VerificationPurpose) -> Optional[VerificationCode]:
        matches = [r for r in self.rows if r.email == email and r.purpose == purpose and not r.used]
        found = clone(matches[-1]) if matches else None
        await _yield()
        return found

    async def mark_used(self, code_id: int) -> bool:
        for row in self.rows:
            if row.id == code_id and not row.used:
                row.used = True
                return True
        return False

    async def delete_expired(self, now: datetime) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.expires_at >= now]
        return before - len(self.rows)


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self.rows: List[User] = []

    async def get_by_username(self, username: str) -> Optional[User]:
        return clone(next((u for u in self.rows if u.username == username), None))

    async def create(self, user: User) -> User:
        user = clone(user)
        user.id = len(self.rows) + 1
        self.rows.append(user)
        return clone(user)


class StubPaymentProvider(PaymentProvider):
    """Provider whose callbacks are plain dicts; sign must equal "good" to verify"""

    name = "stub"

    def __init__(self, fail_create: bool = False):
        self.fail_create = fail_create
        self.created: List[str] = []

    async def create_order(self, order: PaymentOrder) -> PaymentResponse:
        if self.fail_create:
            raise PaymentProviderError("gateway unavailable")
        self.created.append(order.order_no)
        return PaymentResponse(
            order_no=order.order_no,
            qr_code=f"https://pay.example/qr/{order.order_no}",
            payment_data={"trade_no": "pre-1"},
        )

    async def verify_callback(self, raw) -> PaymentVerification:
        if raw.get("sign") != "good":
            return PaymentVerification(valid=False, message="bad signature")
        return PaymentVerification(
            valid=True,
            paid=raw.get("paid", True),
            order_no=raw["order_no"],
            provider_transaction_id=raw.get("trade_no"),
            amount=raw.get("amount"),
            payment_data=dict(raw),
        )

    async def refund(self, order_no: str, amount: int) -> RefundResponse:
        return RefundResponse(success=True, refund_id=f"R-{order_no}")


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def fake_uow():
    return FakeUnitOfWork()


@pytest.fixture
def account_repo():
    return InMemoryCreditAccountRepository()


@pytest.fixture
def transaction_repo():
    return InMemoryCreditTransactionRepository()


@pytest.fixture
def ledger(account_repo, transaction_repo):
    return LedgerService(account_repo, transaction_repo, max_retries=50)


@pytest.fixture
def rule_repo():
    return InMemoryPricingRuleRepository()


@pytest.fixture
def resolver(rule_repo):
    return PricingResolver(rule_repo)


@pytest.fixture
def redeem_repo():
    return InMemoryRedeemCodeRepository()


@pytest.fixture
def order_repo():
    return InMemoryPaymentOrderRepository()


@pytest.fixture
def registration_repo():
    return InMemoryUserRegistrationRepository()


@pytest.fixture
def code_repo():
    return InMemoryVerificationCodeRepository()


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def mock_notification_service():
    service = MagicMock()
    service.send_verification_link = AsyncMock(return_value=True)
    service.send_verification_code = AsyncMock(return_value=True)
    service.send_partial_redemption_alert = AsyncMock(return_value=True)
    return service


@pytest.fixture
def stub_provider():
    return StubPaymentProvider()


@pytest.fixture
def providers(stub_provider):
    return PaymentProviderRegistry([stub_provider])
