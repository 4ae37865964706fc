"""Use cases against real SQLite sessions

Each racing party gets its own session, so the outcome is decided by the
database's conditional updates rather than by shared in-memory state.
"""

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.credit_account_repository import SqlAlchemyCreditAccountRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.payment_order_repository import SqlAlchemyPaymentOrderRepository
from src.adapter.repositories.redeem_code_repository import SqlAlchemyRedeemCodeRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.ledger_service import LedgerService
from src.app.services.payment_provider import (
    PaymentProvider,
    PaymentProviderError,
    PaymentProviderRegistry,
    PaymentVerification,
    RefundResponse,
)
from src.app.use_cases.payments.cancel_payment_order import CancelPaymentOrder
from src.app.use_cases.payments.complete_payment_order import CompletePaymentOrder
from src.app.use_cases.payments.create_payment_order import CreatePaymentOrder
from src.app.use_cases.payments.dtos import CompletePaymentOrderCommandDTO, CreatePaymentOrderCommandDTO
from src.app.use_cases.redeem.dtos import RedeemCommandDTO
from src.app.use_cases.redeem.redeem_code import RedeemCode
from src.domain.credit_account import CreditAccount
from src.domain.credit_transaction import TransactionSource
from src.domain.errors import ErrorCode
from src.domain.payment_order import PaymentOrder, PaymentOrderStatus
from src.domain.redeem_code import RedeemCode as RedeemCodeEntity


class StaleBalanceAccountRepository(SqlAlchemyCreditAccountRepository):
    """Reads the account on every attempt but never wins the balance update"""

    async def compare_and_set_balance(self, account_id, expected_balance, new_balance, **deltas) -> bool:
        await self.session.execute(select(CreditAccount).where(CreditAccount.id == account_id))
        return False


class UnreachableGateway(PaymentProvider):
    name = "down"

    async def create_order(self, order: PaymentOrder):
        raise PaymentProviderError("gateway unreachable")

    async def verify_callback(self, raw) -> PaymentVerification:
        return PaymentVerification(valid=False, message="gateway unreachable")

    async def refund(self, order_no: str, amount: int) -> RefundResponse:
        raise PaymentProviderError("gateway unreachable")


class UnmarkableOrderRepository(SqlAlchemyPaymentOrderRepository):
    """Talks to the database, then fails every status change"""

    async def transition_status(self, order_no, expected, target, **values) -> bool:
        await self.session.execute(select(PaymentOrder).where(PaymentOrder.order_no == order_no))
        raise RuntimeError("connection reset while updating order")


def _ledger(session, account_repo=None) -> LedgerService:
    return LedgerService(
        account_repo or SqlAlchemyCreditAccountRepository(session),
        SqlAlchemyCreditTransactionRepository(session),
        max_retries=2,
    )


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def _seed_code(session_factory, code: str, credits: int, max_uses: int = 1):
    async with session_factory() as session:
        await SqlAlchemyRedeemCodeRepository(session).create_many(
            [RedeemCodeEntity(code=code, credits=credits, max_uses=max_uses, created_by=1)]
        )
        await session.commit()


class TestPartialRedemption:

    @pytest.mark.asyncio
    async def test_failed_grant_after_consumed_use_reports_partial_failure(self, db_session, notifications):
        await SqlAlchemyRedeemCodeRepository(db_session).create_many(
            [RedeemCodeEntity(code="OLSTALE", credits=15, max_uses=1, created_by=1)]
        )
        await db_session.commit()

        use_case = RedeemCode(
            uow=SqlAlchemyUnitOfWork(db_session),
            code_repo=SqlAlchemyRedeemCodeRepository(db_session),
            ledger=_ledger(db_session, StaleBalanceAccountRepository(db_session)),
            notification_service=notifications,
        )
        result = await use_case.execute(RedeemCommandDTO(user_id=7, code="OLSTALE"))

        assert result.is_err()
        assert result.error.code == ErrorCode.PARTIAL_REDEMPTION_FAILURE.value
        assert notifications.alerts == [(7, "OLSTALE")]

        stored = await SqlAlchemyRedeemCodeRepository(db_session).get_by_code("OLSTALE")
        assert stored.used_count == 1
        history, total = await SqlAlchemyCreditTransactionRepository(db_session).get_by_user_id(7)
        assert total == 0


class TestProviderFailure:

    @staticmethod
    def _use_case(session, order_repo) -> CreatePaymentOrder:
        return CreatePaymentOrder(
            uow=SqlAlchemyUnitOfWork(session),
            order_repo=order_repo,
            providers=PaymentProviderRegistry([UnreachableGateway()]),
        )

    @pytest.mark.asyncio
    async def test_gateway_failure_marks_order_failed(self, db_session):
        repo = SqlAlchemyPaymentOrderRepository(db_session)

        result = await self._use_case(db_session, repo).execute(
            CreatePaymentOrderCommandDTO(user_id=9, credits=10, payment_method="down")
        )

        assert result.is_err()
        assert result.error.code == ErrorCode.PROVIDER_ERROR.value
        orders, total = await repo.get_by_user_id(9)
        assert total == 1
        assert orders[0].status == PaymentOrderStatus.FAILED

    @pytest.mark.asyncio
    async def test_gateway_failure_is_reported_when_order_cannot_be_marked(self, db_session):
        result = await self._use_case(db_session, UnmarkableOrderRepository(db_session)).execute(
            CreatePaymentOrderCommandDTO(user_id=10, credits=10, payment_method="down")
        )

        assert result.is_err()
        assert result.error.code == ErrorCode.PROVIDER_ERROR.value
        orders, total = await SqlAlchemyPaymentOrderRepository(db_session).get_by_user_id(10)
        assert total == 1
        assert orders[0].status == PaymentOrderStatus.PENDING


class TestConcurrentSessions:

    @pytest.mark.asyncio
    async def test_concurrent_debits_never_overdraw(self, session_factory):
        async with session_factory() as session:
            await _ledger(session).credit(21, 100, TransactionSource.ADMIN)
            await session.commit()

        async def download(path: str):
            async with session_factory() as session:
                result = await _ledger(session).debit(21, 60, TransactionSource.DOWNLOAD, source_id=path)
                if result.is_ok():
                    await session.commit()
                else:
                    await session.rollback()
                return result

        results = await asyncio.gather(download("/a.bin"), download("/b.bin"))

        assert sorted(r.is_ok() for r in results) == [False, True]
        [refused] = [r for r in results if r.is_err()]
        assert refused.error.code == ErrorCode.INSUFFICIENT_BALANCE.value

        async with session_factory() as session:
            account = await SqlAlchemyCreditAccountRepository(session).get_by_user_id(21)
            assert account.balance == 40
            assert account.total_spent == 60

    @pytest.mark.asyncio
    async def test_single_use_code_is_redeemed_once(self, session_factory):
        await _seed_code(session_factory, "OLRACE", credits=25)

        async def redeem(user_id: int):
            async with session_factory() as session:
                use_case = RedeemCode(
                    uow=SqlAlchemyUnitOfWork(session),
                    code_repo=SqlAlchemyRedeemCodeRepository(session),
                    ledger=_ledger(session),
                )
                return await use_case.execute(RedeemCommandDTO(user_id=user_id, code="OLRACE"))

        results = await asyncio.gather(redeem(31), redeem(32))

        assert sorted(r.is_ok() for r in results) == [False, True]
        [refused] = [r for r in results if r.is_err()]
        assert refused.error.code == ErrorCode.CODE_UNUSABLE.value

        async with session_factory() as session:
            stored = await SqlAlchemyRedeemCodeRepository(session).get_by_code("OLRACE")
            assert stored.used_count == 1
            accounts = SqlAlchemyCreditAccountRepository(session)
            balances = [await accounts.get_by_user_id(user_id) for user_id in (31, 32)]
            assert sorted(a.balance if a else 0 for a in balances) == [0, 25]

    @pytest.mark.asyncio
    async def test_complete_and_cancel_race_has_one_winner(self, session_factory):
        async with session_factory() as session:
            await SqlAlchemyPaymentOrderRepository(session).create(
                PaymentOrder(
                    order_no="OL-CONTESTED",
                    user_id=41,
                    credits=50,
                    amount=50,
                    payment_method="stub",
                    expires_at=datetime.utcnow() + timedelta(minutes=30),
                )
            )
            await session.commit()

        async def complete():
            async with session_factory() as session:
                use_case = CompletePaymentOrder(
                    uow=SqlAlchemyUnitOfWork(session),
                    order_repo=SqlAlchemyPaymentOrderRepository(session),
                    ledger=_ledger(session),
                )
                return await use_case.execute(CompletePaymentOrderCommandDTO(order_no="OL-CONTESTED"))

        async def cancel():
            async with session_factory() as session:
                use_case = CancelPaymentOrder(SqlAlchemyUnitOfWork(session), SqlAlchemyPaymentOrderRepository(session))
                return await use_case.execute("OL-CONTESTED", user_id=41)

        completed, cancelled = await asyncio.gather(complete(), cancel())

        assert completed.is_ok() != cancelled.is_ok()
        loser = cancelled if completed.is_ok() else completed
        assert loser.error.code == ErrorCode.INVALID_ORDER_STATE.value

        async with session_factory() as session:
            order = await SqlAlchemyPaymentOrderRepository(session).get_by_order_no("OL-CONTESTED")
            account = await SqlAlchemyCreditAccountRepository(session).get_by_user_id(41)
            if completed.is_ok():
                assert order.status == PaymentOrderStatus.PAID
                assert account.balance == 50
            else:
                assert order.status == PaymentOrderStatus.CANCELLED
                assert account is None or account.balance == 0
