"""Ledger Service

The only code path that changes a credit balance. Every mutation is an
optimistic compare-and-set on the account row followed by an append to the
transaction history, both inside the caller's unit of work.
"""

import json
import logging
from typing import Any, Dict, Optional
from libs.result import Result, Return, Error
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.domain.credit_account import CreditAccount
from src.domain.credit_transaction import CreditTransaction, TransactionKind, TransactionSource
from src.domain.errors import ErrorCode

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Credit ledger engine

    Domain Rules:
    - Balance never goes negative (debit fails with INSUFFICIENT_BALANCE)
    - Every balance change appends exactly one CreditTransaction whose
      balance_after is the balance the change produced
    - Amounts are positive integers; anything else fails with INVALID_AMOUNT
    - The service never commits: the caller commits or rolls back the
      balance update and its transaction row together

    Concurrency:
    A mutation reads the account, computes the new balance and writes it only
    if the stored balance is still the one it read. A lost race re-reads and
    tries again, up to max_retries attempts, then fails with CONCURRENT_UPDATE.
    """

    def __init__(
        self,
        account_repo: CreditAccountRepository,
        transaction_repo: CreditTransactionRepository,
        max_retries: int = 5,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.max_retries = max(1, max_retries)

    async def get_or_create_account(self, user_id: int) -> CreditAccount:
        """
        Return the user's account, creating an empty one on first access

        Args:
            user_id: User identifier

        Returns:
            CreditAccount (existing or newly created)
        """
        account = await self.account_repo.get_by_user_id(user_id)
        if account:
            return account

        created = await self.account_repo.create(CreditAccount(user_id=user_id))
        if created:
            logger.info(f"Created credit account {created.id} for user {user_id}")
            return created

        # Lost a create race: another request inserted the row first
        account = await self.account_repo.get_by_user_id(user_id)
        if account is None:
            raise RuntimeError(f"Credit account for user {user_id} vanished after a create conflict")
        return account

    async def credit(
        self,
        user_id: int,
        amount: int,
        source: TransactionSource,
        source_id: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Result[CreditTransaction]:
        """
        Add credits to a balance (kind=earn)

        Args:
            user_id: User identifier
            amount: Positive number of credits
            source: What granted the credits
            source_id: Order number, redeem code, ...
            description: Human readable description
            metadata: Optional extra data stored as JSON

        Returns:
            Result[CreditTransaction]: The appended transaction or an error
        """
        return await self._apply(
            user_id, amount, TransactionKind.EARN, source, source_id, description, metadata
        )

    async def debit(
        self,
        user_id: int,
        amount: int,
        source: TransactionSource,
        source_id: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Result[CreditTransaction]:
        """
        Remove credits from a balance (kind=spend, amount stored negative)

        Returns:
            Result[CreditTransaction]: The appended transaction, or
            INSUFFICIENT_BALANCE when the balance is below amount
        """
        return await self._apply(
            user_id, amount, TransactionKind.SPEND, source, source_id, description, metadata
        )

    async def refund(
        self,
        user_id: int,
        amount: int,
        source: TransactionSource,
        source_id: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Result[CreditTransaction]:
        """Return credits to a balance (kind=refund); total_earned is left alone"""
        return await self._apply(
            user_id, amount, TransactionKind.REFUND, source, source_id, description, metadata
        )

    async def _apply(
        self,
        user_id: int,
        amount: int,
        kind: TransactionKind,
        source: TransactionSource,
        source_id: Optional[str],
        description: Optional[str],
        metadata: Optional[Dict[str, Any]],
    ) -> Result[CreditTransaction]:
        if not _is_positive_int(amount):
            return Return.err(
                Error(
                    code=ErrorCode.INVALID_AMOUNT,
                    message="Amount must be a positive integer",
                    reason=f"amount={amount!r}",
                )
            )

        for attempt in range(1, self.max_retries + 1):
            account = await self.get_or_create_account(user_id)
            balance_before = account.balance

            if kind == TransactionKind.SPEND:
                if balance_before < amount:
                    return Return.err(
                        Error(
                            code=ErrorCode.INSUFFICIENT_BALANCE,
                            message=f"Insufficient credits. Required: {amount}, Available: {balance_before}",
                            reason=f"balance={balance_before}, required={amount}",
                        )
                    )
                signed_amount = -amount
                earned_delta, spent_delta = 0, amount
            else:
                signed_amount = amount
                earned_delta = amount if kind == TransactionKind.EARN else 0
                spent_delta = 0

            balance_after = balance_before + signed_amount

            updated = await self.account_repo.compare_and_set_balance(
                account.id,
                expected_balance=balance_before,
                new_balance=balance_after,
                earned_delta=earned_delta,
                spent_delta=spent_delta,
            )
            if not updated:
                logger.debug(
                    f"Balance of account {account.id} changed concurrently "
                    f"(attempt {attempt}/{self.max_retries})"
                )
                continue

            transaction = CreditTransaction(
                user_id=user_id,
                account_id=account.id,
                kind=kind,
                amount=signed_amount,
                balance_after=balance_after,
                source=source,
                source_id=source_id,
                description=description,
                metadata_json=json.dumps(metadata) if metadata else None,
            )
            created = await self.transaction_repo.create(transaction)

            logger.info(
                f"Ledger {kind.value} of {amount} for user {user_id} "
                f"({source.value}:{source_id}): {balance_before} -> {balance_after}"
            )
            return Return.ok(created)

        logger.warning(f"Giving up on {kind.value} for user {user_id} after {self.max_retries} conflicts")
        return Return.err(
            Error(
                code=ErrorCode.CONCURRENT_UPDATE,
                message="Balance was modified concurrently, please retry",
                reason=f"{self.max_retries} compare-and-set attempts failed",
            )
        )


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
