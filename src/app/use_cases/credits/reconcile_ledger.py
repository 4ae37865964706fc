"""ReconcileLedger Use Case

Checks every account against its transaction history.
"""

import logging
import time
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.domain.errors import ErrorCode
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile credit accounts against transactions

    Business Rules:
    1. Replaying an account's transactions in id order must reproduce its balance
    2. Every transaction's balance_after must equal the running sum at that point
    3. No running sum may be negative
    4. Read-only: discrepancies are reported and logged, never repaired

    Flow:
    1. Get all accounts
    2. For each account replay its transactions
    3. Return reconciliation result with all discrepancies
    """

    def __init__(
        self,
        account_repo: CreditAccountRepository,
        transaction_repo: CreditTransactionRepository,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        """
        Execute ledger reconciliation

        Returns:
            Result[ReconciliationResultDTO]: Reconciliation result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting credit ledger reconciliation")

            accounts = await self.account_repo.get_all()
            total_accounts = len(accounts)
            logger.info(f"Found {total_accounts} accounts to reconcile")

            discrepancies: list[LedgerDiscrepancyDTO] = []

            for account in accounts:
                transactions = await self.transaction_repo.list_by_account(account.id)

                running = 0
                broken_id: Optional[int] = None
                for txn in transactions:
                    running += txn.amount
                    if broken_id is None and (txn.balance_after != running or running < 0):
                        broken_id = txn.id

                if account.balance != running or broken_id is not None:
                    discrepancy = LedgerDiscrepancyDTO(
                        user_id=account.user_id,
                        account_id=account.id,
                        account_balance=account.balance,
                        calculated_balance=running,
                        discrepancy=account.balance - running,
                        broken_transaction_id=broken_id,
                    )
                    discrepancies.append(discrepancy)

                    logger.warning(
                        f"Discrepancy found for user {account.user_id} "
                        f"(account_id={account.id}): "
                        f"account_balance={account.balance}, "
                        f"transaction_sum={running}, "
                        f"broken_transaction_id={broken_id}"
                    )

            execution_time_ms = int((time.time() - start_time) * 1000)

            response = ReconciliationResultDTO(
                total_accounts_checked=total_accounts,
                discrepancies_found=len(discrepancies),
                discrepancies=discrepancies,
                reconciliation_time=reconciliation_time,
                execution_time_ms=execution_time_ms,
            )

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {total_accounts} accounts in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {total_accounts} accounts balanced "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(response)

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to reconcile credit ledger",
                    reason=str(e),
                )
            )
