"""ProcessDownload Use Case

Charges a user for downloading a path.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.ledger_service import LedgerService
from src.app.services.pricing_resolver import PricingResolver
from src.app.services.unit_of_work import UnitOfWork
from src.domain.credit_transaction import TransactionSource
from src.domain.errors import ErrorCode
from .dtos import DownloadResponseDTO

logger = logging.getLogger(__name__)


class ProcessDownload:
    """
    Use Case: Charge for a download

    Business Rules:
    1. Price comes from the pricing resolver (exact rule, else nearest
       inheritable folder rule, else free)
    2. Free downloads write nothing to the ledger
    3. Priced downloads debit the price (source=download, source_id=path);
       INSUFFICIENT_BALANCE leaves the balance untouched
    """

    def __init__(self, uow: UnitOfWork, ledger: LedgerService, resolver: PricingResolver):
        self.uow = uow
        self.ledger = ledger
        self.resolver = resolver

    async def execute(self, user_id: int, path: str) -> Result[DownloadResponseDTO]:
        """
        Execute download charge

        Args:
            user_id: Downloading user
            path: File path being downloaded

        Returns:
            Result[DownloadResponseDTO]: Charge details or error
        """
        try:
            required = await self.resolver.resolve(path)

            if required <= 0:
                account = await self.ledger.get_or_create_account(user_id)
                await self.uow.commit()
                return Return.ok(
                    DownloadResponseDTO(path=path, credits_charged=0, balance=account.balance)
                )

            result = await self.ledger.debit(
                user_id=user_id,
                amount=required,
                source=TransactionSource.DOWNLOAD,
                source_id=path,
                description=f"Download {path}",
            )
            if result.is_err():
                await self.uow.rollback()
                return result

            await self.uow.commit()
            transaction = result.value
            logger.info(f"Charged user {user_id} {required} credits for {path}")

            return Return.ok(
                DownloadResponseDTO(
                    path=path,
                    credits_charged=required,
                    balance=transaction.balance_after,
                    transaction_id=transaction.id,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to process download",
                    reason=str(e),
                )
            )
