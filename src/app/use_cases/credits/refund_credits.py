"""RefundCredits Use Case

Returns credits to a user's balance, e.g. to compensate a failed download.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.credit_transaction import TransactionSource
from src.domain.errors import ErrorCode
from .dtos import RefundCreditsCommandDTO, CreditTransactionResponseDTO

logger = logging.getLogger(__name__)


class RefundCredits:
    """
    Use Case: Refund credits to a user

    Business Rules:
    1. Balance increment: balance += amount
    2. Recorded as kind=refund; total_earned is unchanged
    3. Balance update and transaction are committed together
    """

    def __init__(self, uow: UnitOfWork, ledger: LedgerService):
        self.uow = uow
        self.ledger = ledger

    async def execute(self, command: RefundCreditsCommandDTO) -> Result[CreditTransactionResponseDTO]:
        """
        Execute credit refund

        Args:
            command: RefundCreditsCommandDTO with user_id, amount and reference

        Returns:
            Result[CreditTransactionResponseDTO]: Success with transaction details or error
        """
        try:
            metadata = dict(command.metadata or {})
            if command.admin_id is not None:
                metadata["admin_id"] = command.admin_id

            result = await self.ledger.refund(
                user_id=command.user_id,
                amount=command.amount,
                source=TransactionSource.ADMIN,
                source_id=command.source_id,
                description=command.description or "Refund",
                metadata=metadata or None,
            )
            if result.is_err():
                await self.uow.rollback()
                return result

            await self.uow.commit()
            logger.info(f"Refunded {command.amount} credits to user {command.user_id} ({command.source_id})")
            return Return.ok(CreditTransactionResponseDTO.from_entity(result.value))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to refund credits",
                    reason=str(e),
                )
            )
