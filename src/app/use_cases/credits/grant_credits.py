"""GrantCredits Use Case

Admin grant of credits to a user.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.credit_transaction import TransactionSource
from src.domain.errors import ErrorCode
from .dtos import GrantCreditsCommandDTO, CreditTransactionResponseDTO

logger = logging.getLogger(__name__)


class GrantCredits:
    """
    Use Case: Grant credits to a user

    Business Rules:
    1. Amount must be a positive integer
    2. Recorded as kind=earn, source=admin, source_id=admin ID
    3. Balance update and transaction are committed together
    """

    def __init__(self, uow: UnitOfWork, ledger: LedgerService):
        self.uow = uow
        self.ledger = ledger

    async def execute(self, command: GrantCreditsCommandDTO) -> Result[CreditTransactionResponseDTO]:
        try:
            result = await self.ledger.credit(
                user_id=command.user_id,
                amount=command.amount,
                source=TransactionSource.ADMIN,
                source_id=str(command.admin_id) if command.admin_id is not None else None,
                description=command.description or "Admin grant",
                metadata=command.metadata,
            )
            if result.is_err():
                await self.uow.rollback()
                return result

            await self.uow.commit()
            logger.info(f"Admin {command.admin_id} granted {command.amount} credits to user {command.user_id}")
            return Return.ok(CreditTransactionResponseDTO.from_entity(result.value))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to grant credits",
                    reason=str(e),
                )
            )
