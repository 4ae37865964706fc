"""Get Balance Use Case

Retrieves a user's current credit balance, opening the account on first
access.
"""

from libs.result import Result, Return, Error
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from .dtos import BalanceResponseDTO


class GetBalance:
    """
    Get Balance Use Case

    Users without an account get an empty one, which is committed so
    later reads see the same row.
    """

    def __init__(self, uow: UnitOfWork, ledger: LedgerService):
        self.uow = uow
        self.ledger = ledger

    async def execute(self, user_id: int) -> Result[BalanceResponseDTO]:
        """
        Execute get balance operation

        Args:
            user_id: The user identifier

        Returns:
            Result[BalanceResponseDTO]: Success with balance data or error
        """
        try:
            account = await self.ledger.get_or_create_account(user_id)
            await self.uow.commit()

            return Return.ok(
                BalanceResponseDTO(
                    user_id=account.user_id,
                    balance=account.balance,
                    total_earned=account.total_earned,
                    total_spent=account.total_spent,
                    last_updated=account.updated_at,
                )
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to load credit balance",
                    reason=str(e),
                )
            )
