"""
List Transactions Use Case

Retrieves credit transaction history for a user with pagination.
"""
from libs.result import Result, Return, Error
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.app.use_cases.pagination import clamp_page
from src.domain.errors import ErrorCode
from .dtos import CreditTransactionResponseDTO, ListTransactionsResponseDTO


class ListTransactions:
    """
    Use case: View Credit Transactions

    Transactions are ordered by created_at DESC (most recent first).
    """

    def __init__(self, transaction_repo: CreditTransactionRepository):
        self.transaction_repo = transaction_repo

    async def execute(
        self, user_id: int, page: int = 1, page_size: int = 20
    ) -> Result[ListTransactionsResponseDTO]:
        """
        List transactions for a user with pagination.

        Args:
            user_id: User identifier
            page: 1-based page number (clamped to >= 1)
            page_size: Items per page (clamped to 1..100)

        Returns:
            Result[ListTransactionsResponseDTO]: Paginated transaction list
        """
        page, page_size, offset = clamp_page(page, page_size)
        try:
            transactions, total = await self.transaction_repo.get_by_user_id(
                user_id=user_id,
                limit=page_size,
                offset=offset,
            )
        except Exception as e:
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to list transactions", reason=str(e))
            )

        return Return.ok(
            ListTransactionsResponseDTO(
                transactions=[CreditTransactionResponseDTO.from_entity(txn) for txn in transactions],
                total=total,
                page=page,
                page_size=page_size,
            )
        )
