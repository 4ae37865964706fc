"""Credit Transaction Repository Interface

Defines the contract for credit transaction persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple
from src.domain.credit_transaction import CreditTransaction


class CreditTransactionRepository(ABC):
    """
    Repository interface for CreditTransaction persistence

    Transactions are immutable and append-only; there is no update or delete.
    """

    @abstractmethod
    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Append a new credit transaction

        Args:
            transaction: CreditTransaction entity to persist

        Returns:
            Created CreditTransaction with generated ID
        """
        pass

    @abstractmethod
    async def get_by_user_id(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[CreditTransaction], int]:
        """
        Retrieve a page of a user's transactions, newest first

        Returns:
            (transactions, total count)
        """
        pass

    @abstractmethod
    async def list_by_account(self, account_id: int) -> List[CreditTransaction]:
        """Retrieve all transactions of an account in creation (id) order"""
        pass
