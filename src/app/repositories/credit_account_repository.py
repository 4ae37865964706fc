"""Credit Account Repository Interface

Defines the contract for credit account persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.credit_account import CreditAccount


class CreditAccountRepository(ABC):
    """
    Repository interface for CreditAccount persistence

    Balance changes go through compare_and_set_balance, an optimistic
    conditional update: it only succeeds if the stored balance still equals
    the value the caller read.
    """

    @abstractmethod
    async def get_by_user_id(self, user_id: int) -> Optional[CreditAccount]:
        """
        Retrieve account by user ID

        Always reads the current row, never a cached instance, so a retry
        after a lost compare-and-set sees the winner's balance.

        Args:
            user_id: User identifier

        Returns:
            CreditAccount if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, account: CreditAccount) -> Optional[CreditAccount]:
        """
        Create a new credit account

        Returns:
            Created CreditAccount, or None if the user already has one
            (the surrounding transaction stays usable)
        """
        pass

    @abstractmethod
    async def compare_and_set_balance(
        self,
        account_id: int,
        expected_balance: int,
        new_balance: int,
        earned_delta: int = 0,
        spent_delta: int = 0,
    ) -> bool:
        """
        Atomically set the balance if it still equals expected_balance

        Args:
            account_id: Account ID
            expected_balance: Balance observed by the caller
            new_balance: Balance to store
            earned_delta: Amount added to total_earned
            spent_delta: Amount added to total_spent

        Returns:
            True if the row was updated, False if another writer got there first
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[CreditAccount]:
        """Retrieve every account (used by reconciliation)"""
        pass
