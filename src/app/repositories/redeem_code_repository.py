"""Redeem Code Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from src.domain.redeem_code import RedeemCode, RedeemCodeUsage


class RedeemCodeRepository(ABC):
    """
    Repository interface for RedeemCode and RedeemCodeUsage persistence

    try_consume is the exclusivity point of a redemption: a single
    conditional increment that can never push used_count past max_uses.
    """

    @abstractmethod
    async def create_many(self, codes: List[RedeemCode]) -> List[RedeemCode]:
        pass

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[RedeemCode]:
        """
        Retrieve a redeem code by its code string

        Returns:
            RedeemCode if found (enabled or not), None otherwise
        """
        pass

    @abstractmethod
    async def try_consume(self, code_id: int, now: datetime) -> bool:
        """
        Increment used_count if the code is still enabled, unexpired and
        below max_uses

        Args:
            code_id: RedeemCode ID
            now: Current time for the expiry check

        Returns:
            True if one use was consumed, False otherwise
        """
        pass

    @abstractmethod
    async def create_usage(self, usage: RedeemCodeUsage) -> RedeemCodeUsage:
        pass

    @abstractmethod
    async def list(self, limit: int = 20, offset: int = 0) -> Tuple[List[RedeemCode], int]:
        """Page of codes, newest first, with total count"""
        pass
