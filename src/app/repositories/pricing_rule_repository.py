"""Pricing Rule Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple
from src.domain.pricing_rule import PricingRule


class PricingRuleRepository(ABC):
    """
    Repository interface for PricingRule persistence

    Deletion is soft: deleted rows keep their unique path and are revived
    when a rule is set on that path again.
    """

    @abstractmethod
    async def get_by_path(self, path: str, include_deleted: bool = False) -> Optional[PricingRule]:
        """
        Retrieve the rule stored for exactly this path

        Args:
            path: Exact path
            include_deleted: Also return a soft-deleted row

        Returns:
            PricingRule if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_enabled_exact(self, path: str) -> Optional[PricingRule]:
        """Enabled, non-deleted rule for exactly this path"""
        pass

    @abstractmethod
    async def find_inheritable_folders(self, paths: Sequence[str]) -> List[PricingRule]:
        """
        Enabled, non-deleted, inheritable folder rules whose path is in paths

        Args:
            paths: Candidate ancestor paths

        Returns:
            Matching rules in no particular order
        """
        pass

    @abstractmethod
    async def save(self, rule: PricingRule) -> PricingRule:
        """Insert or update a rule"""
        pass

    @abstractmethod
    async def list(self, limit: int = 20, offset: int = 0) -> Tuple[List[PricingRule], int]:
        """Page of non-deleted rules, newest first, with total count"""
        pass
