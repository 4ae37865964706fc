"""Pricing Resolver

Determines how many credits a path costs from exact and inherited folder
rules.
"""

from typing import List, Optional
from src.app.repositories.pricing_rule_repository import PricingRuleRepository
from src.domain.pricing_rule import PricingRule


class PricingResolver:
    """
    Longest-prefix pricing resolution

    Domain Rules:
    - An enabled exact rule for the path wins, whatever its inheritable flag
    - Otherwise the enabled, inheritable folder rule with the longest path
      that is a strict prefix of the path applies
    - Prefixes are compared character by character ("/a" is a prefix of "/ab")
    - No matching rule means the path is free (0 credits)
    """

    def __init__(self, rule_repo: PricingRuleRepository):
        self.rule_repo = rule_repo

    @staticmethod
    def ancestor_paths(path: str) -> List[str]:
        """Every strict, non-empty character prefix of path, shortest first"""
        return [path[:i] for i in range(1, len(path))]

    async def resolve_rule(self, path: str) -> Optional[PricingRule]:
        """
        Find the rule that prices path

        Args:
            path: File or folder path

        Returns:
            The applicable PricingRule, or None if the path is free
        """
        exact = await self.rule_repo.find_enabled_exact(path)
        if exact:
            return exact

        candidates = await self.rule_repo.find_inheritable_folders(self.ancestor_paths(path))
        if not candidates:
            return None
        return max(candidates, key=lambda rule: len(rule.path))

    async def resolve(self, path: str) -> int:
        rule = await self.resolve_rule(path)
        return rule.credits if rule else 0
