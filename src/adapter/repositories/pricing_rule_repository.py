"""SQLAlchemy implementation of PricingRuleRepository"""

from typing import List, Optional, Sequence, Tuple
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.pricing_rule_repository import PricingRuleRepository
from src.domain.pricing_rule import PricingRule


class SqlAlchemyPricingRuleRepository(PricingRuleRepository):
    """
    SQLAlchemy implementation of PricingRuleRepository

    Ancestor lookups use IN over exact prefix strings rather than LIKE, so
    paths containing % or _ match literally.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_path(self, path: str, include_deleted: bool = False) -> Optional[PricingRule]:
        stmt = select(PricingRule).where(PricingRule.path == path)
        if not include_deleted:
            stmt = stmt.where(PricingRule.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_enabled_exact(self, path: str) -> Optional[PricingRule]:
        stmt = select(PricingRule).where(
            PricingRule.path == path,
            PricingRule.enabled == True,  # noqa: E712
            PricingRule.deleted_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_inheritable_folders(self, paths: Sequence[str]) -> List[PricingRule]:
        if not paths:
            return []
        stmt = select(PricingRule).where(
            PricingRule.path.in_(list(paths)),
            PricingRule.enabled == True,  # noqa: E712
            PricingRule.inheritable == True,  # noqa: E712
            PricingRule.is_folder == True,  # noqa: E712
            PricingRule.deleted_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save(self, rule: PricingRule) -> PricingRule:
        """
        Insert or update a pricing rule

        Args:
            rule: New or already persisted PricingRule

        Returns:
            Persisted PricingRule
        """
        self.session.add(rule)
        await self.session.flush()
        await self.session.refresh(rule)
        return rule

    async def list(self, limit: int = 20, offset: int = 0) -> Tuple[List[PricingRule], int]:
        count_stmt = select(func.count()).select_from(PricingRule).where(
            PricingRule.deleted_at.is_(None)
        )
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar_one()

        stmt = (
            select(PricingRule)
            .where(PricingRule.deleted_at.is_(None))
            .order_by(PricingRule.created_at.desc(), PricingRule.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
