"""SQLAlchemy implementation of RedeemCodeRepository"""

from typing import List, Optional, Tuple
from datetime import datetime
from sqlalchemy import update, or_
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.redeem_code_repository import RedeemCodeRepository
from src.domain.redeem_code import RedeemCode, RedeemCodeUsage


class SqlAlchemyRedeemCodeRepository(RedeemCodeRepository):
    """
    SQLAlchemy implementation of RedeemCodeRepository

    Features:
    - Conditional increment of used_count (never exceeds max_uses)
    - Immutable usage rows
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_many(self, codes: List[RedeemCode]) -> List[RedeemCode]:
        self.session.add_all(codes)
        await self.session.flush()
        for code in codes:
            await self.session.refresh(code)
        return codes

    async def get_by_code(self, code: str) -> Optional[RedeemCode]:
        stmt = (
            select(RedeemCode)
            .where(RedeemCode.code == code)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def try_consume(self, code_id: int, now: datetime) -> bool:
        """
        Consume one use of a redeem code in a single UPDATE

        Args:
            code_id: RedeemCode ID
            now: Current time for the expiry check

        Returns:
            True if exactly one row was updated
        """
        stmt = (
            update(RedeemCode)
            .where(
                RedeemCode.id == code_id,
                RedeemCode.enabled == True,  # noqa: E712
                RedeemCode.used_count < RedeemCode.max_uses,
                or_(RedeemCode.expires_at.is_(None), RedeemCode.expires_at > now),
            )
            .values(used_count=RedeemCode.used_count + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def create_usage(self, usage: RedeemCodeUsage) -> RedeemCodeUsage:
        self.session.add(usage)
        await self.session.flush()
        await self.session.refresh(usage)
        return usage

    async def list(self, limit: int = 20, offset: int = 0) -> Tuple[List[RedeemCode], int]:
        count_result = await self.session.execute(select(func.count()).select_from(RedeemCode))
        total = count_result.scalar_one()

        stmt = (
            select(RedeemCode)
            .order_by(RedeemCode.created_at.desc(), RedeemCode.id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
