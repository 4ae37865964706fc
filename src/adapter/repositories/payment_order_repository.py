"""SQLAlchemy implementation of PaymentOrderRepository

Every status change is an UPDATE guarded by the current status, which makes
complete, cancel and the expiry sweep mutually exclusive per order.
"""

from typing import Any, List, Optional, Tuple
from datetime import datetime
from sqlalchemy import update
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.domain.payment_order import PaymentOrder, PaymentOrderStatus, can_transition


class SqlAlchemyPaymentOrderRepository(PaymentOrderRepository):
    """SQLAlchemy implementation of PaymentOrderRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, order: PaymentOrder) -> PaymentOrder:
        """
        Create a new payment order

        Args:
            order: PaymentOrder entity to persist

        Returns:
            Created PaymentOrder with generated ID
        """
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def get_by_order_no(self, order_no: str) -> Optional[PaymentOrder]:
        stmt = (
            select(PaymentOrder)
            .where(PaymentOrder.order_no == order_no)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def transition_status(
        self,
        order_no: str,
        expected: PaymentOrderStatus,
        target: PaymentOrderStatus,
        **values: Any,
    ) -> bool:
        if not can_transition(expected, target):
            return False
        stmt = (
            update(PaymentOrder)
            .where(PaymentOrder.order_no == order_no, PaymentOrder.status == expected)
            .values(status=target, updated_at=datetime.utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def update_payment_data(self, order_no: str, payment_data: str) -> None:
        stmt = (
            update(PaymentOrder)
            .where(PaymentOrder.order_no == order_no)
            .values(payment_data=payment_data, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def get_by_user_id(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[PaymentOrder], int]:
        """
        Retrieve a user's orders, newest first

        Args:
            user_id: User identifier
            limit: Maximum number of orders to return
            offset: Offset for pagination

        Returns:
            Tuple of (orders, total count)
        """
        count_stmt = select(func.count()).select_from(PaymentOrder).where(
            PaymentOrder.user_id == user_id
        )
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar_one()

        stmt = (
            select(PaymentOrder)
            .where(PaymentOrder.user_id == user_id)
            .order_by(PaymentOrder.created_at.desc(), PaymentOrder.id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def expire_overdue(self, cutoff: datetime) -> int:
        stmt = (
            update(PaymentOrder)
            .where(
                PaymentOrder.status == PaymentOrderStatus.PENDING,
                PaymentOrder.expires_at < cutoff,
            )
            .values(status=PaymentOrderStatus.EXPIRED, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
