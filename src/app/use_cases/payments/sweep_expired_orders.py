"""SweepExpiredOrders Use Case"""

import logging
from datetime import datetime, timedelta
from libs.result import Result, Return, Error
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from .dtos import SweepResultDTO

logger = logging.getLogger(__name__)


class SweepExpiredOrders:
    """
    Use Case: Expire overdue pending orders

    One conditional bulk update: PENDING orders whose expires_at + grace is in
    the past become EXPIRED. PAID and other terminal orders are never touched.
    The cutoff is the same one CompletePaymentOrder applies.
    """

    def __init__(self, uow: UnitOfWork, order_repo: PaymentOrderRepository, grace_seconds: int = 0):
        self.uow = uow
        self.order_repo = order_repo
        self.grace_seconds = grace_seconds

    async def execute(self) -> Result[SweepResultDTO]:
        cutoff = datetime.utcnow() - timedelta(seconds=self.grace_seconds)
        try:
            count = await self.order_repo.expire_overdue(cutoff)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Payment order sweep failed: {e}")
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to expire payment orders", reason=str(e))
            )

        if count:
            logger.info(f"Expired {count} overdue payment orders")
        return Return.ok(SweepResultDTO(expired_count=count, cutoff=cutoff))
