"""CancelPaymentOrder Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.payment_order import PaymentOrderStatus, can_transition
from .dtos import PaymentOrderResponseDTO

logger = logging.getLogger(__name__)


class CancelPaymentOrder:
    """
    Use Case: Cancel a pending order

    Business Rules:
    1. Only the order's owner may cancel it (FORBIDDEN otherwise)
    2. Only PENDING orders can be cancelled; the status change is conditional
       so a concurrent completion wins or loses cleanly
    """

    def __init__(self, uow: UnitOfWork, order_repo: PaymentOrderRepository):
        self.uow = uow
        self.order_repo = order_repo

    async def execute(self, order_no: str, user_id: int) -> Result[PaymentOrderResponseDTO]:
        try:
            order = await self.order_repo.get_by_order_no(order_no)
            if not order:
                return Return.err(
                    Error(code=ErrorCode.ORDER_NOT_FOUND, message=f"Payment order {order_no} not found")
                )

            if order.user_id != user_id:
                return Return.err(
                    Error(
                        code=ErrorCode.FORBIDDEN,
                        message="Payment order belongs to another user",
                        reason=f"order_user={order.user_id}, user={user_id}",
                    )
                )

            seen_status = order.status
            cancelled = False
            if can_transition(seen_status, PaymentOrderStatus.CANCELLED):
                cancelled = await self.order_repo.transition_status(
                    order_no, seen_status, PaymentOrderStatus.CANCELLED
                )
            if not cancelled:
                await self.uow.rollback()
                current = await self.order_repo.get_by_order_no(order_no)
                status = (current.status if current else seen_status).value
                return Return.err(
                    Error(
                        code=ErrorCode.INVALID_ORDER_STATE,
                        message=f"Payment order {order_no} is {status} and cannot be cancelled",
                        reason=f"status={status}",
                    )
                )

            await self.uow.commit()
            order = await self.order_repo.get_by_order_no(order_no)

            logger.info(f"User {user_id} cancelled payment order {order_no}")
            return Return.ok(PaymentOrderResponseDTO.from_entity(order))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to cancel payment order", reason=str(e))
            )
