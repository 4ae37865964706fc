from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.domain.errors import ErrorCode
from .dtos import PaymentOrderResponseDTO


class GetPaymentOrder:
    """Use Case: Read one order (owner only, unless user_id is None for admins)"""

    def __init__(self, order_repo: PaymentOrderRepository):
        self.order_repo = order_repo

    async def execute(self, order_no: str, user_id: Optional[int]) -> Result[PaymentOrderResponseDTO]:
        order = await self.order_repo.get_by_order_no(order_no)
        if not order:
            return Return.err(
                Error(code=ErrorCode.ORDER_NOT_FOUND, message=f"Payment order {order_no} not found")
            )
        if user_id is not None and order.user_id != user_id:
            return Return.err(
                Error(code=ErrorCode.FORBIDDEN, message="Payment order belongs to another user")
            )
        return Return.ok(PaymentOrderResponseDTO.from_entity(order))
