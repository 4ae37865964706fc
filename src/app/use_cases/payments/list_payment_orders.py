from libs.result import Result, Return, Error
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.use_cases.pagination import clamp_page
from src.domain.errors import ErrorCode
from .dtos import ListPaymentOrdersResponseDTO, PaymentOrderResponseDTO


class ListPaymentOrders:
    """Use Case: Page through a user's orders, newest first"""

    def __init__(self, order_repo: PaymentOrderRepository):
        self.order_repo = order_repo

    async def execute(self, user_id: int, page: int = 1, page_size: int = 20) -> Result[ListPaymentOrdersResponseDTO]:
        page, page_size, offset = clamp_page(page, page_size)
        try:
            orders, total = await self.order_repo.get_by_user_id(user_id, limit=page_size, offset=offset)
        except Exception as e:
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to list payment orders", reason=str(e))
            )

        return Return.ok(
            ListPaymentOrdersResponseDTO(
                orders=[PaymentOrderResponseDTO.from_entity(order) for order in orders],
                total=total,
                page=page,
                page_size=page_size,
            )
        )
