"""HandlePaymentNotification Use Case

Processes an asynchronous payment notification from a provider.
"""

import logging
from typing import Any, Mapping, Union
from libs.result import Result, Return, Error
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.services.payment_provider import PaymentProviderRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.payment_order import PaymentOrderStatus
from .complete_payment_order import CompletePaymentOrder
from .dtos import CompletePaymentOrderCommandDTO, NotificationResultDTO

logger = logging.getLogger(__name__)


class HandlePaymentNotification:
    """
    Use Case: Handle a provider payment notification

    Business Rules:
    1. The signature is verified before anything is read or written;
       failure -> SIGNATURE_INVALID and nothing changes
    2. A valid notification for an unpaid trade moves a PENDING order to FAILED
    3. The paid amount must equal the order amount (AMOUNT_MISMATCH otherwise,
       without mutation)
    4. A repeated notification for an order already PAID with the same
       provider transaction is acknowledged without crediting again
    5. Everything else is settled by CompletePaymentOrder
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: PaymentOrderRepository,
        providers: PaymentProviderRegistry,
        complete_order: CompletePaymentOrder,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.providers = providers
        self.complete_order = complete_order

    async def execute(
        self, provider_name: str, raw: Union[Mapping[str, Any], str, bytes]
    ) -> Result[NotificationResultDTO]:
        provider = self.providers.get(provider_name)
        if provider is None:
            return Return.err(
                Error(code=ErrorCode.PROVIDER_NOT_FOUND, message=f"Unknown payment provider {provider_name}")
            )

        try:
            verification = await provider.verify_callback(raw)
        except Exception as e:
            logger.warning(f"Verification of {provider_name} notification raised: {e}")
            verification = None

        if verification is None or not verification.valid:
            return Return.err(
                Error(
                    code=ErrorCode.SIGNATURE_INVALID,
                    message="Payment notification signature is invalid",
                    reason=verification.message if verification else "verification error",
                )
            )

        try:
            order = await self.order_repo.get_by_order_no(verification.order_no or "")
            if not order:
                return Return.err(
                    Error(
                        code=ErrorCode.ORDER_NOT_FOUND,
                        message=f"Payment order {verification.order_no} not found",
                    )
                )

            order_no = order.order_no
            if order.status == PaymentOrderStatus.PAID and (
                verification.provider_transaction_id is None
                or order.provider_transaction_id == verification.provider_transaction_id
            ):
                logger.info(f"Duplicate notification for paid order {order.order_no} acknowledged")
                return Return.ok(NotificationResultDTO(order_no=order.order_no, status=order.status.value))

            if not verification.paid:
                failed = await self.order_repo.transition_status(
                    order.order_no, PaymentOrderStatus.PENDING, PaymentOrderStatus.FAILED
                )
                await self.uow.commit()
                current = await self.order_repo.get_by_order_no(order.order_no)
                logger.info(f"{provider_name} reported order {order.order_no} unpaid (marked failed: {failed})")
                return Return.ok(NotificationResultDTO(order_no=order.order_no, status=current.status.value))

            if verification.amount is not None and verification.amount != order.amount:
                logger.error(
                    f"Amount mismatch for order {order.order_no}: "
                    f"paid {verification.amount}, expected {order.amount}"
                )
                return Return.err(
                    Error(
                        code=ErrorCode.AMOUNT_MISMATCH,
                        message="Paid amount does not match the order amount",
                        reason=f"paid={verification.amount}, expected={order.amount}",
                    )
                )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to process payment notification", reason=str(e))
            )

        result = await self.complete_order.execute(
            CompletePaymentOrderCommandDTO(
                order_no=order_no,
                provider_transaction_id=verification.provider_transaction_id,
                paid_at=verification.paid_at,
                payment_data=verification.payment_data,
            )
        )
        if result.is_err():
            return result

        return Return.ok(
            NotificationResultDTO(order_no=order_no, status=result.value.status, credited=True)
        )
