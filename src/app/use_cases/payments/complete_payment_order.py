"""CompletePaymentOrder Use Case

Settles a paid order and credits the buyer.
"""

import json
import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.credit_transaction import TransactionSource
from src.domain.errors import ErrorCode
from src.domain.payment_order import PaymentOrder, PaymentOrderStatus, can_transition
from .dtos import CompletePaymentOrderCommandDTO, CompletePaymentResponseDTO

logger = logging.getLogger(__name__)


class CompletePaymentOrder:
    """
    Use Case: Complete a payment order

    Business Rules:
    1. Only PENDING orders can be completed
    2. Expiry is authoritative: past expires_at + grace the order becomes
       EXPIRED and ORDER_EXPIRED is returned, whether or not the sweep got
       there first
    3. PENDING -> PAID is a conditional update; the credit grant runs in the
       same unit of work, so completing twice credits once
    4. A lost race (cancel, sweep, concurrent completion) returns
       INVALID_ORDER_STATE or ORDER_EXPIRED and grants nothing
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: PaymentOrderRepository,
        ledger: LedgerService,
        grace_seconds: int = 0,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.ledger = ledger
        self.grace_seconds = grace_seconds

    async def execute(self, command: CompletePaymentOrderCommandDTO) -> Result[CompletePaymentResponseDTO]:
        """
        Execute order completion

        Args:
            command: CompletePaymentOrderCommandDTO

        Returns:
            Result[CompletePaymentResponseDTO]: Granted credits or error
        """
        try:
            order = await self.order_repo.get_by_order_no(command.order_no)
            if not order:
                return Return.err(
                    Error(
                        code=ErrorCode.ORDER_NOT_FOUND,
                        message=f"Payment order {command.order_no} not found",
                    )
                )

            order_no = order.order_no
            if not can_transition(order.status, PaymentOrderStatus.PAID):
                return Return.err(self._not_pending(order))

            now = datetime.utcnow()
            if order.is_expired(now, self.grace_seconds):
                expired = await self.order_repo.transition_status(
                    order_no, PaymentOrderStatus.PENDING, PaymentOrderStatus.EXPIRED
                )
                await self.uow.commit()
                if not expired:
                    return await self._lost_race(order_no)
                logger.warning(f"Payment order {order.order_no} completed after expiry; marked expired")
                return Return.err(self._expired(order))

            paid = await self.order_repo.transition_status(
                order_no,
                PaymentOrderStatus.PENDING,
                PaymentOrderStatus.PAID,
                paid_at=command.paid_at or now,
                provider_transaction_id=command.provider_transaction_id,
                payment_data=json.dumps(command.payment_data, default=str) if command.payment_data else order.payment_data,
            )
            if not paid:
                await self.uow.rollback()
                return await self._lost_race(order_no)

            result = await self.ledger.credit(
                user_id=order.user_id,
                amount=order.credits,
                source=TransactionSource.PURCHASE,
                source_id=order.order_no,
                description=f"Purchase of {order.credits} credits",
                metadata={"amount": order.amount, "currency": order.currency, "payment_method": order.payment_method},
            )
            if result.is_err():
                await self.uow.rollback()
                return result

            await self.uow.commit()

            transaction = result.value
            logger.info(f"Payment order {order.order_no} paid; granted {order.credits} credits to user {order.user_id}")
            return Return.ok(
                CompletePaymentResponseDTO(
                    order_no=order.order_no,
                    status=PaymentOrderStatus.PAID.value,
                    credits_granted=order.credits,
                    balance=transaction.balance_after,
                    transaction_id=transaction.id,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to complete payment order",
                    reason=str(e),
                )
            )

    async def _lost_race(self, order_no: str) -> Result:
        current = await self.order_repo.get_by_order_no(order_no)
        if current is None:
            return Return.err(Error(code=ErrorCode.ORDER_NOT_FOUND, message=f"Payment order {order_no} not found"))
        return Return.err(self._not_pending(current))

    def _not_pending(self, order: PaymentOrder) -> Error:
        if order.status == PaymentOrderStatus.EXPIRED:
            return self._expired(order)
        return Error(
            code=ErrorCode.INVALID_ORDER_STATE,
            message=f"Payment order {order.order_no} is {order.status.value}",
            reason=f"status={order.status.value}",
        )

    @staticmethod
    def _expired(order: PaymentOrder) -> Error:
        return Error(
            code=ErrorCode.ORDER_EXPIRED,
            message=f"Payment order {order.order_no} has expired",
            reason=f"expires_at={order.expires_at.isoformat()}",
        )
