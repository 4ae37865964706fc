"""CreatePaymentOrder Use Case

Opens a credit purchase with a payment provider.
"""

import json
import logging
import secrets
import string
import time
from datetime import datetime, timedelta
from libs.result import Result, Return, Error
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.app.services.payment_provider import PaymentProviderRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.payment_order import PaymentOrder, PaymentOrderStatus
from .dtos import CreatePaymentOrderCommandDTO, PaymentOrderResponseDTO

logger = logging.getLogger(__name__)

ORDER_SUFFIX_ALPHABET = string.ascii_letters + string.digits


def generate_order_no(prefix: str = "OL") -> str:
    """prefix + unix seconds + 8 random letters and digits"""
    suffix = "".join(secrets.choice(ORDER_SUFFIX_ALPHABET) for _ in range(8))
    return f"{prefix}{int(time.time())}{suffix}"


class CreatePaymentOrder:
    """
    Use Case: Create a payment order

    Business Rules:
    1. payment_method must name a registered provider
    2. amount = credits x credit price (minor units)
    3. Order starts PENDING and expires after ttl_minutes
    4. The order is committed before the provider is called; a provider
       failure moves it to FAILED and returns PROVIDER_ERROR

    Flow:
    1. Resolve provider
    2. Persist PENDING order, commit
    3. Place order with provider
    4. Store provider payload (QR code / redirect URL), commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: PaymentOrderRepository,
        providers: PaymentProviderRegistry,
        ttl_minutes: int = 30,
        credit_price: int = 1,
        currency: str = "CNY",
        order_prefix: str = "OL",
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.providers = providers
        self.ttl_minutes = ttl_minutes
        self.credit_price = credit_price
        self.currency = currency
        self.order_prefix = order_prefix

    async def execute(self, command: CreatePaymentOrderCommandDTO) -> Result[PaymentOrderResponseDTO]:
        provider = self.providers.get(command.payment_method)
        if provider is None:
            return Return.err(
                Error(
                    code=ErrorCode.PROVIDER_NOT_FOUND,
                    message=f"Payment method {command.payment_method} is not available",
                    reason=f"available={self.providers.names()}",
                )
            )

        try:
            now = datetime.utcnow()
            order = await self.order_repo.create(
                PaymentOrder(
                    order_no=generate_order_no(self.order_prefix),
                    user_id=command.user_id,
                    credits=command.credits,
                    amount=command.credits * self.credit_price,
                    currency=self.currency,
                    payment_method=command.payment_method,
                    status=PaymentOrderStatus.PENDING,
                    expires_at=now + timedelta(minutes=self.ttl_minutes),
                    created_at=now,
                    updated_at=now,
                )
            )
            order_no = order.order_no
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to create payment order",
                    reason=str(e),
                )
            )

        try:
            response = await provider.create_order(order)
        except Exception as e:
            logger.error(f"Provider {provider.name} failed to create order {order_no}: {e}")
            try:
                await self.order_repo.transition_status(
                    order_no, PaymentOrderStatus.PENDING, PaymentOrderStatus.FAILED
                )
                await self.uow.commit()
            except Exception as mark_error:
                await self.uow.rollback()
                logger.error(f"Could not mark order {order_no} as failed: {mark_error}")
            return Return.err(
                Error(
                    code=ErrorCode.PROVIDER_ERROR,
                    message="Payment provider could not create the order",
                    reason=str(e),
                )
            )

        try:
            payment_data = dict(response.payment_data)
            if response.payment_url:
                payment_data.setdefault("payment_url", response.payment_url)
            if response.qr_code:
                payment_data.setdefault("qr_code", response.qr_code)
            order.payment_data = json.dumps(payment_data)

            await self.order_repo.update_payment_data(order.order_no, order.payment_data)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to store payment details",
                    reason=str(e),
                )
            )

        logger.info(
            f"Created payment order {order.order_no} for user {command.user_id}: "
            f"{command.credits} credits via {command.payment_method}"
        )
        return Return.ok(PaymentOrderResponseDTO.from_entity(order))
