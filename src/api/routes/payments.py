"""Payments API Routes

Credit purchases: order lifecycle and provider notifications.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.payments_request import CreatePaymentOrderRequestSchema
from src.app.use_cases.payments.dtos import (
    CompletePaymentOrderCommandDTO,
    CompletePaymentResponseDTO,
    CreatePaymentOrderCommandDTO,
    ListPaymentOrdersResponseDTO,
    PaymentOrderResponseDTO,
)
from src.app.use_cases.payments.create_payment_order import CreatePaymentOrder
from src.app.use_cases.payments.complete_payment_order import CompletePaymentOrder
from src.app.use_cases.payments.cancel_payment_order import CancelPaymentOrder
from src.app.use_cases.payments.get_payment_order import GetPaymentOrder
from src.app.use_cases.payments.list_payment_orders import ListPaymentOrders
from src.app.use_cases.payments.handle_payment_notification import HandlePaymentNotification
from src.app.services.payment_provider import PaymentProviderRegistry
from src.adapter.repositories.payment_order_repository import SqlAlchemyPaymentOrderRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    ADMIN_ROLE,
    build_ledger,
    get_current_user_id,
    get_payment_providers,
    get_session,
    require_admin,
)
from src.api.error import ClientError, status_for
from src.domain.errors import ErrorCode
from libs.result import Error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])

SETTLED_OUTCOMES = (
    ErrorCode.ORDER_EXPIRED.value,
    ErrorCode.INVALID_ORDER_STATE.value,
    ErrorCode.AMOUNT_MISMATCH.value,
)


def _complete_use_case(session: AsyncSession) -> CompletePaymentOrder:
    return CompletePaymentOrder(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyPaymentOrderRepository(session),
        build_ledger(session),
        grace_seconds=ApplicationConfig.PAYMENT_ORDER_SETTLEMENT_GRACE_SECONDS,
    )


@router.post("/orders", response_model=PaymentOrderResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: CreatePaymentOrderRequestSchema,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    providers: PaymentProviderRegistry = Depends(get_payment_providers),
):
    """
    Start a credit purchase.

    **Request body:**
    - `credits` (required): Credits to buy
    - `payment_method` (required): Enabled provider name

    **Returns:**
    - 201: PENDING order with the provider's QR code or payment URL
    - 404: Payment method not enabled
    - 502: Provider rejected the order (the order is marked failed)
    """
    use_case = CreatePaymentOrder(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyPaymentOrderRepository(session),
        providers,
        ttl_minutes=ApplicationConfig.PAYMENT_ORDER_TTL_MINUTES,
        credit_price=ApplicationConfig.CREDIT_PRICE_MINOR_UNITS,
        currency=ApplicationConfig.DEFAULT_CURRENCY,
    )
    command = CreatePaymentOrderCommandDTO(
        user_id=user_id,
        credits=request.credits,
        payment_method=request.payment_method,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/orders", response_model=ListPaymentOrdersResponseDTO, status_code=status.HTTP_200_OK)
async def list_orders(
    page: int = Query(default=1),
    page_size: int = Query(default=20),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    result = await ListPaymentOrders(SqlAlchemyPaymentOrderRepository(session)).execute(
        user_id, page=page, page_size=page_size
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/orders/complete",
    response_model=CompletePaymentResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def complete_order(
    command: CompletePaymentOrderCommandDTO,
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Settle an order manually (admin only).

    Used when a provider notification never arrived. Expiry still applies:
    an order past its deadline is expired, not paid.

    **Returns:**
    - 200: Order paid and credits granted
    - 409: Order is not pending
    - 410: Order expired
    """
    logger.info(f"Manual settlement of order {command.order_no} by admin {admin_id}")
    result = await _complete_use_case(session).execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/orders/{order_no}", response_model=PaymentOrderResponseDTO, status_code=status.HTTP_200_OK)
async def get_order(
    order_no: str,
    user_id: int = Depends(get_current_user_id),
    x_user_role: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
):
    """Get an order. Users see their own orders; admins see any."""
    owner = None if (x_user_role or "").lower() == ADMIN_ROLE else user_id
    result = await GetPaymentOrder(SqlAlchemyPaymentOrderRepository(session)).execute(order_no, owner)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/orders/{order_no}/cancel", response_model=PaymentOrderResponseDTO, status_code=status.HTTP_200_OK)
async def cancel_order(
    order_no: str,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Cancel one of the caller's pending orders.

    **Returns:**
    - 200: Order cancelled
    - 403: Order belongs to another user
    - 409: Order is no longer pending
    """
    use_case = CancelPaymentOrder(SqlAlchemyUnitOfWork(session), SqlAlchemyPaymentOrderRepository(session))
    result = await use_case.execute(order_no, user_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/notify/{provider}", status_code=status.HTTP_200_OK)
async def payment_notification(
    provider: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    providers: PaymentProviderRegistry = Depends(get_payment_providers),
):
    """
    Asynchronous payment notification from a gateway.

    The body is passed to the provider untouched for signature checks. The
    reply is the provider's own acknowledgement format; anything but a
    success acknowledgement makes the gateway retry.
    """
    gateway = providers.get(provider)
    if gateway is None:
        raise ClientError(
            Error(code=ErrorCode.PROVIDER_NOT_FOUND, message=f"Unknown payment provider {provider}")
        )

    raw = await request.body()
    use_case = HandlePaymentNotification(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyPaymentOrderRepository(session),
        providers,
        _complete_use_case(session),
    )
    result = await use_case.execute(provider, raw)

    if result.is_err():
        logger.warning(
            f"{provider} notification rejected: {result.error.code} {result.error.message} ({result.error.reason})"
        )
        if result.error.code in SETTLED_OUTCOMES:
            # Received and decided; needs manual follow-up, not a redelivery
            body, media_type = gateway.acknowledgement(True)
            return Response(content=body, media_type=media_type, status_code=status.HTTP_200_OK)
        body, media_type = gateway.acknowledgement(False)
        return Response(content=body, media_type=media_type, status_code=status_for(result.error.code))

    body, media_type = gateway.acknowledgement(True)
    return Response(content=body, media_type=media_type, status_code=status.HTTP_200_OK)
