"""Payment order use cases"""
from .create_payment_order import CreatePaymentOrder, generate_order_no
from .complete_payment_order import CompletePaymentOrder
from .cancel_payment_order import CancelPaymentOrder
from .get_payment_order import GetPaymentOrder
from .list_payment_orders import ListPaymentOrders
from .sweep_expired_orders import SweepExpiredOrders
from .handle_payment_notification import HandlePaymentNotification
from .dtos import (
    CreatePaymentOrderCommandDTO,
    CompletePaymentOrderCommandDTO,
    PaymentOrderResponseDTO,
    CompletePaymentResponseDTO,
    ListPaymentOrdersResponseDTO,
    SweepResultDTO,
    NotificationResultDTO,
)

__all__ = [
    "CreatePaymentOrder",
    "generate_order_no",
    "CompletePaymentOrder",
    "CancelPaymentOrder",
    "GetPaymentOrder",
    "ListPaymentOrders",
    "SweepExpiredOrders",
    "HandlePaymentNotification",
    "CreatePaymentOrderCommandDTO",
    "CompletePaymentOrderCommandDTO",
    "PaymentOrderResponseDTO",
    "CompletePaymentResponseDTO",
    "ListPaymentOrdersResponseDTO",
    "SweepResultDTO",
    "NotificationResultDTO",
]
