from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .ledger_service import LedgerService
from .pricing_resolver import PricingResolver
from .payment_provider import (
    PaymentProvider,
    PaymentProviderError,
    PaymentProviderRegistry,
    PaymentResponse,
    PaymentVerification,
    RefundResponse,
)

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "LedgerService",
    "PricingResolver",
    "PaymentProvider",
    "PaymentProviderError",
    "PaymentProviderRegistry",
    "PaymentResponse",
    "PaymentVerification",
    "RefundResponse",
]
