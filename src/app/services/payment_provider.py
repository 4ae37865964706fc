"""Payment Provider Interface

Contract every payment gateway adapter implements, plus the registry the
payment use cases look providers up in.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from pydantic import BaseModel, Field
from src.domain.payment_order import PaymentOrder


class PaymentResponse(BaseModel):
    """What a provider returns when an order is placed"""

    order_no: str
    payment_url: Optional[str] = None
    qr_code: Optional[str] = None
    payment_data: Dict[str, Any] = Field(default_factory=dict)


class PaymentVerification(BaseModel):
    """
    Outcome of verifying a provider callback

    valid is False whenever the signature could not be checked; in that
    case no other field may be trusted.
    """

    valid: bool
    paid: bool = False
    order_no: Optional[str] = None
    provider_transaction_id: Optional[str] = None
    amount: Optional[int] = Field(default=None, description="Paid amount in minor units")
    paid_at: Optional[datetime] = None
    payment_data: Dict[str, Any] = Field(default_factory=dict)
    message: Optional[str] = None


class RefundResponse(BaseModel):
    success: bool
    refund_id: Optional[str] = None
    message: Optional[str] = None


class PaymentProviderError(Exception):
    """Raised by adapters when the gateway rejects or cannot be reached"""


class PaymentProvider(ABC):
    """
    Abstract payment gateway

    Implementations:
    - AlipayProvider (RSA2 signed form requests)
    - WechatProvider (MD5 signed XML requests)
    """

    name: str = ""

    @abstractmethod
    async def create_order(self, order: PaymentOrder) -> PaymentResponse:
        """
        Place the order with the gateway

        Args:
            order: Persisted PENDING order

        Returns:
            PaymentResponse with the QR code / redirect the user pays with

        Raises:
            PaymentProviderError: If the gateway call fails
        """
        pass

    @abstractmethod
    async def verify_callback(self, raw: Union[Mapping[str, Any], str, bytes]) -> PaymentVerification:
        """
        Verify an asynchronous payment notification

        Args:
            raw: Form fields (Alipay) or XML body (WeChat) as received

        Returns:
            PaymentVerification; valid=False for any signature problem
        """
        pass

    @abstractmethod
    async def refund(self, order_no: str, amount: int) -> RefundResponse:
        pass

    def acknowledgement(self, success: bool) -> Tuple[str, str]:
        """
        Body and media type the gateway expects in reply to a notification

        A non-success reply makes the gateway retry the notification later.
        """
        return ("success" if success else "fail"), "text/plain"


class PaymentProviderRegistry:
    """Explicitly constructed name -> provider mapping"""

    def __init__(self, providers: Optional[List[PaymentProvider]] = None):
        self._providers: Dict[str, PaymentProvider] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: PaymentProvider) -> None:
        if not provider.name:
            raise ValueError("Payment provider must have a name")
        self._providers[provider.name] = provider

    def get(self, name: str) -> Optional[PaymentProvider]:
        return self._providers.get(name)

    def names(self) -> List[str]:
        return sorted(self._providers)

    def __contains__(self, name: str) -> bool:
        return name in self._providers
