"""Data Transfer Objects for Payment Use Cases"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator
from libs.clock import to_naive_utc
from src.domain.payment_order import PaymentOrder


class CreatePaymentOrderCommandDTO(BaseModel):
    """
    Command DTO for buying credits

    Used as input to CreatePaymentOrder use case.
    """

    user_id: int = Field(..., description="Buying user")
    credits: int = Field(..., ge=1, description="Credits to buy")
    payment_method: str = Field(..., min_length=1, max_length=32, description="Provider name (alipay, wechat)")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "credits": 500,
                "payment_method": "alipay"
            }
        }


class CompletePaymentOrderCommandDTO(BaseModel):
    """
    Command DTO for settling a paid order

    Built from a verified provider notification, or sent by an admin for
    manual settlement.
    """

    order_no: str = Field(..., min_length=1, max_length=64)
    provider_transaction_id: Optional[str] = Field(default=None, max_length=128)
    paid_at: Optional[datetime] = Field(default=None, description="Defaults to the settlement time")
    payment_data: Optional[Dict[str, Any]] = Field(default=None, description="Raw provider payload")

    @field_validator("paid_at")
    @classmethod
    def paid_at_as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    class Config:
        json_schema_extra = {
            "example": {
                "order_no": "OL1700000000AbCdEfGh",
                "provider_transaction_id": "2024010122001400000000000000",
                "paid_at": "2024-01-01T00:10:00Z"
            }
        }


class PaymentOrderResponseDTO(BaseModel):
    order_no: str
    user_id: int
    credits: int
    amount: int = Field(..., description="Price in minor units")
    currency: str
    payment_method: str
    status: str
    expires_at: datetime
    paid_at: Optional[datetime] = None
    provider_transaction_id: Optional[str] = None
    payment_url: Optional[str] = None
    qr_code: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, order: PaymentOrder) -> "PaymentOrderResponseDTO":
        data: Dict[str, Any] = {}
        if order.payment_data:
            try:
                data = json.loads(order.payment_data)
            except ValueError:
                data = {}
        return cls(
            order_no=order.order_no,
            user_id=order.user_id,
            credits=order.credits,
            amount=order.amount,
            currency=order.currency,
            payment_method=order.payment_method,
            status=order.status.value,
            expires_at=order.expires_at,
            paid_at=order.paid_at,
            provider_transaction_id=order.provider_transaction_id,
            payment_url=data.get("payment_url"),
            qr_code=data.get("qr_code") or data.get("code_url"),
            created_at=order.created_at,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "order_no": "OL1700000000AbCdEfGh",
                "user_id": 42,
                "credits": 500,
                "amount": 500,
                "currency": "CNY",
                "payment_method": "alipay",
                "status": "pending",
                "expires_at": "2024-01-01T00:30:00Z",
                "qr_code": "https://qr.alipay.com/bax00000",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }


class CompletePaymentResponseDTO(BaseModel):
    order_no: str
    status: str
    credits_granted: int
    balance: int = Field(..., description="Balance after the grant")
    transaction_id: int


class ListPaymentOrdersResponseDTO(BaseModel):
    orders: List[PaymentOrderResponseDTO]
    total: int
    page: int
    page_size: int


class SweepResultDTO(BaseModel):
    expired_count: int
    cutoff: datetime


class NotificationResultDTO(BaseModel):
    """Outcome of a verified provider notification"""

    order_no: str
    status: str = Field(..., description="Order status after processing")
    credited: bool = Field(default=False, description="True if this notification granted credits")
