"""Payment Order Domain Entity

A pending request to turn a real-world payment into credits, settled by a
provider callback.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, String, Text, DateTime
from src.domain.base import BaseModel, BigIntKey


class PaymentOrderStatus(str, Enum):
    """Payment order states; everything except PENDING is terminal"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


ORDER_TRANSITIONS = {
    PaymentOrderStatus.PENDING: frozenset({
        PaymentOrderStatus.PAID,
        PaymentOrderStatus.FAILED,
        PaymentOrderStatus.CANCELLED,
        PaymentOrderStatus.EXPIRED,
    }),
    PaymentOrderStatus.PAID: frozenset(),
    PaymentOrderStatus.FAILED: frozenset(),
    PaymentOrderStatus.CANCELLED: frozenset(),
    PaymentOrderStatus.EXPIRED: frozenset(),
}


def can_transition(current: PaymentOrderStatus, target: PaymentOrderStatus) -> bool:
    return target in ORDER_TRANSITIONS[current]


class PaymentOrder(BaseModel, table=True):
    """
    Payment Order - Credit purchase awaiting settlement

    Domain Rules:
    - order_no is globally unique
    - Created PENDING with a fixed time-to-live
    - Leaves PENDING exactly once (see ORDER_TRANSITIONS)
    - amount is in currency minor units
    """

    __tablename__ = "x_payment_orders"
    __table_args__ = (
        Index('ix_x_payment_orders_status_expires', 'status', 'expires_at'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
    )

    order_no: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True),
    )

    user_id: int = Field(index=True)

    credits: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Credits granted when paid"
    )

    amount: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Price in minor units (e.g. fen)"
    )

    currency: str = Field(default="CNY", max_length=8)

    payment_method: str = Field(max_length=32, description="Provider name")

    status: PaymentOrderStatus = Field(default=PaymentOrderStatus.PENDING)

    paid_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    expires_at: datetime = Field(sa_type=DateTime)

    provider_transaction_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
    )

    payment_data: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Opaque provider payload (JSON)"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    def is_expired(self, now: Optional[datetime] = None, grace_seconds: int = 0) -> bool:
        return (now or datetime.utcnow()) > self.expires_at + timedelta(seconds=grace_seconds)
