"""Redeem Code Domain Entities

Pre-generated codes exchangeable for a fixed credit grant, plus the
immutable record of every successful redemption.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, String, DateTime
from src.domain.base import BaseModel, BigIntKey


class RedeemCode(BaseModel, table=True):
    """
    Redeem Code - Limited-use credit voucher

    Domain Rules:
    - code is unique
    - used_count only grows and never exceeds max_uses
    - Usable while enabled, unexpired and used_count < max_uses
    - The same user may redeem a multi-use code more than once
    """

    __tablename__ = "x_redeem_codes"
    __table_args__ = (
        CheckConstraint('used_count <= max_uses', name='used_count_within_max_uses'),
        CheckConstraint('credits > 0', name='redeem_credits_positive'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
    )

    code: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True),
    )

    credits: int = Field(sa_column=Column(BigInteger, nullable=False))

    max_uses: int = Field(default=1)

    used_count: int = Field(default=0)

    enabled: bool = Field(default=True)

    expires_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    created_by: int = Field(description="Admin user that generated the code")

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.utcnow()) > self.expires_at

    def can_use(self, now: Optional[datetime] = None) -> bool:
        return self.enabled and not self.is_expired(now) and self.used_count < self.max_uses


class RedeemCodeUsage(BaseModel, table=True):
    """Redeem Code Usage - One row per successful redemption (immutable)"""

    __tablename__ = "x_redeem_code_usages"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
    )

    redeem_code_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("x_redeem_codes.id"), nullable=False, index=True),
    )

    user_id: int = Field(index=True)

    credits: int = Field(sa_column=Column(BigInteger, nullable=False))

    used_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
