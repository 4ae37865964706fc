"""Credit Account Domain Entity

Tracks the credit balance of one user. Each user has exactly one account.
Balance is always >= 0 and changes only through the ledger service, which
appends a CreditTransaction for every mutation.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, CheckConstraint, DateTime
from src.domain.base import BaseModel, BigIntKey


class CreditAccount(BaseModel, table=True):
    """
    Credit Account - Balance plus lifetime earned/spent counters

    Domain Rules:
    - One account per user (user_id is unique)
    - Balance must be non-negative
    - Created lazily with zero balance on first access
    - Never deleted while the user exists
    """

    __tablename__ = "x_user_credits"
    __table_args__ = (
        CheckConstraint('balance >= 0', name='balance_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
        description="Unique account identifier (auto-increment)"
    )

    user_id: int = Field(
        index=True,
        unique=True,
        description="Owning user (unique - one account per user)"
    )

    balance: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
        description="Current credit balance (must be >= 0)"
    )

    total_earned: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
        description="Cumulative credits received"
    )

    total_spent: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
        description="Cumulative credits spent"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_type=DateTime,
        description="Account creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_type=DateTime,
        description="Last balance update timestamp"
    )
