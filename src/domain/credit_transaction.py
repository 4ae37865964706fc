"""Credit Transaction Domain Entity

Immutable append-only history of balance mutations.
Replaying an account's transactions in id order reproduces its balance.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, BigInteger, String, Text, DateTime
from src.domain.base import BaseModel, BigIntKey


class TransactionKind(str, Enum):
    """Credit transaction kinds"""
    EARN = "earn"      # Credits received (purchase, redeem, admin grant)
    SPEND = "spend"    # Credits spent (download)
    REFUND = "refund"  # Credits returned to the user


class TransactionSource(str, Enum):
    """Where a balance change came from"""
    PURCHASE = "purchase"
    REDEEM = "redeem"
    DOWNLOAD = "download"
    ADMIN = "admin"


class CreditTransaction(BaseModel, table=True):
    """
    Credit Transaction - Immutable record of one balance mutation

    Domain Rules:
    - Transactions are never updated or deleted
    - amount is signed: positive for earn/refund, negative for spend
    - balance_after is the account balance right after this transaction
    - source/source_id identify the cause (order number, redeem code, file path)
    """

    __tablename__ = "x_credit_transactions"
    __table_args__ = (
        Index('ix_x_credit_transactions_user_created', 'user_id', 'created_at'),
        Index('ix_x_credit_transactions_source', 'source', 'source_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
        description="Unique transaction identifier (auto-increment)"
    )

    user_id: int = Field(
        index=True,
        description="User ID for query optimization"
    )

    account_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("x_user_credits.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to CreditAccount"
    )

    kind: TransactionKind = Field(
        description="Kind of transaction (earn, spend, refund)"
    )

    amount: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Signed credit amount"
    )

    balance_after: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Balance snapshot after this transaction"
    )

    source: TransactionSource = Field(
        description="Source category (purchase, redeem, download, admin)"
    )

    source_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(1024), nullable=True),
        description="Source identifier (order number, code, file path)"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(1024), nullable=True),
    )

    metadata_json: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Extra metadata encoded as JSON"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_type=DateTime,
        description="Transaction timestamp (immutable)"
    )
