"""Data Transfer Objects for Credit Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field
from src.domain.credit_transaction import CreditTransaction


class BalanceResponseDTO(BaseModel):
    """
    Response DTO for get balance operation

    Returned by GetBalance use case.
    """

    user_id: int = Field(..., description="User identifier")
    balance: int = Field(..., description="Current credit balance")
    total_earned: int = Field(..., description="Credits received over the account lifetime")
    total_spent: int = Field(..., description="Credits spent over the account lifetime")
    last_updated: datetime = Field(..., description="Timestamp of last balance update")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "balance": 150,
                "total_earned": 200,
                "total_spent": 50,
                "last_updated": "2024-01-01T00:00:00Z"
            }
        }


class CreditTransactionResponseDTO(BaseModel):
    """
    One ledger entry

    Returned by GrantCredits, RefundCredits, ProcessDownload and
    ListTransactions.
    """

    transaction_id: int = Field(..., description="Transaction ID")
    user_id: int = Field(..., description="User identifier")
    kind: str = Field(..., description="earn, spend or refund")
    amount: int = Field(..., description="Signed credit amount (negative for spend)")
    balance_after: int = Field(..., description="Balance after transaction")
    source: str = Field(..., description="purchase, redeem, download or admin")
    source_id: Optional[str] = Field(default=None, description="Order number, code or path")
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(..., description="Transaction timestamp")

    @classmethod
    def from_entity(cls, transaction: CreditTransaction) -> "CreditTransactionResponseDTO":
        return cls(
            transaction_id=transaction.id,
            user_id=transaction.user_id,
            kind=transaction.kind.value,
            amount=transaction.amount,
            balance_after=transaction.balance_after,
            source=transaction.source.value,
            source_id=transaction.source_id,
            description=transaction.description,
            created_at=transaction.created_at,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": 123,
                "user_id": 42,
                "kind": "spend",
                "amount": -5,
                "balance_after": 145,
                "source": "download",
                "source_id": "/movies/trailer.mp4",
                "description": "Download /movies/trailer.mp4",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }


class ListTransactionsResponseDTO(BaseModel):
    transactions: List[CreditTransactionResponseDTO]
    total: int = Field(..., description="Total number of transactions")
    page: int
    page_size: int


class GrantCreditsCommandDTO(BaseModel):
    """
    Command DTO for an admin credit grant

    Used as input to GrantCredits use case.
    """

    user_id: int = Field(..., description="User receiving the credits")
    amount: int = Field(..., gt=0, description="Credits to grant (must be > 0)")
    description: Optional[str] = Field(default=None, max_length=1024)
    admin_id: Optional[int] = Field(default=None, description="Admin performing the grant")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Optional metadata for audit trail")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "amount": 100,
                "description": "Compensation for outage",
                "admin_id": 1
            }
        }


class RefundCreditsCommandDTO(BaseModel):
    """
    Command DTO for refunding credits

    Refunds credits back to a user, e.g. for a download that failed after
    it was charged.
    """

    user_id: int = Field(..., description="User receiving the refund")
    amount: int = Field(..., gt=0, description="Credits to refund (must be > 0)")
    source_id: Optional[str] = Field(default=None, description="What is being refunded (path, order number)")
    description: Optional[str] = Field(default=None, max_length=1024)
    admin_id: Optional[int] = Field(default=None)
    metadata: Optional[Dict[str, Any]] = Field(default=None)


class DownloadCheckResponseDTO(BaseModel):
    """Whether a user may download a path right now"""

    path: str
    allowed: bool = Field(..., description="True if free or the balance covers the price")
    required_credits: int = Field(..., description="Credits the download costs")
    balance: int = Field(..., description="User's current balance")
    rule_path: Optional[str] = Field(default=None, description="Path of the pricing rule that applied")

    class Config:
        json_schema_extra = {
            "example": {
                "path": "/a/b/c.zip",
                "allowed": True,
                "required_credits": 5,
                "balance": 150,
                "rule_path": "/a"
            }
        }


class DownloadResponseDTO(BaseModel):
    path: str
    credits_charged: int
    balance: int
    transaction_id: Optional[int] = Field(default=None, description="None for free downloads")


class LedgerDiscrepancyDTO(BaseModel):
    """
    A single account whose balance disagrees with its transaction history
    """

    user_id: int
    account_id: int
    account_balance: int = Field(..., description="Balance stored on the account")
    calculated_balance: int = Field(..., description="Sum of the account's transactions")
    discrepancy: int = Field(..., description="account_balance - calculated_balance")
    broken_transaction_id: Optional[int] = Field(
        default=None,
        description="First transaction whose balance_after does not match the running sum",
    )


class ReconciliationResultDTO(BaseModel):
    total_accounts_checked: int
    discrepancies_found: int
    discrepancies: List[LedgerDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int

    class Config:
        json_schema_extra = {
            "example": {
                "total_accounts_checked": 120,
                "discrepancies_found": 0,
                "discrepancies": [],
                "reconciliation_time": "2024-01-01T00:00:00Z",
                "execution_time_ms": 85
            }
        }
