"""Data Transfer Objects for Redeem Code Use Cases"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from libs.clock import to_naive_utc
from src.domain.redeem_code import RedeemCode


class GenerateRedeemCodesCommandDTO(BaseModel):
    """
    Command DTO for generating a batch of redeem codes

    Used as input to GenerateRedeemCodes use case.
    """

    count: int = Field(..., ge=1, le=1000, description="Number of codes to generate")
    credits: int = Field(..., ge=1, description="Credits granted per redemption")
    max_uses: int = Field(default=1, ge=1, description="Total redemptions allowed per code")
    description: Optional[str] = Field(default=None, max_length=500)
    expires_at: Optional[datetime] = Field(default=None, description="Codes are unusable after this time (UTC)")
    created_by: int = Field(default=0, description="Admin generating the codes")

    @field_validator("expires_at")
    @classmethod
    def expires_at_as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    class Config:
        json_schema_extra = {
            "example": {
                "count": 10,
                "credits": 100,
                "max_uses": 1,
                "description": "Launch promotion",
                "expires_at": "2025-01-01T00:00:00Z"
            }
        }


class GenerateRedeemCodesResponseDTO(BaseModel):
    codes: List[str]
    credits: int
    max_uses: int
    expires_at: Optional[datetime] = None


class RedeemCommandDTO(BaseModel):
    user_id: int
    code: str = Field(..., min_length=1, max_length=64)


class RedeemResponseDTO(BaseModel):
    """
    Result of a successful redemption

    Returned by RedeemCode use case.
    """

    code: str
    credits_granted: int
    balance: int = Field(..., description="Balance after the grant")
    transaction_id: int

    class Config:
        json_schema_extra = {
            "example": {
                "code": "OLA1B2C3D4E5F6",
                "credits_granted": 100,
                "balance": 250,
                "transaction_id": 987
            }
        }


class RedeemCodeResponseDTO(BaseModel):
    id: int
    code: str
    credits: int
    max_uses: int
    used_count: int
    enabled: bool
    expires_at: Optional[datetime] = None
    created_by: int
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, code: RedeemCode) -> "RedeemCodeResponseDTO":
        return cls(
            id=code.id,
            code=code.code,
            credits=code.credits,
            max_uses=code.max_uses,
            used_count=code.used_count,
            enabled=code.enabled,
            expires_at=code.expires_at,
            created_by=code.created_by,
            description=code.description,
            created_at=code.created_at,
        )


class ListRedeemCodesResponseDTO(BaseModel):
    codes: List[RedeemCodeResponseDTO]
    total: int
    page: int
    page_size: int
