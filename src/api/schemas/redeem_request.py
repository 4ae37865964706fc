"""Request schemas for Redeem Code API"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class GenerateRedeemCodesRequestSchema(BaseModel):
    """Used for POST /credits/redeem-codes endpoint."""

    count: int = Field(..., ge=1, le=1000, description="Number of codes to generate")
    credits: int = Field(..., ge=1, description="Credits granted per redemption")
    max_uses: int = Field(default=1, ge=1, description="Total redemptions allowed per code")
    description: Optional[str] = Field(default=None, max_length=500)
    expires_at: Optional[datetime] = Field(default=None)

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


class RedeemRequestSchema(BaseModel):
    """Used for POST /credits/redeem endpoint."""

    code: str = Field(..., min_length=1, max_length=64)

    class Config:
        json_schema_extra = {"example": {"code": "OLA1B2C3D4E5F6"}}
