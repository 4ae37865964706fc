"""Request schemas for Credits API

Pydantic models for validating incoming HTTP requests.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class GrantCreditsRequestSchema(BaseModel):
    """
    Request schema for an admin credit grant

    Used for POST /credits/grant endpoint.
    """

    user_id: int = Field(..., description="User receiving the credits")
    amount: int = Field(..., gt=0, description="Credits to grant (must be > 0)")
    description: Optional[str] = Field(default=None, max_length=1024)
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional metadata for audit trail"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "amount": 100,
                "description": "Compensation for outage",
                "metadata": {"ticket": "SUP-1234"}
            }
        }


class RefundCreditsRequestSchema(BaseModel):
    """
    Request schema for an admin refund

    Used for POST /credits/refund endpoint.
    """

    user_id: int = Field(..., description="User receiving the refund")
    amount: int = Field(..., gt=0, description="Credits to refund (must be > 0)")
    source_id: Optional[str] = Field(
        default=None,
        max_length=4096,
        description="What is being refunded, e.g. a download path"
    )
    description: Optional[str] = Field(default=None, max_length=1024)
    metadata: Optional[Dict[str, Any]] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "amount": 5,
                "source_id": "/movies/trailer.mp4",
                "description": "Download failed"
            }
        }
