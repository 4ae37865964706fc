"""Request schemas for Registration API"""

from pydantic import BaseModel, Field


class VerifyRegistrationRequestSchema(BaseModel):
    token: str = Field(..., min_length=1, max_length=128, description="Token from the verification link")
