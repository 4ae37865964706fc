"""Request schemas for Payments API"""

from pydantic import BaseModel, Field


class CreatePaymentOrderRequestSchema(BaseModel):
    """
    Request schema for buying credits

    Used for POST /payments/orders endpoint.
    """

    credits: int = Field(..., ge=1, description="Credits to buy")
    payment_method: str = Field(..., min_length=1, max_length=32, description="alipay or wechat")

    class Config:
        json_schema_extra = {
            "example": {
                "credits": 500,
                "payment_method": "alipay"
            }
        }
