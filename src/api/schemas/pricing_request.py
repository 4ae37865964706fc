"""Request schemas for Pricing API"""

from pydantic import BaseModel, Field


class SetPricingRuleRequestSchema(BaseModel):
    """
    Request schema for creating or replacing the rule at a path

    Used for PUT /credits/pricing endpoint.
    """

    path: str = Field(..., min_length=1, max_length=4096, description="File or folder path")
    credits: int = Field(..., ge=0, description="Credits required (0 = free)")
    is_folder: bool = Field(default=False)
    inheritable: bool = Field(default=True, description="Folder rule applies to descendants")
    enabled: bool = Field(default=True)

    class Config:
        json_schema_extra = {
            "example": {
                "path": "/movies",
                "credits": 5,
                "is_folder": True,
                "inheritable": True,
                "enabled": True
            }
        }
