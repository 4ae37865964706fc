"""Data Transfer Objects for Pricing Use Cases"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.pricing_rule import PricingRule


class SetPricingRuleCommandDTO(BaseModel):
    """
    Command DTO for creating or replacing the rule of a path

    Used as input to SetPricingRule use case.
    """

    path: str = Field(..., min_length=1, max_length=4096, description="File or folder path")
    credits: int = Field(..., ge=0, description="Credits required (0 = free)")
    is_folder: bool = Field(default=False, description="Whether the path is a folder")
    inheritable: bool = Field(default=True, description="Folder rule applies to descendants")
    enabled: bool = Field(default=True)
    created_by: int = Field(default=0, description="Admin user setting the rule")

    @field_validator("path")
    @classmethod
    def path_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("path must not be blank")
        return v

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


class PricingRuleResponseDTO(BaseModel):
    id: int
    path: str
    credits: int
    is_folder: bool
    inheritable: bool
    enabled: bool
    created_by: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, rule: PricingRule) -> "PricingRuleResponseDTO":
        return cls(
            id=rule.id,
            path=rule.path,
            credits=rule.credits,
            is_folder=rule.is_folder,
            inheritable=rule.inheritable,
            enabled=rule.enabled,
            created_by=rule.created_by,
            created_at=rule.created_at,
            updated_at=rule.updated_at,
        )


class ListPricingRulesResponseDTO(BaseModel):
    rules: List[PricingRuleResponseDTO]
    total: int
    page: int
    page_size: int


class ResolvedPriceResponseDTO(BaseModel):
    """Effective price of a path"""

    path: str
    credits: int = Field(..., description="Credits required to download the path")
    rule_path: Optional[str] = Field(default=None, description="Path of the rule that applied, None if free")
    inherited: bool = Field(default=False, description="True if the rule belongs to an ancestor folder")

    class Config:
        json_schema_extra = {
            "example": {
                "path": "/movies/2024/trailer.mp4",
                "credits": 5,
                "rule_path": "/movies",
                "inherited": True
            }
        }
