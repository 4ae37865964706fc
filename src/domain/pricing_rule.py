"""Pricing Rule Domain Entity

Credits required to download a file or anything under a folder.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, CheckConstraint, String, DateTime
from src.domain.base import BaseModel, BigIntKey


class PricingRule(BaseModel, table=True):
    """
    Pricing Rule - Price keyed by exact path

    Domain Rules:
    - path is unique (one rule per path, deleted rows included)
    - An exact rule applies to its own path whatever its inheritable flag
    - Folder rules with inheritable=True apply to descendants that have no
      more specific rule
    - Soft-deleted (deleted_at set) or disabled rules never match
    """

    __tablename__ = "x_file_credits_configs"
    __table_args__ = (
        CheckConstraint('credits >= 0', name='credits_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
    )

    path: str = Field(
        sa_column=Column(String(4096), nullable=False, unique=True, index=True),
        description="File or folder path"
    )

    is_folder: bool = Field(default=False)

    credits: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Credits required (0 = free)"
    )

    inheritable: bool = Field(
        default=True,
        description="Whether descendants use this rule absent a more specific one"
    )

    enabled: bool = Field(default=True)

    created_by: int = Field(description="Admin user that created the rule")

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    deleted_at: Optional[datetime] = Field(default=None, index=True, sa_type=DateTime)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
