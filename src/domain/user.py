"""User Domain Entity

Minimal view of the host service's user table: the rows this service
creates when an admin approves a registration.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String, DateTime
from src.domain.base import BaseModel, BigIntKey

GENERAL_ROLE = 0


class User(BaseModel, table=True):
    __tablename__ = "x_users"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
    )

    username: str = Field(sa_column=Column(String(255), nullable=False, unique=True, index=True))

    pwd_hash: str = Field(max_length=128)

    salt: str = Field(max_length=32)

    base_path: str = Field(default="/")

    role: int = Field(default=GENERAL_ROLE)

    disabled: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
