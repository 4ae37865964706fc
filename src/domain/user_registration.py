"""User Registration Domain Entities

Pending sign-ups awaiting email verification and admin approval, and the
short-lived one-time codes sent for verification.
"""

from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import String, DateTime
from src.domain.base import BaseModel, BigIntKey


class RegistrationStatus(IntEnum):
    """Registration states, numbered like the host service numbers them"""
    REJECTED = -1
    PENDING = 0
    VERIFIED = 1
    REGISTERED = 2


REGISTRATION_TRANSITIONS = {
    RegistrationStatus.PENDING: frozenset({RegistrationStatus.VERIFIED, RegistrationStatus.REJECTED}),
    RegistrationStatus.VERIFIED: frozenset({RegistrationStatus.REGISTERED, RegistrationStatus.REJECTED}),
    RegistrationStatus.REGISTERED: frozenset(),
    RegistrationStatus.REJECTED: frozenset(),
}


def can_transition(current: RegistrationStatus, target: RegistrationStatus) -> bool:
    return target in REGISTRATION_TRANSITIONS[current]


class UserRegistration(BaseModel, table=True):
    """
    User Registration - Sign-up request

    Domain Rules:
    - email and username are globally unique
    - Status only moves forward (see REGISTRATION_TRANSITIONS)
    - REJECTED is reachable from PENDING or VERIFIED and is terminal
    - token is single use: it only verifies a PENDING registration
    """

    __tablename__ = "x_user_registrations"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
    )

    email: str = Field(sa_column=Column(String(255), nullable=False, unique=True, index=True))

    username: str = Field(sa_column=Column(String(50), nullable=False, unique=True, index=True))

    pwd_hash: str = Field(max_length=128)

    salt: str = Field(max_length=32)

    status: RegistrationStatus = Field(default=RegistrationStatus.PENDING, index=True)

    token: str = Field(sa_column=Column(String(128), nullable=False, unique=True, index=True))

    expires_at: datetime = Field(sa_type=DateTime)

    user_id: Optional[int] = Field(default=None, description="Host user created on approval")

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at


class VerificationPurpose(str, Enum):
    REGISTER = "register"
    RESET_PASSWORD = "reset_password"


class VerificationCode(BaseModel, table=True):
    """Verification Code - One-time code scoped to (email, purpose)"""

    __tablename__ = "x_verification_codes"
    __table_args__ = (
        Index('ix_x_verification_codes_lookup', 'email', 'purpose', 'used'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntKey, primary_key=True, autoincrement=True),
    )

    email: str = Field(max_length=255)

    code: str = Field(max_length=16)

    purpose: VerificationPurpose

    used: bool = Field(default=False)

    expires_at: datetime = Field(sa_type=DateTime)

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at

    def can_use(self, now: Optional[datetime] = None) -> bool:
        return not self.used and not self.is_expired(now)
