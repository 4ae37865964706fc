"""Data Transfer Objects for Registration Use Cases"""

import re
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.user_registration import UserRegistration, VerificationPurpose

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("invalid email address")
    return value


class CreateRegistrationCommandDTO(BaseModel):
    """
    Command DTO for a sign-up request

    Used as input to CreateRegistration use case.
    """

    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("username")
    @classmethod
    def username_format(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError("username may only contain letters, digits, '_', '.' and '-'")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "username": "alice",
                "email": "alice@example.com",
                "password": "s3cret-pass"
            }
        }


class RegistrationResponseDTO(BaseModel):
    """A registration as shown to users and admins (never the password hash or token)"""

    id: int
    username: str
    email: str
    status: int = Field(..., description="-1 rejected, 0 pending, 1 verified, 2 registered")
    status_name: str
    expires_at: datetime
    user_id: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, registration: UserRegistration) -> "RegistrationResponseDTO":
        return cls(
            id=registration.id,
            username=registration.username,
            email=registration.email,
            status=int(registration.status),
            status_name=registration.status.name.lower(),
            expires_at=registration.expires_at,
            user_id=registration.user_id,
            created_at=registration.created_at,
        )


class ListRegistrationsResponseDTO(BaseModel):
    registrations: List[RegistrationResponseDTO]
    total: int
    page: int
    page_size: int


class ApproveRegistrationResponseDTO(BaseModel):
    registration_id: int
    user_id: int
    username: str


class SendVerificationCodeCommandDTO(BaseModel):
    email: str = Field(..., max_length=255)
    purpose: VerificationPurpose = Field(default=VerificationPurpose.REGISTER)

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        return _check_email(v)


class VerificationCodeSentDTO(BaseModel):
    email: str
    purpose: str
    expires_at: datetime


class VerifyCodeCommandDTO(BaseModel):
    email: str = Field(..., max_length=255)
    code: str = Field(..., min_length=1, max_length=16)
    purpose: VerificationPurpose = Field(default=VerificationPurpose.REGISTER)

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        return _check_email(v)


class CleanupResultDTO(BaseModel):
    registrations_deleted: int
    verification_codes_deleted: int
