"""Registration use cases"""
from .create_registration import CreateRegistration
from .verify_registration import VerifyRegistration
from .approve_registration import ApproveRegistration
from .reject_registration import RejectRegistration
from .list_pending_registrations import ListPendingRegistrations
from .send_verification_code import SendVerificationCode
from .verify_code import VerifyCode
from .clean_expired_data import CleanExpiredData
from .dtos import (
    CreateRegistrationCommandDTO,
    RegistrationResponseDTO,
    ListRegistrationsResponseDTO,
    ApproveRegistrationResponseDTO,
    SendVerificationCodeCommandDTO,
    VerificationCodeSentDTO,
    VerifyCodeCommandDTO,
    CleanupResultDTO,
)

__all__ = [
    "CreateRegistration",
    "VerifyRegistration",
    "ApproveRegistration",
    "RejectRegistration",
    "ListPendingRegistrations",
    "SendVerificationCode",
    "VerifyCode",
    "CleanExpiredData",
    "CreateRegistrationCommandDTO",
    "RegistrationResponseDTO",
    "ListRegistrationsResponseDTO",
    "ApproveRegistrationResponseDTO",
    "SendVerificationCodeCommandDTO",
    "VerificationCodeSentDTO",
    "VerifyCodeCommandDTO",
    "CleanupResultDTO",
]
