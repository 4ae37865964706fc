"""VerifyRegistration Use Case"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import UserRegistrationRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.user_registration import RegistrationStatus, can_transition
from .dtos import RegistrationResponseDTO

logger = logging.getLogger(__name__)


class VerifyRegistration:
    """
    Use Case: Confirm an email address with the registration token

    Business Rules:
    1. Only PENDING registrations can be verified, so a token works once
    2. Expired tokens fail with REGISTRATION_EXPIRED
    3. PENDING -> VERIFIED is a conditional update
    """

    def __init__(self, uow: UnitOfWork, registration_repo: UserRegistrationRepository):
        self.uow = uow
        self.registration_repo = registration_repo

    async def execute(self, token: str) -> Result[RegistrationResponseDTO]:
        try:
            registration = await self.registration_repo.get_by_token(token)
            if not registration:
                return Return.err(
                    Error(code=ErrorCode.REGISTRATION_NOT_FOUND, message="Invalid verification link")
                )

            if not can_transition(registration.status, RegistrationStatus.VERIFIED):
                return Return.err(_invalid_state(registration.status, "verified"))

            if registration.is_expired():
                return Return.err(
                    Error(
                        code=ErrorCode.REGISTRATION_EXPIRED,
                        message="Verification link has expired",
                        reason=f"expires_at={registration.expires_at.isoformat()}",
                    )
                )

            registration_id = registration.id
            seen_status = registration.status
            verified = await self.registration_repo.transition_status(
                registration_id, RegistrationStatus.PENDING, RegistrationStatus.VERIFIED
            )
            if not verified:
                await self.uow.rollback()
                current = await self.registration_repo.get_by_id(registration_id)
                return Return.err(_invalid_state(current.status if current else seen_status, "verified"))

            await self.uow.commit()
            registration = await self.registration_repo.get_by_id(registration_id)

            logger.info(f"Registration {registration.id} verified")
            return Return.ok(RegistrationResponseDTO.from_entity(registration))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to verify registration", reason=str(e))
            )


def _invalid_state(status: RegistrationStatus, action: str) -> Error:
    return Error(
        code=ErrorCode.INVALID_REGISTRATION_STATE,
        message=f"Registration is {status.name.lower()} and cannot be {action}",
        reason=f"status={int(status)}",
    )
