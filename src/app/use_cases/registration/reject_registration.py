"""RejectRegistration Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import UserRegistrationRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.user_registration import RegistrationStatus, can_transition
from .dtos import RegistrationResponseDTO
from .verify_registration import _invalid_state

logger = logging.getLogger(__name__)


class RejectRegistration:
    """
    Use Case: Reject a registration (admin)

    Allowed from PENDING or VERIFIED. REGISTERED and REJECTED are terminal.
    """

    def __init__(self, uow: UnitOfWork, registration_repo: UserRegistrationRepository):
        self.uow = uow
        self.registration_repo = registration_repo

    async def execute(self, registration_id: int) -> Result[RegistrationResponseDTO]:
        try:
            registration = await self.registration_repo.get_by_id(registration_id)
            if not registration:
                return Return.err(
                    Error(
                        code=ErrorCode.REGISTRATION_NOT_FOUND,
                        message=f"Registration {registration_id} not found",
                    )
                )

            if not can_transition(registration.status, RegistrationStatus.REJECTED):
                return Return.err(_invalid_state(registration.status, "rejected"))

            seen_status = registration.status
            rejected = await self.registration_repo.transition_status(
                registration_id, seen_status, RegistrationStatus.REJECTED
            )
            if not rejected:
                await self.uow.rollback()
                current = await self.registration_repo.get_by_id(registration_id)
                return Return.err(_invalid_state(current.status if current else seen_status, "rejected"))

            await self.uow.commit()
            registration = await self.registration_repo.get_by_id(registration_id)

            logger.info(f"Registration {registration.id} rejected")
            return Return.ok(RegistrationResponseDTO.from_entity(registration))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to reject registration", reason=str(e))
            )
