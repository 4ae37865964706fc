"""ApproveRegistration Use Case

Turns a verified registration into a host user with a credit account.
"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import (
    UserRegistrationRepository,
    UserRepository,
)
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.user import GENERAL_ROLE, User
from src.domain.user_registration import RegistrationStatus, can_transition
from .dtos import ApproveRegistrationResponseDTO
from .verify_registration import _invalid_state

logger = logging.getLogger(__name__)


class ApproveRegistration:
    """
    Use Case: Approve a registration (admin)

    Business Rules:
    1. Only VERIFIED registrations can be approved
    2. Creates the user (general role, base path "/") and an empty credit
       account, then marks the registration REGISTERED, all in one commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        registration_repo: UserRegistrationRepository,
        user_repo: UserRepository,
        ledger: LedgerService,
    ):
        self.uow = uow
        self.registration_repo = registration_repo
        self.user_repo = user_repo
        self.ledger = ledger

    async def execute(self, registration_id: int) -> Result[ApproveRegistrationResponseDTO]:
        try:
            registration = await self.registration_repo.get_by_id(registration_id)
            if not registration:
                return Return.err(
                    Error(
                        code=ErrorCode.REGISTRATION_NOT_FOUND,
                        message=f"Registration {registration_id} not found",
                    )
                )

            seen_status = registration.status
            if not can_transition(seen_status, RegistrationStatus.REGISTERED):
                return Return.err(_invalid_state(seen_status, "approved"))

            if await self.user_repo.get_by_username(registration.username):
                return Return.err(
                    Error(
                        code=ErrorCode.DUPLICATE_REGISTRATION,
                        message=f"User {registration.username} already exists",
                    )
                )

            user = await self.user_repo.create(
                User(
                    username=registration.username,
                    pwd_hash=registration.pwd_hash,
                    salt=registration.salt,
                    base_path="/",
                    role=GENERAL_ROLE,
                    disabled=False,
                )
            )
            await self.ledger.get_or_create_account(user.id)

            registered = await self.registration_repo.transition_status(
                registration_id,
                seen_status,
                RegistrationStatus.REGISTERED,
                user_id=user.id,
            )
            if not registered:
                await self.uow.rollback()
                current = await self.registration_repo.get_by_id(registration_id)
                return Return.err(_invalid_state(current.status if current else seen_status, "approved"))

            await self.uow.commit()

            logger.info(f"Registration {registration_id} approved as user {user.id} ({user.username})")
            return Return.ok(
                ApproveRegistrationResponseDTO(
                    registration_id=registration_id,
                    user_id=user.id,
                    username=user.username,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to approve registration", reason=str(e))
            )
