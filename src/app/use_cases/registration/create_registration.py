"""CreateRegistration Use Case

Records a sign-up request and sends the verification link.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import (
    UserRegistrationRepository,
    UserRepository,
)
from src.app.services.notification_service import NotificationService
from src.app.services.password_hasher import generate_salt, two_hash_password
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.user_registration import RegistrationStatus, UserRegistration
from .dtos import CreateRegistrationCommandDTO, RegistrationResponseDTO

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class CreateRegistration:
    """
    Use Case: Create a registration

    Business Rules:
    1. Username and email must not belong to an existing user
    2. Username and email must not belong to a live registration (pending or
       verified and unexpired, or registered); dead ones (expired or
       rejected) are replaced
    3. Only the salted hash is stored, never the password
    4. The token is 32 random bytes (hex) and expires after ttl_hours
    """

    def __init__(
        self,
        uow: UnitOfWork,
        registration_repo: UserRegistrationRepository,
        user_repo: UserRepository,
        notification_service: Optional[NotificationService] = None,
        ttl_hours: int = 24,
        verification_base_url: str = "",
    ):
        self.uow = uow
        self.registration_repo = registration_repo
        self.user_repo = user_repo
        self.notification_service = notification_service
        self.ttl_hours = ttl_hours
        self.verification_base_url = verification_base_url

    async def execute(self, command: CreateRegistrationCommandDTO) -> Result[RegistrationResponseDTO]:
        """
        Execute registration

        Args:
            command: CreateRegistrationCommandDTO with username, email, password

        Returns:
            Result[RegistrationResponseDTO]: The pending registration or error
        """
        try:
            now = datetime.utcnow()

            for name in (command.username, command.email):
                if await self.user_repo.get_by_username(name):
                    return Return.err(self._duplicate(f"user {name} already exists"))

            for existing in (
                await self.registration_repo.get_by_email(command.email),
                await self.registration_repo.get_by_username(command.username),
            ):
                if existing is None:
                    continue
                if self._is_live(existing, now):
                    return Return.err(self._duplicate(f"registration {existing.id} is still in progress"))
                await self.registration_repo.delete(existing.id)

            salt = generate_salt()
            registration = await self.registration_repo.create(
                UserRegistration(
                    email=command.email,
                    username=command.username,
                    pwd_hash=two_hash_password(command.password, salt),
                    salt=salt,
                    status=RegistrationStatus.PENDING,
                    token=secrets.token_hex(TOKEN_BYTES),
                    expires_at=now + timedelta(hours=self.ttl_hours),
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to create registration", reason=str(e))
            )

        logger.info(f"Registration {registration.id} created for {registration.username}")
        if self.notification_service:
            link = f"{self.verification_base_url}?token={registration.token}"
            try:
                await self.notification_service.send_verification_link(registration, link)
            except Exception as e:
                logger.error(f"Failed to send verification link for registration {registration.id}: {e}")

        return Return.ok(RegistrationResponseDTO.from_entity(registration))

    @staticmethod
    def _is_live(registration: UserRegistration, now: datetime) -> bool:
        if registration.status == RegistrationStatus.REGISTERED:
            return True
        if registration.status == RegistrationStatus.REJECTED:
            return False
        return not registration.is_expired(now)

    @staticmethod
    def _duplicate(reason: str) -> Error:
        return Error(
            code=ErrorCode.DUPLICATE_REGISTRATION,
            message="Username or email is already taken",
            reason=reason,
        )
