"""SendVerificationCode Use Case"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import VerificationCodeRepository
from src.app.services.notification_service import NotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.user_registration import VerificationCode
from .dtos import SendVerificationCodeCommandDTO, VerificationCodeSentDTO

logger = logging.getLogger(__name__)


def generate_verification_code() -> str:
    return f"{secrets.randbelow(10 ** 6):06d}"


class SendVerificationCode:
    """
    Use Case: Issue a 6-digit one-time code for (email, purpose)

    The code itself is only delivered through the notification service,
    never returned to the caller.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        code_repo: VerificationCodeRepository,
        notification_service: Optional[NotificationService] = None,
        ttl_minutes: int = 10,
    ):
        self.uow = uow
        self.code_repo = code_repo
        self.notification_service = notification_service
        self.ttl_minutes = ttl_minutes

    async def execute(self, command: SendVerificationCodeCommandDTO) -> Result[VerificationCodeSentDTO]:
        try:
            now = datetime.utcnow()
            code = await self.code_repo.create(
                VerificationCode(
                    email=command.email,
                    code=generate_verification_code(),
                    purpose=command.purpose,
                    expires_at=now + timedelta(minutes=self.ttl_minutes),
                    created_at=now,
                )
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to create verification code", reason=str(e))
            )

        if self.notification_service:
            try:
                await self.notification_service.send_verification_code(code)
            except Exception as e:
                logger.error(f"Failed to send verification code to {code.email}: {e}")

        return Return.ok(
            VerificationCodeSentDTO(email=code.email, purpose=code.purpose.value, expires_at=code.expires_at)
        )
