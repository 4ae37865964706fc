"""CleanExpiredData Use Case"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import (
    UserRegistrationRepository,
    VerificationCodeRepository,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from .dtos import CleanupResultDTO

logger = logging.getLogger(__name__)


class CleanExpiredData:
    """Use Case: Delete expired pending registrations and expired verification codes"""

    def __init__(
        self,
        uow: UnitOfWork,
        registration_repo: UserRegistrationRepository,
        code_repo: VerificationCodeRepository,
    ):
        self.uow = uow
        self.registration_repo = registration_repo
        self.code_repo = code_repo

    async def execute(self) -> Result[CleanupResultDTO]:
        now = datetime.utcnow()
        try:
            registrations = await self.registration_repo.delete_expired_pending(now)
            codes = await self.code_repo.delete_expired(now)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Cleaning expired registration data failed: {e}")
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to clean expired data", reason=str(e))
            )

        if registrations or codes:
            logger.info(f"Deleted {registrations} expired registrations and {codes} expired verification codes")
        return Return.ok(CleanupResultDTO(registrations_deleted=registrations, verification_codes_deleted=codes))
