"""VerifyCode Use Case"""

import hmac
import logging
from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import VerificationCodeRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from .dtos import VerifyCodeCommandDTO

logger = logging.getLogger(__name__)


class VerifyCode:
    """
    Use Case: Check and consume a verification code

    Business Rules:
    1. Only the most recent unused code for (email, purpose) counts
    2. Expired -> VERIFICATION_CODE_EXPIRED, wrong digits -> VERIFICATION_CODE_MISMATCH
    3. Consumption is a conditional used=false -> true update, so a code
       verifies at most once
    """

    def __init__(self, uow: UnitOfWork, code_repo: VerificationCodeRepository):
        self.uow = uow
        self.code_repo = code_repo

    async def execute(self, command: VerifyCodeCommandDTO) -> Result[None]:
        try:
            code = await self.code_repo.get_latest(command.email, command.purpose)
            if not code:
                return Return.err(self._not_found(command))

            if code.is_expired():
                return Return.err(
                    Error(
                        code=ErrorCode.VERIFICATION_CODE_EXPIRED,
                        message="Verification code has expired",
                        reason=f"expires_at={code.expires_at.isoformat()}",
                    )
                )

            if not hmac.compare_digest(code.code, command.code):
                return Return.err(
                    Error(code=ErrorCode.VERIFICATION_CODE_MISMATCH, message="Verification code is incorrect")
                )

            if not await self.code_repo.mark_used(code.id):
                await self.uow.rollback()
                return Return.err(self._not_found(command))

            await self.uow.commit()
            logger.info(f"Verification code for {command.email} ({command.purpose.value}) consumed")
            return Return.ok()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to verify code", reason=str(e))
            )

    @staticmethod
    def _not_found(command: VerifyCodeCommandDTO) -> Error:
        return Error(
            code=ErrorCode.VERIFICATION_CODE_NOT_FOUND,
            message="No usable verification code for this email",
            reason=f"email={command.email}, purpose={command.purpose.value}",
        )
