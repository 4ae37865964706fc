"""RedeemCode Use Case

Exchanges a redeem code for credits.
"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.redeem_code_repository import RedeemCodeRepository
from src.app.services.ledger_service import LedgerService
from src.app.services.notification_service import NotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.credit_transaction import TransactionSource
from src.domain.errors import ErrorCode
from src.domain.redeem_code import RedeemCodeUsage
from .dtos import RedeemCommandDTO, RedeemResponseDTO

logger = logging.getLogger(__name__)


class RedeemCode:
    """
    Use Case: Redeem a code

    Business Rules:
    1. Unknown code -> CODE_NOT_FOUND
    2. Disabled, expired or exhausted code -> CODE_UNUSABLE
    3. used_count is incremented by a single conditional UPDATE, so N
       concurrent redemptions of a code with N remaining uses all succeed
       and the next one fails with CODE_UNUSABLE
    4. The same user may redeem a multi-use code repeatedly
    5. The consumed use is committed before the credit grant; if the grant
       then fails the use stays consumed and PARTIAL_REDEMPTION_FAILURE is
       returned and reported to operators

    Flow:
    1. Look up code and check usability
    2. Conditionally consume one use + record usage, commit
    3. Credit the user through the ledger, commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        code_repo: RedeemCodeRepository,
        ledger: LedgerService,
        notification_service: Optional[NotificationService] = None,
    ):
        self.uow = uow
        self.code_repo = code_repo
        self.ledger = ledger
        self.notification_service = notification_service

    async def execute(self, command: RedeemCommandDTO) -> Result[RedeemResponseDTO]:
        """
        Execute redemption

        Args:
            command: RedeemCommandDTO with user_id and code

        Returns:
            Result[RedeemResponseDTO]: Granted credits and new balance, or error
        """
        now = datetime.utcnow()

        try:
            redeem_code = await self.code_repo.get_by_code(command.code)
            if not redeem_code:
                return Return.err(
                    Error(
                        code=ErrorCode.CODE_NOT_FOUND,
                        message="Redeem code does not exist",
                        reason=f"code={command.code}",
                    )
                )

            code_value = redeem_code.code
            credits = redeem_code.credits
            if not redeem_code.can_use(now):
                return Return.err(self._unusable(redeem_code.code))

            consumed = await self.code_repo.try_consume(redeem_code.id, now)
            if not consumed:
                await self.uow.rollback()
                return Return.err(self._unusable(code_value))

            await self.code_repo.create_usage(
                RedeemCodeUsage(
                    redeem_code_id=redeem_code.id,
                    user_id=command.user_id,
                    credits=credits,
                    used_at=now,
                )
            )
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to redeem code",
                    reason=str(e),
                )
            )

        # The use is now consumed; from here on a failure is a partial redemption
        try:
            result = await self.ledger.credit(
                user_id=command.user_id,
                amount=credits,
                source=TransactionSource.REDEEM,
                source_id=code_value,
                description=f"Redeem code {code_value}",
            )
            if result.is_err():
                await self.uow.rollback()
                return await self._partial_failure(command, credits, result.error.reason or result.error.message)

            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return await self._partial_failure(command, credits, str(e))

        transaction = result.value
        logger.info(f"User {command.user_id} redeemed {code_value} for {credits} credits")
        return Return.ok(
            RedeemResponseDTO(
                code=code_value,
                credits_granted=credits,
                balance=transaction.balance_after,
                transaction_id=transaction.id,
            )
        )

    @staticmethod
    def _unusable(code: str) -> Error:
        return Error(
            code=ErrorCode.CODE_UNUSABLE,
            message="Redeem code is disabled, expired or fully used",
            reason=f"code={code}",
        )

    async def _partial_failure(self, command: RedeemCommandDTO, credits: int, reason: str) -> Result:
        logger.error(
            f"Redeem code {command.code} was consumed by user {command.user_id} "
            f"but {credits} credits were not granted: {reason}"
        )
        if self.notification_service:
            try:
                await self.notification_service.send_partial_redemption_alert(
                    command.user_id, command.code, credits, reason
                )
            except Exception as e:
                logger.error(f"Failed to send partial redemption alert: {e}")

        return Return.err(
            Error(
                code=ErrorCode.PARTIAL_REDEMPTION_FAILURE,
                message="Code was consumed but credits could not be granted; support has been notified",
                reason=reason,
            )
        )
