"""DeletePricingRule Use Case"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.pricing_rule_repository import PricingRuleRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode

logger = logging.getLogger(__name__)


class DeletePricingRule:
    """
    Use Case: Soft-delete the rule of a path

    The row stays (deleted_at is set) and stops participating in resolution
    immediately.
    """

    def __init__(self, uow: UnitOfWork, rule_repo: PricingRuleRepository):
        self.uow = uow
        self.rule_repo = rule_repo

    async def execute(self, path: str) -> Result[None]:
        try:
            rule = await self.rule_repo.get_by_path(path)
            if not rule:
                return Return.err(
                    Error(
                        code=ErrorCode.RULE_NOT_FOUND,
                        message=f"No pricing rule for {path}",
                    )
                )

            now = datetime.utcnow()
            rule.deleted_at = now
            rule.updated_at = now
            await self.rule_repo.save(rule)
            await self.uow.commit()

            logger.info(f"Pricing rule for {path} deleted")
            return Return.ok()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to delete pricing rule",
                    reason=str(e),
                )
            )
