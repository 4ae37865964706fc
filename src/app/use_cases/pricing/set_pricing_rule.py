"""SetPricingRule Use Case

Creates or replaces the pricing rule of one path.
"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.pricing_rule_repository import PricingRuleRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.pricing_rule import PricingRule
from .dtos import SetPricingRuleCommandDTO, PricingRuleResponseDTO

logger = logging.getLogger(__name__)


class SetPricingRule:
    """
    Use Case: Upsert a pricing rule by path

    Business Rules:
    1. One row per path: an existing rule is updated in place
    2. A soft-deleted rule on the same path is revived
    3. credits >= 0 (0 marks the path free, overriding inherited prices)
    """

    def __init__(self, uow: UnitOfWork, rule_repo: PricingRuleRepository):
        self.uow = uow
        self.rule_repo = rule_repo

    async def execute(self, command: SetPricingRuleCommandDTO) -> Result[PricingRuleResponseDTO]:
        try:
            now = datetime.utcnow()
            rule = await self.rule_repo.get_by_path(command.path, include_deleted=True)

            if rule:
                revived = rule.is_deleted
                rule.credits = command.credits
                rule.is_folder = command.is_folder
                rule.inheritable = command.inheritable
                rule.enabled = command.enabled
                rule.deleted_at = None
                rule.updated_at = now
                if revived:
                    rule.created_by = command.created_by
            else:
                rule = PricingRule(
                    path=command.path,
                    credits=command.credits,
                    is_folder=command.is_folder,
                    inheritable=command.inheritable,
                    enabled=command.enabled,
                    created_by=command.created_by,
                )

            saved = await self.rule_repo.save(rule)
            await self.uow.commit()

            logger.info(f"Pricing rule for {saved.path} set to {saved.credits} credits")
            return Return.ok(PricingRuleResponseDTO.from_entity(saved))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to set pricing rule",
                    reason=str(e),
                )
            )
