from libs.result import Result, Return, Error
from src.app.repositories.pricing_rule_repository import PricingRuleRepository
from src.domain.errors import ErrorCode
from .dtos import PricingRuleResponseDTO


class GetPricingRule:
    """Use Case: Read the rule stored for exactly one path (no inheritance)"""

    def __init__(self, rule_repo: PricingRuleRepository):
        self.rule_repo = rule_repo

    async def execute(self, path: str) -> Result[PricingRuleResponseDTO]:
        rule = await self.rule_repo.get_by_path(path)
        if not rule:
            return Return.err(
                Error(
                    code=ErrorCode.RULE_NOT_FOUND,
                    message=f"No pricing rule for {path}",
                )
            )
        return Return.ok(PricingRuleResponseDTO.from_entity(rule))
