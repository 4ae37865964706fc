from libs.result import Result, Return, Error
from src.app.repositories.pricing_rule_repository import PricingRuleRepository
from src.app.use_cases.pagination import clamp_page
from src.domain.errors import ErrorCode
from .dtos import ListPricingRulesResponseDTO, PricingRuleResponseDTO


class ListPricingRules:
    """Use Case: Page through active (non-deleted) rules, newest first"""

    def __init__(self, rule_repo: PricingRuleRepository):
        self.rule_repo = rule_repo

    async def execute(self, page: int = 1, page_size: int = 20) -> Result[ListPricingRulesResponseDTO]:
        page, page_size, offset = clamp_page(page, page_size)
        try:
            rules, total = await self.rule_repo.list(limit=page_size, offset=offset)
        except Exception as e:
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to list pricing rules", reason=str(e))
            )

        return Return.ok(
            ListPricingRulesResponseDTO(
                rules=[PricingRuleResponseDTO.from_entity(rule) for rule in rules],
                total=total,
                page=page,
                page_size=page_size,
            )
        )
