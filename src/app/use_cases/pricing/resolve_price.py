from libs.result import Result, Return, Error
from src.app.services.pricing_resolver import PricingResolver
from src.domain.errors import ErrorCode
from .dtos import ResolvedPriceResponseDTO


class ResolvePrice:
    """Use Case: Effective price of a path after inheritance"""

    def __init__(self, resolver: PricingResolver):
        self.resolver = resolver

    async def execute(self, path: str) -> Result[ResolvedPriceResponseDTO]:
        try:
            rule = await self.resolver.resolve_rule(path)
        except Exception as e:
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to resolve price", reason=str(e))
            )

        return Return.ok(
            ResolvedPriceResponseDTO(
                path=path,
                credits=rule.credits if rule else 0,
                rule_path=rule.path if rule else None,
                inherited=bool(rule) and rule.path != path,
            )
        )
