"""CheckDownloadPermission Use Case

Answers whether a user can afford to download a path, without charging.
"""

from libs.result import Result, Return, Error
from src.app.services.ledger_service import LedgerService
from src.app.services.pricing_resolver import PricingResolver
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from .dtos import DownloadCheckResponseDTO


class CheckDownloadPermission:
    """
    Use Case: Check download permission

    Free paths (no rule, or a rule of 0 credits) are always allowed.
    Priced paths are allowed when the balance covers the price.
    """

    def __init__(self, uow: UnitOfWork, ledger: LedgerService, resolver: PricingResolver):
        self.uow = uow
        self.ledger = ledger
        self.resolver = resolver

    async def execute(self, user_id: int, path: str) -> Result[DownloadCheckResponseDTO]:
        try:
            rule = await self.resolver.resolve_rule(path)
            required = rule.credits if rule else 0

            account = await self.ledger.get_or_create_account(user_id)
            await self.uow.commit()

            return Return.ok(
                DownloadCheckResponseDTO(
                    path=path,
                    allowed=required <= 0 or account.balance >= required,
                    required_credits=required,
                    balance=account.balance,
                    rule_path=rule.path if rule else None,
                )
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to check download permission",
                    reason=str(e),
                )
            )
