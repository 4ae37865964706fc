from libs.result import Result, Return, Error
from src.app.repositories.redeem_code_repository import RedeemCodeRepository
from src.app.use_cases.pagination import clamp_page
from src.domain.errors import ErrorCode
from .dtos import ListRedeemCodesResponseDTO, RedeemCodeResponseDTO


class ListRedeemCodes:
    """Use Case: Page through redeem codes, newest first (admin)"""

    def __init__(self, code_repo: RedeemCodeRepository):
        self.code_repo = code_repo

    async def execute(self, page: int = 1, page_size: int = 20) -> Result[ListRedeemCodesResponseDTO]:
        page, page_size, offset = clamp_page(page, page_size)
        try:
            codes, total = await self.code_repo.list(limit=page_size, offset=offset)
        except Exception as e:
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to list redeem codes", reason=str(e))
            )

        return Return.ok(
            ListRedeemCodesResponseDTO(
                codes=[RedeemCodeResponseDTO.from_entity(code) for code in codes],
                total=total,
                page=page,
                page_size=page_size,
            )
        )
