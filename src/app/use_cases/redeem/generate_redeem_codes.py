"""GenerateRedeemCodes Use Case"""

import logging
import secrets
import string
from libs.result import Result, Return, Error
from src.app.repositories.redeem_code_repository import RedeemCodeRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import ErrorCode
from src.domain.redeem_code import RedeemCode
from .dtos import GenerateRedeemCodesCommandDTO, GenerateRedeemCodesResponseDTO

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_letters + string.digits
CODE_RANDOM_LENGTH = 12


def generate_code(prefix: str = "OL") -> str:
    return prefix + "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_RANDOM_LENGTH))


class GenerateRedeemCodes:
    """
    Use Case: Generate a batch of redeem codes

    Business Rules:
    1. 1..1000 codes per batch, all with the same credits/max_uses/expiry
    2. Code format: prefix + 12 random letters and digits
    3. The whole batch is committed at once or not at all
    """

    def __init__(self, uow: UnitOfWork, code_repo: RedeemCodeRepository, prefix: str = "OL"):
        self.uow = uow
        self.code_repo = code_repo
        self.prefix = prefix

    async def execute(self, command: GenerateRedeemCodesCommandDTO) -> Result[GenerateRedeemCodesResponseDTO]:
        try:
            values: set[str] = set()
            while len(values) < command.count:
                values.add(generate_code(self.prefix))

            codes = [
                RedeemCode(
                    code=value,
                    credits=command.credits,
                    max_uses=command.max_uses,
                    expires_at=command.expires_at,
                    created_by=command.created_by,
                    description=command.description,
                )
                for value in sorted(values)
            ]
            await self.code_repo.create_many(codes)
            await self.uow.commit()

            logger.info(
                f"Admin {command.created_by} generated {command.count} redeem codes "
                f"worth {command.credits} credits x {command.max_uses} uses"
            )
            return Return.ok(
                GenerateRedeemCodesResponseDTO(
                    codes=[code.code for code in codes],
                    credits=command.credits,
                    max_uses=command.max_uses,
                    expires_at=command.expires_at,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to generate redeem codes",
                    reason=str(e),
                )
            )
