"""Redeem Code API Routes"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.redeem_request import GenerateRedeemCodesRequestSchema, RedeemRequestSchema
from src.app.use_cases.redeem.dtos import (
    GenerateRedeemCodesCommandDTO,
    GenerateRedeemCodesResponseDTO,
    ListRedeemCodesResponseDTO,
    RedeemCommandDTO,
    RedeemResponseDTO,
)
from src.app.use_cases.redeem.generate_redeem_codes import GenerateRedeemCodes
from src.app.use_cases.redeem.list_redeem_codes import ListRedeemCodes
from src.app.use_cases.redeem.redeem_code import RedeemCode
from src.app.services.notification_service import NotificationService
from src.adapter.repositories.redeem_code_repository import SqlAlchemyRedeemCodeRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    build_ledger,
    get_current_user_id,
    get_notification_service,
    get_session,
    require_admin,
)
from src.api.error import ClientError

router = APIRouter(prefix="/credits", tags=["Redeem Codes"])


@router.post(
    "/redeem-codes",
    response_model=GenerateRedeemCodesResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def generate_redeem_codes(
    request: GenerateRedeemCodesRequestSchema,
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Generate a batch of redeem codes (admin only).

    Every code in the batch grants the same credits and can be redeemed
    `max_uses` times in total, by any users, until `expires_at`.
    """
    command = GenerateRedeemCodesCommandDTO(
        count=request.count,
        credits=request.credits,
        max_uses=request.max_uses,
        description=request.description,
        expires_at=request.expires_at,
        created_by=admin_id or 0,
    )

    use_case = GenerateRedeemCodes(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRedeemCodeRepository(session),
        prefix=ApplicationConfig.REDEEM_CODE_PREFIX,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/redeem-codes", response_model=ListRedeemCodesResponseDTO, status_code=status.HTTP_200_OK)
async def list_redeem_codes(
    page: int = Query(default=1),
    page_size: int = Query(default=20),
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    result = await ListRedeemCodes(SqlAlchemyRedeemCodeRepository(session)).execute(page, page_size)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/redeem",
    response_model=RedeemResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Code disabled, expired or used up",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CODE_UNUSABLE",
                            "message": "Redeem code can no longer be used"
                        }
                    }
                }
            }
        }
    }
)
async def redeem(
    request: RedeemRequestSchema,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Redeem a code for credits.

    **Returns:**
    - 200: Credits granted and the new balance
    - 400: Code disabled, expired or used up
    - 404: Unknown code
    - 500: Code consumed but the credit grant failed (admins are alerted)
    """
    use_case = RedeemCode(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRedeemCodeRepository(session),
        build_ledger(session),
        notification_service=notification_service,
    )
    result = await use_case.execute(RedeemCommandDTO(user_id=user_id, code=request.code))

    if result.is_err():
        raise ClientError(result.error)

    return result.value
