"""Credits API Routes

FastAPI routes for balances, history, admin adjustments and paid downloads.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.credits_request import GrantCreditsRequestSchema, RefundCreditsRequestSchema
from src.app.use_cases.credits.dtos import (
    BalanceResponseDTO,
    CreditTransactionResponseDTO,
    DownloadCheckResponseDTO,
    DownloadResponseDTO,
    GrantCreditsCommandDTO,
    ListTransactionsResponseDTO,
    RefundCreditsCommandDTO,
)
from src.app.use_cases.credits.get_balance import GetBalance
from src.app.use_cases.credits.list_transactions import ListTransactions
from src.app.use_cases.credits.grant_credits import GrantCredits
from src.app.use_cases.credits.refund_credits import RefundCredits
from src.app.use_cases.credits.check_download_permission import CheckDownloadPermission
from src.app.use_cases.credits.process_download import ProcessDownload
from src.app.services.pricing_resolver import PricingResolver
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.pricing_rule_repository import SqlAlchemyPricingRuleRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import build_ledger, get_current_user_id, get_session, require_admin
from src.api.error import ClientError

router = APIRouter(prefix="/credits", tags=["Credits"])

INSUFFICIENT_BALANCE_RESPONSE = {
    402: {
        "description": "Insufficient credits",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INSUFFICIENT_BALANCE",
                        "message": "Insufficient credits",
                        "reason": "balance=3, required=5"
                    }
                }
            }
        }
    }
}


@router.get("/balance", response_model=BalanceResponseDTO, status_code=status.HTTP_200_OK)
async def get_balance(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Get the caller's credit balance.

    The account is created with a zero balance on first access.

    **Returns:**
    - 200: Current balance with lifetime earned and spent totals
    """
    use_case = GetBalance(SqlAlchemyUnitOfWork(session), build_ledger(session))
    result = await use_case.execute(user_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/transactions", response_model=ListTransactionsResponseDTO, status_code=status.HTTP_200_OK)
async def list_transactions(
    page: int = Query(default=1, description="Page number, starting at 1"),
    page_size: int = Query(default=20, description="Items per page (max 100)"),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    List the caller's credit transactions, newest first.

    Out-of-range paging parameters are clamped rather than rejected.
    """
    use_case = ListTransactions(SqlAlchemyCreditTransactionRepository(session))
    result = await use_case.execute(user_id, page=page, page_size=page_size)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/grant", response_model=CreditTransactionResponseDTO, status_code=status.HTTP_200_OK)
async def grant_credits(
    request: GrantCreditsRequestSchema,
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Grant credits to a user (admin only).

    **Request body:**
    - `user_id` (required): User receiving the credits
    - `amount` (required): Credits to add (must be > 0)
    - `description` (optional): Shown in the user's history
    - `metadata` (optional): Additional metadata for audit trail

    **Returns:**
    - 200: The earn transaction
    - 403: Caller is not an admin
    """
    command = GrantCreditsCommandDTO(
        user_id=request.user_id,
        amount=request.amount,
        description=request.description,
        admin_id=admin_id,
        metadata=request.metadata,
    )

    use_case = GrantCredits(SqlAlchemyUnitOfWork(session), build_ledger(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/refund", response_model=CreditTransactionResponseDTO, status_code=status.HTTP_200_OK)
async def refund_credits(
    request: RefundCreditsRequestSchema,
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Refund credits to a user (admin only), e.g. after a failed download.

    **Returns:**
    - 200: The refund transaction
    - 403: Caller is not an admin
    """
    command = RefundCreditsCommandDTO(
        user_id=request.user_id,
        amount=request.amount,
        source_id=request.source_id,
        description=request.description,
        admin_id=admin_id,
        metadata=request.metadata,
    )

    use_case = RefundCredits(SqlAlchemyUnitOfWork(session), build_ledger(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/download/check", response_model=DownloadCheckResponseDTO, status_code=status.HTTP_200_OK)
async def check_download(
    path: str = Query(..., min_length=1, description="Path of the file to download"),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Check whether the caller can afford a download without charging anything.

    **Returns:**
    - 200: `allowed` is true for free paths or when the balance covers the price
    """
    use_case = CheckDownloadPermission(
        SqlAlchemyUnitOfWork(session),
        build_ledger(session),
        PricingResolver(SqlAlchemyPricingRuleRepository(session)),
    )
    result = await use_case.execute(user_id, path)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/download",
    response_model=DownloadResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=INSUFFICIENT_BALANCE_RESPONSE,
)
async def process_download(
    path: str = Query(..., min_length=1, description="Path of the file to download"),
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Charge the caller for a download.

    Free paths succeed without a transaction. Priced paths are debited
    atomically; the balance never goes negative.

    **Returns:**
    - 200: Credits charged and the balance afterwards
    - 402: Insufficient credits available
    """
    use_case = ProcessDownload(
        SqlAlchemyUnitOfWork(session),
        build_ledger(session),
        PricingResolver(SqlAlchemyPricingRuleRepository(session)),
    )
    result = await use_case.execute(user_id, path)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
