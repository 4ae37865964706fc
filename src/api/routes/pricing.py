"""Pricing API Routes"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.pricing_request import SetPricingRuleRequestSchema
from src.app.use_cases.pricing.dtos import (
    ListPricingRulesResponseDTO,
    PricingRuleResponseDTO,
    ResolvedPriceResponseDTO,
    SetPricingRuleCommandDTO,
)
from src.app.use_cases.pricing.set_pricing_rule import SetPricingRule
from src.app.use_cases.pricing.get_pricing_rule import GetPricingRule
from src.app.use_cases.pricing.delete_pricing_rule import DeletePricingRule
from src.app.use_cases.pricing.list_pricing_rules import ListPricingRules
from src.app.use_cases.pricing.resolve_price import ResolvePrice
from src.app.services.pricing_resolver import PricingResolver
from src.adapter.repositories.pricing_rule_repository import SqlAlchemyPricingRuleRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, require_admin
from src.api.error import ClientError

router = APIRouter(prefix="/credits/pricing", tags=["Pricing"])


@router.get("", response_model=PricingRuleResponseDTO, status_code=status.HTTP_200_OK)
async def get_pricing_rule(
    path: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    """
    Get the rule set on exactly this path.

    **Returns:**
    - 200: The rule
    - 404: No rule at this path (use /resolve for the effective price)
    """
    result = await GetPricingRule(SqlAlchemyPricingRuleRepository(session)).execute(path)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.put("", response_model=PricingRuleResponseDTO, status_code=status.HTTP_200_OK)
async def set_pricing_rule(
    request: SetPricingRuleRequestSchema,
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Create or replace the rule at a path (admin only).

    **Request body:**
    - `path` (required): File or folder path
    - `credits` (required): Price, 0 for free
    - `is_folder`, `inheritable`: Folder rules marked inheritable price every descendant
    - `enabled`: Disabled rules are ignored by price resolution
    """
    command = SetPricingRuleCommandDTO(
        path=request.path,
        credits=request.credits,
        is_folder=request.is_folder,
        inheritable=request.inheritable,
        enabled=request.enabled,
        created_by=admin_id or 0,
    )

    use_case = SetPricingRule(SqlAlchemyUnitOfWork(session), SqlAlchemyPricingRuleRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pricing_rule(
    path: str = Query(..., min_length=1),
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Remove the rule at a path (admin only). The path falls back to inherited or free pricing."""
    use_case = DeletePricingRule(SqlAlchemyUnitOfWork(session), SqlAlchemyPricingRuleRepository(session))
    result = await use_case.execute(path)

    if result.is_err():
        raise ClientError(result.error)


@router.get("/rules", response_model=ListPricingRulesResponseDTO, status_code=status.HTTP_200_OK)
async def list_pricing_rules(
    page: int = Query(default=1),
    page_size: int = Query(default=20),
    session: AsyncSession = Depends(get_session),
):
    result = await ListPricingRules(SqlAlchemyPricingRuleRepository(session)).execute(page, page_size)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/resolve", response_model=ResolvedPriceResponseDTO, status_code=status.HTTP_200_OK)
async def resolve_price(
    path: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    """
    Effective price of a path.

    An exact enabled rule wins; otherwise the nearest enabled inheritable
    folder rule above the path; otherwise the path is free.
    """
    resolver = PricingResolver(SqlAlchemyPricingRuleRepository(session))
    result = await ResolvePrice(resolver).execute(path)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
