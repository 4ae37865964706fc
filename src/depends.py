from functools import lru_cache
from typing import Optional
from fastapi import Header
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from src.adapter.repositories import (
    SqlAlchemyCreditAccountRepository,
    SqlAlchemyCreditTransactionRepository,
)
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.payment_providers import create_payment_provider_registry
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError, UNAUTHORIZED
from src.app.services.ledger_service import LedgerService
from src.app.services.notification_service import NotificationService
from src.app.services.payment_provider import PaymentProviderRegistry
from src.domain.errors import ErrorCode

ADMIN_ROLE = "admin"

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def build_ledger(session: AsyncSession) -> LedgerService:
    return LedgerService(
        SqlAlchemyCreditAccountRepository(session),
        SqlAlchemyCreditTransactionRepository(session),
        max_retries=ApplicationConfig.LEDGER_MAX_RETRIES,
    )


@lru_cache(maxsize=1)
def get_payment_providers() -> PaymentProviderRegistry:
    return create_payment_provider_registry(ApplicationConfig)


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    return create_notification_service(ApplicationConfig.NOTIFICATION_WEBHOOK)


def _parse_user_id(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip().isdigit():
        return None
    return int(value)


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> int:
    """Caller identity as forwarded by the host's auth proxy"""
    user_id = _parse_user_id(x_user_id)
    if user_id is None:
        raise ClientError(
            Error(code=UNAUTHORIZED, message="Missing or invalid X-User-Id header", reason=f"X-User-Id={x_user_id!r}")
        )
    return user_id


async def require_admin(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Optional[int]:
    """
    Guard for admin routes

    Returns:
        The admin's user id when the proxy supplied one
    """
    if not ApplicationConfig.AUTH_DISABLED and (x_user_role or "").lower() != ADMIN_ROLE:
        raise ClientError(
            Error(code=ErrorCode.FORBIDDEN, message="Admin role required", reason=f"X-User-Role={x_user_role!r}")
        )
    return _parse_user_id(x_user_id)
