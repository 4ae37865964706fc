import json
from typing import List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from src.depends import get_notification_service, get_payment_providers, get_session
from src.app.services.notification_service import NotificationService
from src.app.services.payment_provider import (
    PaymentProvider,
    PaymentProviderRegistry,
    PaymentResponse,
    PaymentVerification,
    RefundResponse,
)
from src.domain.payment_order import PaymentOrder


class JsonStubPaymentProvider(PaymentProvider):
    """Gateway stand-in whose notifications are JSON bodies signed with sign="good" """

    name = "stub"

    def __init__(self):
        self.created: List[str] = []

    async def create_order(self, order: PaymentOrder) -> PaymentResponse:
        self.created.append(order.order_no)
        return PaymentResponse(
            order_no=order.order_no,
            qr_code=f"https://pay.example/qr/{order.order_no}",
        )

    async def verify_callback(self, raw) -> PaymentVerification:
        payload = json.loads(raw) if isinstance(raw, (str, bytes)) else dict(raw)
        if payload.get("sign") != "good":
            return PaymentVerification(valid=False, message="bad signature")
        return PaymentVerification(
            valid=True,
            paid=payload.get("paid", True),
            order_no=payload["order_no"],
            provider_transaction_id=payload.get("trade_no"),
            amount=payload.get("amount"),
            payment_data=payload,
        )

    async def refund(self, order_no: str, amount: int) -> RefundResponse:
        return RefundResponse(success=True, refund_id=f"R-{order_no}")


class RecordingNotificationService(NotificationService):
    """Keeps every message instead of delivering it"""

    def __init__(self):
        self.links: List[Tuple[str, str]] = []
        self.codes: List[Tuple[str, str]] = []
        self.alerts: List[Tuple[int, str]] = []

    async def send_verification_link(self, registration, link: str) -> bool:
        self.links.append((registration.email, link))
        return True

    async def send_verification_code(self, code) -> bool:
        self.codes.append((code.email, code.code))
        return True

    async def send_partial_redemption_alert(self, user_id: int, code: str, credits: int, reason: str) -> bool:
        self.alerts.append((user_id, code))
        return True


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite database, fresh for every test"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'credits_test.db'}", echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest.fixture
def stub_provider():
    return JsonStubPaymentProvider()


@pytest.fixture
def notifications():
    return RecordingNotificationService()


@pytest_asyncio.fixture
async def client(db_session, stub_provider, notifications):
    """Create test client with database, gateway and notification overrides"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_payment_providers] = lambda: PaymentProviderRegistry([stub_provider])
    app.dependency_overrides[get_notification_service] = lambda: notifications

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
