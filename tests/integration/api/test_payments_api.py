"""Integration tests for Payments API endpoints"""

import json
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from src.domain.payment_order import PaymentOrder

ADMIN = {"X-User-Id": "1", "X-User-Role": "admin"}


def as_user(user_id: int) -> dict:
    return {"X-User-Id": str(user_id)}


async def _create_order(client: AsyncClient, user_id: int, credits: int = 100) -> dict:
    response = await client.post(
        "/api/payments/orders",
        json={"credits": credits, "payment_method": "stub"},
        headers=as_user(user_id),
    )
    assert response.status_code == 201
    return response.json()


async def _notify(client: AsyncClient, **fields):
    payload = {"sign": "good", **fields}
    return await client.post("/api/payments/notify/stub", content=json.dumps(payload))


class TestPaymentOrdersAPIIntegration:
    """Integration test suite for /api/payments/orders"""

    @pytest.mark.asyncio
    async def test_create_order(self, client: AsyncClient, stub_provider):
        order = await _create_order(client, user_id=30, credits=250)

        assert order["status"] == "pending"
        assert order["credits"] == 250
        assert order["amount"] == 250
        assert order["currency"] == "CNY"
        assert order["payment_method"] == "stub"
        assert order["qr_code"] == f"https://pay.example/qr/{order['order_no']}"
        assert order["order_no"].startswith("OL")
        assert stub_provider.created == [order["order_no"]]

    @pytest.mark.asyncio
    async def test_unknown_payment_method(self, client: AsyncClient):
        response = await client.post(
            "/api/payments/orders",
            json={"credits": 10, "payment_method": "paypal"},
            headers=as_user(30),
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PROVIDER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_orders_are_private_to_their_owner(self, client: AsyncClient):
        order = await _create_order(client, user_id=31)

        other = await client.get(f"/api/payments/orders/{order['order_no']}", headers=as_user(32))
        owner = await client.get(f"/api/payments/orders/{order['order_no']}", headers=as_user(31))
        admin = await client.get(f"/api/payments/orders/{order['order_no']}", headers=ADMIN)

        assert other.status_code == 403
        assert owner.status_code == 200
        assert admin.status_code == 200

        listing = await client.get("/api/payments/orders", headers=as_user(31))
        assert listing.json()["total"] == 1
        assert listing.json()["orders"][0]["order_no"] == order["order_no"]

    @pytest.mark.asyncio
    async def test_cancel_order(self, client: AsyncClient):
        order = await _create_order(client, user_id=33)
        path = f"/api/payments/orders/{order['order_no']}/cancel"

        forbidden = await client.post(path, headers=as_user(34))
        cancelled = await client.post(path, headers=as_user(33))
        again = await client.post(path, headers=as_user(33))

        assert forbidden.status_code == 403
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "INVALID_ORDER_STATE"

    @pytest.mark.asyncio
    async def test_admin_completes_order_once(self, client: AsyncClient):
        order = await _create_order(client, user_id=35, credits=40)

        completed = await client.post(
            "/api/payments/orders/complete", json={"order_no": order["order_no"]}, headers=ADMIN
        )
        repeated = await client.post(
            "/api/payments/orders/complete", json={"order_no": order["order_no"]}, headers=ADMIN
        )

        assert completed.status_code == 200
        assert completed.json()["status"] == "paid"
        assert completed.json()["credits_granted"] == 40
        assert completed.json()["balance"] == 40
        assert repeated.status_code == 409

        balance = await client.get("/api/credits/balance", headers=as_user(35))
        assert balance.json()["balance"] == 40

    @pytest.mark.asyncio
    async def test_expired_order_is_not_paid(self, client: AsyncClient, db_session):
        order = await _create_order(client, user_id=36)
        await db_session.execute(
            update(PaymentOrder)
            .where(PaymentOrder.order_no == order["order_no"])
            .values(expires_at=datetime.utcnow() - timedelta(minutes=1))
        )
        await db_session.commit()

        response = await client.post(
            "/api/payments/orders/complete", json={"order_no": order["order_no"]}, headers=ADMIN
        )

        assert response.status_code == 410
        assert response.json()["error"]["code"] == "ORDER_EXPIRED"
        stored = await client.get(f"/api/payments/orders/{order['order_no']}", headers=as_user(36))
        assert stored.json()["status"] == "expired"
        balance = await client.get("/api/credits/balance", headers=as_user(36))
        assert balance.json()["balance"] == 0


class TestPaymentNotificationAPIIntegration:
    """Provider notifications posted to /api/payments/notify/{provider}"""

    @pytest.mark.asyncio
    async def test_paid_notification_grants_credits_once(self, client: AsyncClient):
        order = await _create_order(client, user_id=40, credits=120)

        first = await _notify(client, order_no=order["order_no"], trade_no="T-40", amount=120)
        duplicate = await _notify(client, order_no=order["order_no"], trade_no="T-40", amount=120)

        assert first.status_code == 200
        assert first.text == "success"
        assert duplicate.status_code == 200
        assert duplicate.text == "success"

        stored = await client.get(f"/api/payments/orders/{order['order_no']}", headers=as_user(40))
        assert stored.json()["status"] == "paid"
        assert stored.json()["provider_transaction_id"] == "T-40"

        history = await client.get("/api/credits/transactions", headers=as_user(40))
        assert history.json()["total"] == 1
        assert history.json()["transactions"][0]["source"] == "purchase"
        assert history.json()["transactions"][0]["amount"] == 120

    @pytest.mark.asyncio
    async def test_bad_signature_is_rejected_without_changes(self, client: AsyncClient):
        order = await _create_order(client, user_id=41)

        response = await client.post(
            "/api/payments/notify/stub",
            content=json.dumps({"sign": "forged", "order_no": order["order_no"], "amount": 100}),
        )

        assert response.status_code == 400
        assert response.text == "fail"
        stored = await client.get(f"/api/payments/orders/{order['order_no']}", headers=as_user(41))
        assert stored.json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_amount_mismatch_is_acknowledged_but_not_credited(self, client: AsyncClient):
        order = await _create_order(client, user_id=42, credits=100)

        response = await _notify(client, order_no=order["order_no"], trade_no="T-42", amount=1)

        assert response.status_code == 200
        assert response.text == "success"
        stored = await client.get(f"/api/payments/orders/{order['order_no']}", headers=as_user(42))
        assert stored.json()["status"] == "pending"
        balance = await client.get("/api/credits/balance", headers=as_user(42))
        assert balance.json()["balance"] == 0

    @pytest.mark.asyncio
    async def test_unpaid_notification_fails_order(self, client: AsyncClient):
        order = await _create_order(client, user_id=43)

        response = await _notify(client, order_no=order["order_no"], trade_no="T-43", paid=False)

        assert response.status_code == 200
        stored = await client.get(f"/api/payments/orders/{order['order_no']}", headers=as_user(43))
        assert stored.json()["status"] == "failed"

    @pytest.mark.asyncio
    async def test_unknown_order(self, client: AsyncClient):
        response = await _notify(client, order_no="OL0000000000NOPE", trade_no="T-0", amount=1)

        assert response.status_code == 404
        assert response.text == "fail"

    @pytest.mark.asyncio
    async def test_unknown_provider(self, client: AsyncClient):
        response = await client.post("/api/payments/notify/paypal", content=b"{}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PROVIDER_NOT_FOUND"
