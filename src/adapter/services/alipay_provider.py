"""Alipay payment provider

Signs gateway requests with the merchant RSA key (RSA2: PKCS#1 v1.5 over
SHA-256) and verifies asynchronous notifications with Alipay's public key.
"""

import base64
import binascii
import json
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import parse_qsl
import httpx
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from src.app.services.payment_provider import (
    PaymentProvider,
    PaymentProviderError,
    PaymentResponse,
    PaymentVerification,
    RefundResponse,
)
from src.domain.payment_order import PaymentOrder

logger = logging.getLogger(__name__)

SUCCESS_CODE = "10000"
PAID_TRADE_STATUSES = ("TRADE_SUCCESS", "TRADE_FINISHED")
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_sign_content(params: Mapping[str, str], exclude: tuple = ("sign",)) -> str:
    """key=value pairs of non-empty params, sorted by key and joined with &"""
    return "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if key not in exclude and params[key] != ""
    )


def minor_units_to_yuan(amount: int) -> str:
    return f"{Decimal(amount) / 100:.2f}"


def yuan_to_minor_units(value: str) -> Optional[int]:
    try:
        return int((Decimal(value) * 100).to_integral_value())
    except (InvalidOperation, TypeError):
        return None


class AlipayProvider(PaymentProvider):
    """
    Alipay QR-code (precreate) payments

    Features:
    - alipay.trade.precreate returns the QR code the user scans
    - Notifications are trusted only after RSA signature verification
    - Amounts cross the wire in yuan with two decimals, stored in fen
    """

    name = "alipay"

    def __init__(
        self,
        app_id: str,
        private_key: rsa.RSAPrivateKey,
        public_key: rsa.RSAPublicKey,
        gateway: str = "https://openapi.alipay.com/gateway.do",
        notify_url: str = "",
        return_url: str = "",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.app_id = app_id
        self.private_key = private_key
        self.public_key = public_key
        self.gateway = gateway
        self.notify_url = notify_url
        self.return_url = return_url
        self.http_client = http_client
        self.timeout = timeout

    @classmethod
    def from_key_files(cls, app_id: str, private_key_path: str, public_key_path: str, **kwargs) -> "AlipayProvider":
        """
        Build a provider from PEM key files

        Args:
            app_id: Alipay application ID
            private_key_path: Merchant private key (PEM)
            public_key_path: Alipay public key (PEM)
        """
        with open(private_key_path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=None)
        with open(public_key_path, "rb") as f:
            public_key = serialization.load_pem_public_key(f.read())
        return cls(app_id, private_key, public_key, **kwargs)

    def sign(self, params: Mapping[str, str]) -> str:
        content = build_sign_content(params, exclude=("sign",))
        signature = self.private_key.sign(content.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
        return base64.b64encode(signature).decode("ascii")

    def verify(self, params: Mapping[str, str]) -> bool:
        """Check the sign field of a notification against Alipay's public key"""
        sign = params.get("sign")
        if not sign:
            return False
        try:
            signature = base64.b64decode(sign, validate=True)
        except (binascii.Error, ValueError):
            return False

        content = build_sign_content(params, exclude=("sign", "sign_type"))
        try:
            self.public_key.verify(signature, content.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
        except InvalidSignature:
            return False
        return True

    def _base_params(self, method: str) -> Dict[str, str]:
        return {
            "app_id": self.app_id,
            "method": method,
            "charset": "utf-8",
            "sign_type": "RSA2",
            "timestamp": datetime.now().strftime(TIME_FORMAT),
            "version": "1.0",
        }

    async def _call(self, params: Dict[str, str], response_key: str) -> Dict[str, Any]:
        params["sign"] = self.sign(params)
        try:
            if self.http_client is not None:
                response = await self.http_client.post(self.gateway, data=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.gateway, data=params)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise PaymentProviderError(f"Alipay request {params['method']} failed: {e}") from e
        except ValueError as e:
            raise PaymentProviderError(f"Alipay returned a non-JSON body: {e}") from e

        result = body.get(response_key)
        if not isinstance(result, dict):
            raise PaymentProviderError(f"Alipay response is missing {response_key}")
        return result

    async def create_order(self, order: PaymentOrder) -> PaymentResponse:
        params = self._base_params("alipay.trade.precreate")
        params["notify_url"] = self.notify_url
        params["return_url"] = self.return_url
        params["biz_content"] = json.dumps(
            {
                "out_trade_no": order.order_no,
                "total_amount": minor_units_to_yuan(order.amount),
                "subject": f"Credits purchase - {order.credits} credits",
                "body": f"Purchase {order.credits} credits",
                "timeout_express": "30m",
            },
            ensure_ascii=False,
        )

        result = await self._call(params, "alipay_trade_precreate_response")
        if result.get("code") != SUCCESS_CODE:
            raise PaymentProviderError(
                f"Alipay error: {result.get('code')} - {result.get('msg')} {result.get('sub_msg') or ''}".strip()
            )

        qr_code = result.get("qr_code")
        logger.info(f"Alipay precreate succeeded for order {order.order_no}")
        return PaymentResponse(
            order_no=order.order_no,
            qr_code=qr_code,
            payment_data={
                "provider": self.name,
                "qr_code": qr_code,
                "out_trade_no": result.get("out_trade_no"),
            },
        )

    async def verify_callback(self, raw: Union[Mapping[str, Any], str, bytes]) -> PaymentVerification:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if isinstance(raw, str):
            raw = dict(parse_qsl(raw, keep_blank_values=True))
        params = {key: str(value) for key, value in raw.items() if value is not None}

        if not self.verify(params):
            logger.warning(f"Rejected Alipay notification with invalid signature (out_trade_no={params.get('out_trade_no')})")
            return PaymentVerification(valid=False, message="invalid signature")

        paid_at = None
        if params.get("gmt_payment"):
            try:
                paid_at = datetime.strptime(params["gmt_payment"], TIME_FORMAT)
            except ValueError:
                paid_at = None

        return PaymentVerification(
            valid=True,
            paid=params.get("trade_status") in PAID_TRADE_STATUSES,
            order_no=params.get("out_trade_no"),
            provider_transaction_id=params.get("trade_no"),
            amount=yuan_to_minor_units(params["total_amount"]) if params.get("total_amount") else None,
            paid_at=paid_at,
            payment_data=params,
        )

    async def refund(self, order_no: str, amount: int) -> RefundResponse:
        params = self._base_params("alipay.trade.refund")
        out_request_no = f"{order_no}_refund_{int(datetime.utcnow().timestamp())}"
        params["biz_content"] = json.dumps(
            {
                "out_trade_no": order_no,
                "refund_amount": minor_units_to_yuan(amount),
                "refund_reason": "User requested refund",
                "out_request_no": out_request_no,
            }
        )

        result = await self._call(params, "alipay_trade_refund_response")
        if result.get("code") != SUCCESS_CODE:
            return RefundResponse(success=False, message=result.get("msg"))
        return RefundResponse(
            success=True,
            refund_id=result.get("out_request_no") or out_request_no,
            message="Refund successful",
        )
