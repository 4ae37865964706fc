"""WeChat Pay provider

Native (QR code) payments over the v2 XML API, signed with the merchant
API key (uppercase hex MD5).
"""

import hashlib
import hmac
import logging
import secrets
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import httpx
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET
from src.app.services.payment_provider import (
    PaymentProvider,
    PaymentProviderError,
    PaymentResponse,
    PaymentVerification,
    RefundResponse,
)
from src.domain.payment_order import PaymentOrder

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y%m%d%H%M%S"


def sign_params(params: Mapping[str, str], api_key: str) -> str:
    content = "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if key != "sign" and params[key] != ""
    )
    content += f"&key={api_key}"
    return hashlib.md5(content.encode("utf-8")).hexdigest().upper()


def to_xml(params: Mapping[str, Any]) -> str:
    root = ET.Element("xml")
    for key, value in params.items():
        ET.SubElement(root, key).text = str(value)
    return ET.tostring(root, encoding="unicode")


def from_xml(body: Union[str, bytes]) -> Dict[str, str]:
    root = SafeET.fromstring(body)
    return {child.tag: (child.text or "") for child in root}


class WechatProvider(PaymentProvider):
    """
    WeChat Pay native payments

    Features:
    - unifiedorder returns a code_url rendered as QR code
    - Notifications verified with a constant-time signature comparison
    - total_fee is already in fen, no conversion needed
    """

    name = "wechat"

    def __init__(
        self,
        app_id: str,
        mch_id: str,
        api_key: str,
        gateway: str = "https://api.mch.weixin.qq.com/pay/unifiedorder",
        notify_url: str = "",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.app_id = app_id
        self.mch_id = mch_id
        self.api_key = api_key
        self.gateway = gateway
        self.notify_url = notify_url
        self.http_client = http_client
        self.timeout = timeout

    def verify(self, params: Mapping[str, str]) -> bool:
        sign = params.get("sign")
        if not sign:
            return False
        return hmac.compare_digest(sign_params(params, self.api_key), sign)

    async def _post_xml(self, body: str) -> Dict[str, str]:
        headers = {"Content-Type": "application/xml"}
        try:
            if self.http_client is not None:
                response = await self.http_client.post(self.gateway, content=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.gateway, content=body, headers=headers)
            response.raise_for_status()
            return from_xml(response.content)
        except httpx.HTTPError as e:
            raise PaymentProviderError(f"WeChat Pay request failed: {e}") from e
        except (ET.ParseError, DefusedXmlException) as e:
            raise PaymentProviderError(f"WeChat Pay returned malformed XML: {e}") from e

    async def create_order(self, order: PaymentOrder) -> PaymentResponse:
        params = {
            "appid": self.app_id,
            "mch_id": self.mch_id,
            "nonce_str": secrets.token_hex(16),
            "body": f"Credits purchase - {order.credits} credits",
            "out_trade_no": order.order_no,
            "total_fee": str(order.amount),
            "spbill_create_ip": "127.0.0.1",
            "notify_url": self.notify_url,
            "trade_type": "NATIVE",
        }
        params["sign"] = sign_params(params, self.api_key)

        result = await self._post_xml(to_xml(params))
        if result.get("return_code") != "SUCCESS":
            raise PaymentProviderError(f"WeChat Pay error: {result.get('return_msg')}")
        if result.get("result_code") != "SUCCESS":
            raise PaymentProviderError(
                f"WeChat Pay error: {result.get('err_code')} - {result.get('err_code_des')}"
            )

        logger.info(f"WeChat unifiedorder succeeded for order {order.order_no}")
        return PaymentResponse(
            order_no=order.order_no,
            qr_code=result.get("code_url"),
            payment_data={
                "provider": self.name,
                "prepay_id": result.get("prepay_id"),
                "code_url": result.get("code_url"),
                "trade_type": result.get("trade_type"),
            },
        )

    async def verify_callback(self, raw: Union[Mapping[str, Any], str, bytes]) -> PaymentVerification:
        if isinstance(raw, (str, bytes)):
            try:
                params = from_xml(raw)
            except (ET.ParseError, DefusedXmlException):
                return PaymentVerification(valid=False, message="malformed notification")
        else:
            params = {key: str(value) for key, value in raw.items() if value is not None}

        if not self.verify(params):
            logger.warning(f"Rejected WeChat notification with invalid signature (out_trade_no={params.get('out_trade_no')})")
            return PaymentVerification(valid=False, message="invalid signature")

        paid_at = None
        if params.get("time_end"):
            try:
                paid_at = datetime.strptime(params["time_end"], TIME_FORMAT)
            except ValueError:
                paid_at = None

        amount = int(params["total_fee"]) if params.get("total_fee", "").isdigit() else None

        return PaymentVerification(
            valid=True,
            paid=params.get("return_code") == "SUCCESS" and params.get("result_code") == "SUCCESS",
            order_no=params.get("out_trade_no"),
            provider_transaction_id=params.get("transaction_id"),
            amount=amount,
            paid_at=paid_at,
            payment_data=params,
        )

    async def refund(self, order_no: str, amount: int) -> RefundResponse:
        return RefundResponse(success=False, message="WeChat Pay refunds are not supported by this integration")

    def acknowledgement(self, success: bool) -> Tuple[str, str]:
        if success:
            return to_xml({"return_code": "SUCCESS", "return_msg": "OK"}), "application/xml"
        return to_xml({"return_code": "FAIL", "return_msg": "ERROR"}), "application/xml"
