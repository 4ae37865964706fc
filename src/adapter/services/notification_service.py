"""Notification Service Implementations

Email delivery is outside this service: messages are logged, and optionally
POSTed to a webhook that forwards them.
"""

import logging
from typing import Any, Dict, Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.domain.user_registration import UserRegistration, VerificationCode

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs messages

    Useful for development and testing, or as a fallback.
    """

    async def send_verification_link(self, registration: UserRegistration, link: str) -> bool:
        logger.info(
            f"[VERIFICATION LINK] Registration {registration.id} "
            f"({registration.username} <{registration.email}>): {link}"
        )
        return True

    async def send_verification_code(self, code: VerificationCode) -> bool:
        logger.info(
            f"[VERIFICATION CODE] {code.email} purpose={code.purpose.value} code={code.code} "
            f"expires_at={code.expires_at.isoformat()}"
        )
        return True

    async def send_partial_redemption_alert(
        self, user_id: int, code: str, credits: int, reason: str
    ) -> bool:
        logger.error(
            f"[PARTIAL REDEMPTION] User: {user_id}, Code: {code}, "
            f"Credits: {credits}, Reason: {reason}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that sends messages via HTTP webhook

    Sends JSON payload to configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST messages to
            timeout: Request timeout in seconds
            http_client: Optional client (tests pass one with a mock transport)
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.http_client = http_client

    async def _post(self, payload: Dict[str, Any]) -> bool:
        try:
            if self.http_client is not None:
                response = await self.http_client.post(self.webhook_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.webhook_url,
                        json=payload,
                        headers={"Content-Type": "application/json"},
                    )
            response.raise_for_status()
            logger.info(f"Webhook notification {payload['type']} sent to {self.webhook_url}")
            return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook notification {payload['type']}: {e}")
            return False

    async def send_verification_link(self, registration: UserRegistration, link: str) -> bool:
        return await self._post(
            {
                "type": "verification_link",
                "registration_id": registration.id,
                "email": registration.email,
                "username": registration.username,
                "link": link,
                "expires_at": registration.expires_at.isoformat(),
            }
        )

    async def send_verification_code(self, code: VerificationCode) -> bool:
        return await self._post(
            {
                "type": "verification_code",
                "email": code.email,
                "code": code.code,
                "purpose": code.purpose.value,
                "expires_at": code.expires_at.isoformat(),
            }
        )

    async def send_partial_redemption_alert(
        self, user_id: int, code: str, credits: int, reason: str
    ) -> bool:
        return await self._post(
            {
                "type": "partial_redemption",
                "user_id": user_id,
                "code": code,
                "credits": credits,
                "reason": reason,
            }
        )


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Succeeds if at least one delegate succeeds.
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def _fan_out(self, method: str, *args) -> bool:
        success = False
        for service in self.services:
            try:
                if await getattr(service, method)(*args):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success

    async def send_verification_link(self, registration: UserRegistration, link: str) -> bool:
        return await self._fan_out("send_verification_link", registration, link)

    async def send_verification_code(self, code: VerificationCode) -> bool:
        return await self._fan_out("send_verification_code", code)

    async def send_partial_redemption_alert(
        self, user_id: int, code: str, credits: int, reason: str
    ) -> bool:
        return await self._fan_out("send_partial_redemption_alert", user_id, code, credits, reason)


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
