"""Notification Service Interface

Defines the contract for user-facing messages (verification link and code)
and operator alerts (partial redemption failures).
"""

from abc import ABC, abstractmethod
from src.domain.user_registration import UserRegistration, VerificationCode


class NotificationService(ABC):
    """
    Abstract notification service

    Implementations can deliver via:
    - Log output
    - Webhook (HTTP POST)
    - Email gateway behind a webhook
    """

    @abstractmethod
    async def send_verification_link(self, registration: UserRegistration, link: str) -> bool:
        """
        Send the registration verification link

        Args:
            registration: Registration awaiting verification
            link: URL containing the verification token

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass

    @abstractmethod
    async def send_verification_code(self, code: VerificationCode) -> bool:
        pass

    @abstractmethod
    async def send_partial_redemption_alert(
        self, user_id: int, code: str, credits: int, reason: str
    ) -> bool:
        """
        Alert operators that a code was consumed but its credits were not granted

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
