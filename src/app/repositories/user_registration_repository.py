"""User Registration Repository Interfaces

Covers registrations, verification codes and the host user rows created on
approval.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional, Tuple
from src.domain.user import User
from src.domain.user_registration import (
    RegistrationStatus,
    UserRegistration,
    VerificationCode,
    VerificationPurpose,
)


class UserRegistrationRepository(ABC):
    """Repository interface for UserRegistration persistence"""

    @abstractmethod
    async def create(self, registration: UserRegistration) -> UserRegistration:
        pass

    @abstractmethod
    async def get_by_id(self, registration_id: int) -> Optional[UserRegistration]:
        pass

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[UserRegistration]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserRegistration]:
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[UserRegistration]:
        pass

    @abstractmethod
    async def transition_status(
        self,
        registration_id: int,
        expected: RegistrationStatus,
        target: RegistrationStatus,
        **values: Any,
    ) -> bool:
        """
        Move a registration from expected to target status
        (pairs not allowed by REGISTRATION_TRANSITIONS are refused)

        Returns:
            True if the registration was in the expected status and got updated
        """
        pass

    @abstractmethod
    async def list_pending(self, limit: int = 20, offset: int = 0) -> Tuple[List[UserRegistration], int]:
        pass

    @abstractmethod
    async def delete_expired_pending(self, now: datetime) -> int:
        """Delete PENDING registrations whose token expired; returns count"""
        pass

    @abstractmethod
    async def delete(self, registration_id: int) -> None:
        pass


class VerificationCodeRepository(ABC):
    """Repository interface for VerificationCode persistence"""

    @abstractmethod
    async def create(self, code: VerificationCode) -> VerificationCode:
        pass

    @abstractmethod
    async def get_latest(self, email: str, purpose: VerificationPurpose) -> Optional[VerificationCode]:
        """Most recent unused code for (email, purpose), expired or not"""
        pass

    @abstractmethod
    async def mark_used(self, code_id: int) -> bool:
        """
        Consume a code

        Returns:
            True if the code was unused and is now used
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        pass


class UserRepository(ABC):
    """Repository interface for the host users this service creates"""

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        pass
