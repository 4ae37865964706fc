"""SQLAlchemy implementations of the registration repositories"""

from typing import Any, List, Optional, Tuple
from datetime import datetime
from sqlalchemy import update, delete
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.user_registration_repository import (
    UserRegistrationRepository,
    VerificationCodeRepository,
    UserRepository,
)
from src.domain.user import User
from src.domain.user_registration import (
    RegistrationStatus,
    UserRegistration,
    VerificationCode,
    VerificationPurpose,
    can_transition,
)


class SqlAlchemyUserRegistrationRepository(UserRegistrationRepository):
    """SQLAlchemy implementation of UserRegistrationRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, registration: UserRegistration) -> UserRegistration:
        self.session.add(registration)
        await self.session.flush()
        await self.session.refresh(registration)
        return registration

    async def _get_one(self, *criteria) -> Optional[UserRegistration]:
        stmt = (
            select(UserRegistration)
            .where(*criteria)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, registration_id: int) -> Optional[UserRegistration]:
        return await self._get_one(UserRegistration.id == registration_id)

    async def get_by_token(self, token: str) -> Optional[UserRegistration]:
        return await self._get_one(UserRegistration.token == token)

    async def get_by_email(self, email: str) -> Optional[UserRegistration]:
        return await self._get_one(UserRegistration.email == email)

    async def get_by_username(self, username: str) -> Optional[UserRegistration]:
        return await self._get_one(UserRegistration.username == username)

    async def transition_status(
        self,
        registration_id: int,
        expected: RegistrationStatus,
        target: RegistrationStatus,
        **values: Any,
    ) -> bool:
        if not can_transition(expected, target):
            return False
        stmt = (
            update(UserRegistration)
            .where(UserRegistration.id == registration_id, UserRegistration.status == expected)
            .values(status=target, updated_at=datetime.utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_pending(self, limit: int = 20, offset: int = 0) -> Tuple[List[UserRegistration], int]:
        """
        Registrations awaiting an admin decision (PENDING or VERIFIED), oldest first

        Returns:
            Tuple of (registrations, total count)
        """
        waiting = UserRegistration.status.in_([RegistrationStatus.PENDING, RegistrationStatus.VERIFIED])

        count_result = await self.session.execute(
            select(func.count()).select_from(UserRegistration).where(waiting)
        )
        total = count_result.scalar_one()

        stmt = (
            select(UserRegistration)
            .where(waiting)
            .order_by(UserRegistration.created_at, UserRegistration.id)
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def delete_expired_pending(self, now: datetime) -> int:
        stmt = (
            delete(UserRegistration)
            .where(
                UserRegistration.status == RegistrationStatus.PENDING,
                UserRegistration.expires_at < now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete(self, registration_id: int) -> None:
        stmt = (
            delete(UserRegistration)
            .where(UserRegistration.id == registration_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)


class SqlAlchemyVerificationCodeRepository(VerificationCodeRepository):
    """SQLAlchemy implementation of VerificationCodeRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, code: VerificationCode) -> VerificationCode:
        self.session.add(code)
        await self.session.flush()
        await self.session.refresh(code)
        return code

    async def get_latest(self, email: str, purpose: VerificationPurpose) -> Optional[VerificationCode]:
        stmt = (
            select(VerificationCode)
            .where(
                VerificationCode.email == email,
                VerificationCode.purpose == purpose,
                VerificationCode.used == False,  # noqa: E712
            )
            .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_used(self, code_id: int) -> bool:
        stmt = (
            update(VerificationCode)
            .where(VerificationCode.id == code_id, VerificationCode.used == False)  # noqa: E712
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def delete_expired(self, now: datetime) -> int:
        stmt = (
            delete(VerificationCode)
            .where(VerificationCode.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount


class SqlAlchemyUserRepository(UserRepository):
    """SQLAlchemy implementation of UserRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user
