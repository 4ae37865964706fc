"""SQLAlchemy implementation of CreditAccountRepository

Balance updates are optimistic compare-and-set statements instead of
SELECT FOR UPDATE, so they behave the same on SQLite and PostgreSQL.
"""

from typing import List, Optional
from datetime import datetime
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.domain.credit_account import CreditAccount


class SqlAlchemyCreditAccountRepository(CreditAccountRepository):
    """
    SQLAlchemy implementation of CreditAccountRepository

    Features:
    - Reads bypass the identity map (populate_existing) so retries see fresh balances
    - Single-statement conditional balance update
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: int) -> Optional[CreditAccount]:
        stmt = (
            select(CreditAccount)
            .where(CreditAccount.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, account: CreditAccount) -> Optional[CreditAccount]:
        """
        Create a new credit account inside a SAVEPOINT

        A duplicate user_id only rolls back the savepoint, leaving the
        surrounding transaction usable.

        Args:
            account: CreditAccount entity to persist

        Returns:
            Created CreditAccount with generated ID, or None if the user
            already has an account
        """
        try:
            async with self.session.begin_nested():
                self.session.add(account)
                await self.session.flush()
        except IntegrityError:
            return None
        await self.session.refresh(account)
        return account

    async def compare_and_set_balance(
        self,
        account_id: int,
        expected_balance: int,
        new_balance: int,
        earned_delta: int = 0,
        spent_delta: int = 0,
    ) -> bool:
        stmt = (
            update(CreditAccount)
            .where(CreditAccount.id == account_id, CreditAccount.balance == expected_balance)
            .values(
                balance=new_balance,
                total_earned=CreditAccount.total_earned + earned_delta,
                total_spent=CreditAccount.total_spent + spent_delta,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def get_all(self) -> List[CreditAccount]:
        stmt = (
            select(CreditAccount)
            .order_by(CreditAccount.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
