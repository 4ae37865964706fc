"""SQLAlchemy implementation of CreditTransactionRepository

Append-only persistence for CreditTransaction entities.
"""

from typing import List, Tuple
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.domain.credit_transaction import CreditTransaction


class SqlAlchemyCreditTransactionRepository(CreditTransactionRepository):
    """SQLAlchemy implementation of CreditTransactionRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Create a new credit transaction

        Args:
            transaction: CreditTransaction entity to persist

        Returns:
            Created CreditTransaction with generated ID
        """
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get_by_user_id(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[CreditTransaction], int]:
        """
        Retrieve a user's transactions, newest first

        Args:
            user_id: User identifier
            limit: Maximum number of transactions to return
            offset: Offset for pagination

        Returns:
            Tuple of (transactions, total count)
        """
        count_stmt = select(func.count()).select_from(CreditTransaction).where(
            CreditTransaction.user_id == user_id
        )
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar_one()

        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_by_account(self, account_id: int) -> List[CreditTransaction]:
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.account_id == account_id)
            .order_by(CreditTransaction.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
