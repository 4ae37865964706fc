"""Payment Order Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional, Tuple
from src.domain.payment_order import PaymentOrder, PaymentOrderStatus


class PaymentOrderRepository(ABC):
    """
    Repository interface for PaymentOrder persistence

    Status changes are compare-on-current-status updates so that complete,
    cancel and the expiry sweep can race safely: only one of them wins.
    """

    @abstractmethod
    async def create(self, order: PaymentOrder) -> PaymentOrder:
        pass

    @abstractmethod
    async def get_by_order_no(self, order_no: str) -> Optional[PaymentOrder]:
        """
        Retrieve order by order number (always the current row)

        Returns:
            PaymentOrder if found, None otherwise
        """
        pass

    @abstractmethod
    async def transition_status(
        self,
        order_no: str,
        expected: PaymentOrderStatus,
        target: PaymentOrderStatus,
        **values: Any,
    ) -> bool:
        """
        Move an order from expected to target status

        Pairs not allowed by ORDER_TRANSITIONS are refused without touching
        the store.

        Args:
            order_no: Order number
            expected: Status the order must currently have
            target: New status
            **values: Extra columns to set in the same update (paid_at, ...)

        Returns:
            True if the pair is allowed and the order was in the expected
            status and got updated
        """
        pass

    @abstractmethod
    async def update_payment_data(self, order_no: str, payment_data: str) -> None:
        pass

    @abstractmethod
    async def get_by_user_id(
        self, user_id: int, limit: int = 20, offset: int = 0
    ) -> Tuple[List[PaymentOrder], int]:
        """Page of a user's orders, newest first, with total count"""
        pass

    @abstractmethod
    async def expire_overdue(self, cutoff: datetime) -> int:
        """
        Mark every PENDING order with expires_at < cutoff as EXPIRED

        Returns:
            Number of orders expired
        """
        pass
