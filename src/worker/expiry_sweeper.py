"""Expiry Sweep Background Worker

Expires overdue PENDING payment orders and deletes expired registrations and
verification codes.
"""

import asyncio
import logging
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.payment_order_repository import SqlAlchemyPaymentOrderRepository
from src.adapter.repositories.user_registration_repository import (
    SqlAlchemyUserRegistrationRepository,
    SqlAlchemyVerificationCodeRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.payments import SweepExpiredOrders
from src.app.use_cases.registration import CleanExpiredData

logger = logging.getLogger(__name__)


class ExpirySweeperWorker:
    """
    Background worker for time-based cleanup

    Each cycle runs in its own session:
    1. PENDING orders past expires_at + settlement grace become EXPIRED
    2. Expired PENDING registrations and expired verification codes are deleted

    A failing step is logged and does not stop the other.
    """

    def __init__(self, db_uri: Optional[str] = None, session_factory=None):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.engine = None

        if session_factory is None:
            self.engine = create_async_engine(self.db_uri, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory

        logger.info("ExpirySweeperWorker initialized")

    async def run_once(self) -> Dict[str, int]:
        """
        Run one sweep

        Returns:
            Counts of expired orders and deleted registrations / codes
        """
        summary = {"orders_expired": 0, "registrations_deleted": 0, "verification_codes_deleted": 0}

        if not ApplicationConfig.ORDER_SWEEP_ENABLED:
            logger.info("Expiry sweep is disabled, skipping")
            return summary

        async with self.async_session_factory() as session:
            sweep = SweepExpiredOrders(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyPaymentOrderRepository(session),
                grace_seconds=ApplicationConfig.PAYMENT_ORDER_SETTLEMENT_GRACE_SECONDS,
            )
            result = await sweep.execute()
            if result.is_err():
                logger.error(f"Order sweep failed: {result.error.message} ({result.error.reason})")
            else:
                summary["orders_expired"] = result.value.expired_count

        async with self.async_session_factory() as session:
            cleanup = CleanExpiredData(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyUserRegistrationRepository(session),
                SqlAlchemyVerificationCodeRepository(session),
            )
            result = await cleanup.execute()
            if result.is_err():
                logger.error(f"Registration cleanup failed: {result.error.message} ({result.error.reason})")
            else:
                summary["registrations_deleted"] = result.value.registrations_deleted
                summary["verification_codes_deleted"] = result.value.verification_codes_deleted

        return summary

    async def run_forever(self, interval_seconds: Optional[int] = None):
        interval_seconds = interval_seconds or ApplicationConfig.ORDER_SWEEP_INTERVAL_SECONDS
        logger.info(f"Starting expiry sweep with {interval_seconds}s interval")

        while True:
            try:
                summary = await self.run_once()
                if any(summary.values()):
                    logger.info(f"Sweep cycle complete: {summary}")
            except Exception as e:
                logger.error(f"Sweep cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("ExpirySweeperWorker shutdown complete")


async def main():
    """
    Usage:
        python -m src.worker.expiry_sweeper --once
        python -m src.worker.expiry_sweeper --interval 30
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Expiry Sweep Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.ORDER_SWEEP_INTERVAL_SECONDS,
        help="Interval between runs in seconds"
    )
    args = parser.parse_args()

    worker = ExpirySweeperWorker()

    try:
        if args.once:
            summary = await worker.run_once()
            print("Sweep complete:")
            for key, value in summary.items():
                print(f"  {key}: {value}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
