"""Unit tests for LedgerReconcilerWorker

Tests cover:
- Worker initialization with configuration
- run_once execution with reconciliation
- Reconciliation disabled scenario
- Discrepancy detection and logging
- run_forever continuous execution
- Shutdown and cleanup
"""

import logging
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from libs.result import Error, Return
from src.app.use_cases.credits import LedgerDiscrepancyDTO, ReconciliationResultDTO
from src.worker.ledger_reconciler import LedgerReconcilerWorker


class StopLoop(BaseException):
    """Escapes run_forever, which only catches Exception"""


@pytest.fixture
def session_factory():
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session)


@pytest.fixture
def sample_reconciliation_result():
    return ReconciliationResultDTO(
        total_accounts_checked=10,
        discrepancies_found=0,
        discrepancies=[],
        reconciliation_time=datetime.utcnow(),
        execution_time_ms=150,
    )


@pytest.fixture
def sample_discrepancy_result():
    return ReconciliationResultDTO(
        total_accounts_checked=10,
        discrepancies_found=2,
        discrepancies=[
            LedgerDiscrepancyDTO(
                user_id=42,
                account_id=1,
                account_balance=1000,
                calculated_balance=985,
                discrepancy=15,
            ),
            LedgerDiscrepancyDTO(
                user_id=43,
                account_id=2,
                account_balance=500,
                calculated_balance=500,
                discrepancy=0,
                broken_transaction_id=17,
            ),
        ],
        reconciliation_time=datetime.utcnow(),
        execution_time_ms=250,
    )


class TestLedgerReconcilerWorkerInit:
    """Test worker initialization"""

    @patch("src.worker.ledger_reconciler.ApplicationConfig")
    @patch("src.worker.ledger_reconciler.create_async_engine")
    def test_initializes_with_default_config(self, mock_create_engine, mock_app_config):
        """
        Given: No custom configuration provided
        When: Worker is initialized
        Then: Uses defaults from ApplicationConfig
        """
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./credits.db"

        worker = LedgerReconcilerWorker()

        assert worker.db_uri == "sqlite+aiosqlite:///./credits.db"
        mock_create_engine.assert_called_once()

    @patch("src.worker.ledger_reconciler.create_async_engine")
    def test_session_factory_skips_engine(self, mock_create_engine, session_factory):
        """
        Given: A session factory is injected
        When: Worker is initialized
        Then: No engine is created
        """
        worker = LedgerReconcilerWorker(session_factory=session_factory)

        assert worker.engine is None
        assert worker.async_session_factory is session_factory
        mock_create_engine.assert_not_called()


@pytest.mark.asyncio
class TestLedgerReconcilerWorkerRunOnce:
    """Test run_once execution"""

    @patch("src.worker.ledger_reconciler.ApplicationConfig")
    @patch("src.worker.ledger_reconciler.ReconcileLedger")
    async def test_run_once_executes_reconciliation(
        self, mock_use_case_class, mock_app_config, session_factory, sample_reconciliation_result
    ):
        """
        Given: Reconciliation is enabled
        When: run_once is called
        Then: Executes reconciliation use case and returns result
        """
        mock_app_config.RECONCILIATION_ENABLED = True
        mock_use_case_class.return_value.execute = AsyncMock(
            return_value=Return.ok(sample_reconciliation_result)
        )

        worker = LedgerReconcilerWorker(session_factory=session_factory)
        result = await worker.run_once()

        assert result.total_accounts_checked == 10
        assert result.discrepancies_found == 0
        session_factory.assert_called_once()

    @patch("src.worker.ledger_reconciler.ApplicationConfig")
    async def test_run_once_skips_when_disabled(self, mock_app_config, session_factory):
        """
        Given: Reconciliation is disabled
        When: run_once is called
        Then: Returns empty result without opening a session
        """
        mock_app_config.RECONCILIATION_ENABLED = False

        worker = LedgerReconcilerWorker(session_factory=session_factory)
        result = await worker.run_once()

        assert result.total_accounts_checked == 0
        assert result.execution_time_ms == 0
        session_factory.assert_not_called()

    @patch("src.worker.ledger_reconciler.ApplicationConfig")
    @patch("src.worker.ledger_reconciler.ReconcileLedger")
    async def test_run_once_logs_discrepancies(
        self, mock_use_case_class, mock_app_config, session_factory, sample_discrepancy_result, caplog
    ):
        """
        Given: Discrepancies are found
        When: run_once completes
        Then: Logs one alert plus one line per account
        """
        mock_app_config.RECONCILIATION_ENABLED = True
        mock_use_case_class.return_value.execute = AsyncMock(
            return_value=Return.ok(sample_discrepancy_result)
        )

        worker = LedgerReconcilerWorker(session_factory=session_factory)
        with caplog.at_level(logging.ERROR, logger="src.worker.ledger_reconciler"):
            result = await worker.run_once()

        assert result.discrepancies_found == 2
        assert "2 ledger discrepancies found" in caplog.text
        assert "User 42" in caplog.text
        assert "first broken transaction=17" in caplog.text

    @patch("src.worker.ledger_reconciler.ApplicationConfig")
    @patch("src.worker.ledger_reconciler.ReconcileLedger")
    async def test_run_once_raises_on_use_case_error(self, mock_use_case_class, mock_app_config, session_factory):
        """
        Given: Reconciliation use case returns error
        When: run_once is called
        Then: Raises RuntimeError
        """
        mock_app_config.RECONCILIATION_ENABLED = True
        mock_use_case_class.return_value.execute = AsyncMock(
            return_value=Return.err(Error(code="STORAGE_ERROR", message="Database connection failed"))
        )

        worker = LedgerReconcilerWorker(session_factory=session_factory)
        with pytest.raises(RuntimeError, match="Database connection failed"):
            await worker.run_once()


@pytest.mark.asyncio
class TestLedgerReconcilerWorkerLifecycle:
    """Test run_forever and shutdown"""

    @patch("src.worker.ledger_reconciler.ApplicationConfig")
    @patch("src.worker.ledger_reconciler.create_async_engine")
    async def test_shutdown_disposes_engine(self, mock_create_engine, mock_app_config):
        mock_create_engine.return_value.dispose = AsyncMock()

        worker = LedgerReconcilerWorker()
        await worker.shutdown()

        mock_create_engine.return_value.dispose.assert_awaited_once()

    @patch("src.worker.ledger_reconciler.asyncio.sleep")
    async def test_run_forever_keeps_going_after_failure(self, mock_sleep, session_factory):
        """
        Given: The first cycle raises
        When: run_forever is running
        Then: The error is logged and the next cycle still runs
        """
        mock_sleep.side_effect = [None, StopLoop()]
        worker = LedgerReconcilerWorker(session_factory=session_factory)
        worker.run_once = AsyncMock(side_effect=[RuntimeError("db down"), MagicMock()])

        with pytest.raises(StopLoop):
            await worker.run_forever(interval_seconds=60)

        assert worker.run_once.await_count == 2
        mock_sleep.assert_called_with(60)
