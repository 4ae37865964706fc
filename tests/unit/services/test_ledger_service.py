"""Unit tests for LedgerService

Tests cover:
- Credit, debit and refund bookkeeping
- Balance conservation over random mutation sequences
- Balance never negative, including under concurrent debits
- Optimistic retry on concurrent updates, and giving up
- Amount validation
"""

import asyncio
import random

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.ledger_service import LedgerService
from src.domain.credit_account import CreditAccount
from src.domain.credit_transaction import TransactionKind, TransactionSource


async def _replayed_balance(transaction_repo, account_id):
    transactions = await transaction_repo.list_by_account(account_id)
    running = 0
    for t in transactions:
        running += t.amount
        assert t.balance_after == running
        assert running >= 0
    return running


@pytest.mark.asyncio
class TestLedgerBookkeeping:

    async def test_credit_creates_account_and_earn_transaction(self, ledger, account_repo):
        result = await ledger.credit(7, 100, TransactionSource.ADMIN, source_id="1", description="grant")

        assert result.is_ok()
        transaction = result.value
        assert transaction.kind == TransactionKind.EARN
        assert transaction.amount == 100
        assert transaction.balance_after == 100
        assert transaction.source == TransactionSource.ADMIN

        account = await account_repo.get_by_user_id(7)
        assert account.balance == 100
        assert account.total_earned == 100
        assert account.total_spent == 0

    async def test_debit_stores_negative_amount_and_tracks_spent(self, ledger, account_repo):
        await ledger.credit(7, 100, TransactionSource.PURCHASE, source_id="OL1")

        result = await ledger.debit(7, 30, TransactionSource.DOWNLOAD, source_id="/a/file.zip")

        assert result.is_ok()
        assert result.value.kind == TransactionKind.SPEND
        assert result.value.amount == -30
        assert result.value.balance_after == 70

        account = await account_repo.get_by_user_id(7)
        assert account.balance == 70
        assert account.total_spent == 30

    async def test_refund_does_not_count_as_earned(self, ledger, account_repo):
        await ledger.credit(7, 50, TransactionSource.PURCHASE)
        await ledger.debit(7, 20, TransactionSource.DOWNLOAD)

        result = await ledger.refund(7, 20, TransactionSource.ADMIN, source_id="/a/file.zip")

        assert result.is_ok()
        assert result.value.kind == TransactionKind.REFUND
        account = await account_repo.get_by_user_id(7)
        assert account.balance == 50
        assert account.total_earned == 50

    async def test_metadata_is_stored_as_json(self, ledger):
        result = await ledger.credit(7, 5, TransactionSource.ADMIN, metadata={"ticket": "SUP-1"})

        assert result.value.metadata_json == '{"ticket": "SUP-1"}'

    async def test_get_or_create_account_is_idempotent(self, ledger, account_repo):
        first = await ledger.get_or_create_account(3)
        second = await ledger.get_or_create_account(3)

        assert first.id == second.id
        assert first.balance == 0
        assert len(account_repo.rows) == 1


@pytest.mark.asyncio
class TestLedgerValidation:

    @pytest.mark.parametrize("amount", [0, -5, 1.5, True, "10", None])
    async def test_rejects_non_positive_or_non_integer_amounts(self, ledger, transaction_repo, amount):
        result = await ledger.credit(7, amount, TransactionSource.ADMIN)

        assert result.is_err()
        assert result.error.code == "INVALID_AMOUNT"
        assert transaction_repo.rows == []

    async def test_debit_beyond_balance_fails_without_side_effects(self, ledger, account_repo, transaction_repo):
        await ledger.credit(7, 10, TransactionSource.ADMIN)

        result = await ledger.debit(7, 11, TransactionSource.DOWNLOAD)

        assert result.is_err()
        assert result.error.code == "INSUFFICIENT_BALANCE"
        assert account_repo.balance_of(7) == 10
        assert len(transaction_repo.rows) == 1

    async def test_debit_of_exact_balance_reaches_zero(self, ledger, account_repo):
        await ledger.credit(7, 10, TransactionSource.ADMIN)

        result = await ledger.debit(7, 10, TransactionSource.DOWNLOAD)

        assert result.is_ok()
        assert account_repo.balance_of(7) == 0


@pytest.mark.asyncio
class TestLedgerConservation:

    async def test_random_sequences_keep_balance_equal_to_history(self, ledger, account_repo, transaction_repo):
        rng = random.Random(20240101)
        expected = 0

        for _ in range(300):
            amount = rng.randint(1, 50)
            op = rng.choice(["credit", "debit", "refund"])
            if op == "credit":
                result = await ledger.credit(1, amount, TransactionSource.PURCHASE)
                expected += amount
            elif op == "refund":
                result = await ledger.refund(1, amount, TransactionSource.ADMIN)
                expected += amount
            else:
                result = await ledger.debit(1, amount, TransactionSource.DOWNLOAD)
                if amount <= expected:
                    assert result.is_ok()
                    expected -= amount
                else:
                    assert result.error.code == "INSUFFICIENT_BALANCE"

            account = await account_repo.get_by_user_id(1)
            assert account.balance == expected
            assert account.balance >= 0
            assert await _replayed_balance(transaction_repo, account.id) == account.balance

    async def test_concurrent_debits_of_60_against_100(self, ledger, account_repo, transaction_repo):
        await ledger.credit(1, 100, TransactionSource.PURCHASE)

        results = await asyncio.gather(
            ledger.debit(1, 60, TransactionSource.DOWNLOAD, source_id="/a"),
            ledger.debit(1, 60, TransactionSource.DOWNLOAD, source_id="/b"),
        )

        ok = [r for r in results if r.is_ok()]
        failed = [r for r in results if r.is_err()]
        assert len(ok) == 1
        assert len(failed) == 1
        assert failed[0].error.code == "INSUFFICIENT_BALANCE"
        assert account_repo.balance_of(1) == 40
        account = await account_repo.get_by_user_id(1)
        assert await _replayed_balance(transaction_repo, account.id) == 40

    async def test_concurrent_credits_are_all_applied(self, ledger, account_repo, transaction_repo):
        await ledger.get_or_create_account(1)

        results = await asyncio.gather(
            *[ledger.credit(1, 3, TransactionSource.REDEEM) for _ in range(20)]
        )

        assert all(r.is_ok() for r in results)
        assert account_repo.balance_of(1) == 60
        assert account_repo.cas_failures > 0
        balances = sorted(t.balance_after for t in transaction_repo.rows)
        assert balances == list(range(3, 61, 3))

    async def test_concurrent_first_access_creates_one_account(self, ledger, account_repo):
        accounts = await asyncio.gather(*[ledger.get_or_create_account(9) for _ in range(5)])

        assert len({a.id for a in accounts}) == 1
        assert len(account_repo.rows) == 1


@pytest.mark.asyncio
class TestLedgerRetry:

    @pytest.fixture
    def mock_account_repo(self):
        repo = MagicMock()
        repo.get_by_user_id = AsyncMock(
            return_value=CreditAccount(id=1, user_id=7, balance=100, total_earned=100, total_spent=0)
        )
        return repo

    @pytest.fixture
    def mock_transaction_repo(self):
        repo = MagicMock()
        repo.create = AsyncMock(side_effect=lambda t: t)
        return repo

    async def test_retries_after_lost_compare_and_set(self, mock_account_repo, mock_transaction_repo):
        mock_account_repo.compare_and_set_balance = AsyncMock(side_effect=[False, False, True])
        ledger = LedgerService(mock_account_repo, mock_transaction_repo, max_retries=5)

        result = await ledger.debit(7, 10, TransactionSource.DOWNLOAD)

        assert result.is_ok()
        assert mock_account_repo.compare_and_set_balance.await_count == 3
        mock_transaction_repo.create.assert_awaited_once()

    async def test_gives_up_with_concurrent_update(self, mock_account_repo, mock_transaction_repo):
        mock_account_repo.compare_and_set_balance = AsyncMock(return_value=False)
        ledger = LedgerService(mock_account_repo, mock_transaction_repo, max_retries=3)

        result = await ledger.credit(7, 10, TransactionSource.ADMIN)

        assert result.is_err()
        assert result.error.code == "CONCURRENT_UPDATE"
        assert mock_account_repo.compare_and_set_balance.await_count == 3
        mock_transaction_repo.create.assert_not_awaited()

    async def test_compare_and_set_uses_read_balance(self, mock_account_repo, mock_transaction_repo):
        mock_account_repo.compare_and_set_balance = AsyncMock(return_value=True)
        ledger = LedgerService(mock_account_repo, mock_transaction_repo)

        await ledger.debit(7, 25, TransactionSource.DOWNLOAD)

        mock_account_repo.compare_and_set_balance.assert_awaited_once_with(
            1, expected_balance=100, new_balance=75, earned_delta=0, spent_delta=25
        )
