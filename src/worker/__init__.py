"""Background workers for the credits service"""
from .ledger_reconciler import LedgerReconcilerWorker
from .expiry_sweeper import ExpirySweeperWorker

__all__ = ["LedgerReconcilerWorker", "ExpirySweeperWorker"]
