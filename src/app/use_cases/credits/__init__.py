"""Credit ledger use cases"""
from .get_balance import GetBalance
from .list_transactions import ListTransactions
from .grant_credits import GrantCredits
from .refund_credits import RefundCredits
from .check_download_permission import CheckDownloadPermission
from .process_download import ProcessDownload
from .reconcile_ledger import ReconcileLedger
from .dtos import (
    BalanceResponseDTO,
    CreditTransactionResponseDTO,
    ListTransactionsResponseDTO,
    GrantCreditsCommandDTO,
    RefundCreditsCommandDTO,
    DownloadCheckResponseDTO,
    DownloadResponseDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "GetBalance",
    "ListTransactions",
    "GrantCredits",
    "RefundCredits",
    "CheckDownloadPermission",
    "ProcessDownload",
    "ReconcileLedger",
    "BalanceResponseDTO",
    "CreditTransactionResponseDTO",
    "ListTransactionsResponseDTO",
    "GrantCreditsCommandDTO",
    "RefundCreditsCommandDTO",
    "DownloadCheckResponseDTO",
    "DownloadResponseDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
]
