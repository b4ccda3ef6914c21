"""
Pydantic schemas package.
"""

from bankdash.schemas.account import Account, AccountBalance, AccountCreate
from bankdash.schemas.card import CardPaymentRequest, DebitCard, DebitCardCreate
from bankdash.schemas.ledger import LedgerData
from bankdash.schemas.summary import AccountSummary, MonthlyTotal
from bankdash.schemas.transaction import (
    CardDetails,
    ExternalTransferRequest,
    InternalTransferRequest,
    ManualEntryCreate,
    PaymentMethod,
    Transaction,
    TransactionDirection,
    TransactionDraft,
    TransactionKind,
    TransactionPage,
    TransactionStatus,
    TransferResult,
)

__all__ = [
    "Account",
    "AccountBalance",
    "AccountCreate",
    "AccountSummary",
    "CardDetails",
    "CardPaymentRequest",
    "DebitCard",
    "DebitCardCreate",
    "ExternalTransferRequest",
    "InternalTransferRequest",
    "LedgerData",
    "ManualEntryCreate",
    "MonthlyTotal",
    "PaymentMethod",
    "Transaction",
    "TransactionDirection",
    "TransactionDraft",
    "TransactionKind",
    "TransactionPage",
    "TransactionStatus",
    "TransferResult",
]
