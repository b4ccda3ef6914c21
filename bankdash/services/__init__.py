"""
Ledger services package.
"""

from bankdash.services.accounts import AccountStore
from bankdash.services.cards import DebitCardService
from bankdash.services.events import ChangeNotifier, LedgerChange
from bankdash.services.payments import PaymentGateway, PaymentMethodToken, SimulatedPaymentGateway
from bankdash.services.storage import InMemoryLedgerStorage, LedgerStorage, SQLAlchemyLedgerStorage
from bankdash.services.summary import SummaryProjector
from bankdash.services.transactions import TransactionLog
from bankdash.services.transfers import TransferEngine

__all__ = [
    "AccountStore",
    "ChangeNotifier",
    "DebitCardService",
    "InMemoryLedgerStorage",
    "LedgerChange",
    "LedgerStorage",
    "PaymentGateway",
    "PaymentMethodToken",
    "SQLAlchemyLedgerStorage",
    "SimulatedPaymentGateway",
    "SummaryProjector",
    "TransactionLog",
    "TransferEngine",
]
