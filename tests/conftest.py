"""
Shared fixtures for the ledger tests.
"""

import os

# Keep the app's import-time create_all away from the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")

import pytest

from bankdash.services.accounts import AccountStore
from bankdash.services.cards import DebitCardService
from bankdash.services.events import ChangeNotifier
from bankdash.services.payments import SimulatedPaymentGateway
from bankdash.services.storage import InMemoryLedgerStorage
from bankdash.services.summary import SummaryProjector
from bankdash.services.transactions import TransactionLog
from bankdash.services.transfers import TransferEngine

from helpers import FakeClock


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def accounts(storage, notifier):
    return AccountStore(storage, notifier)


@pytest.fixture
def log(storage, notifier, clock):
    return TransactionLog(storage, notifier, clock=clock)


@pytest.fixture
def cards(storage, notifier):
    return DebitCardService(storage, notifier)


@pytest.fixture
def gateway():
    return SimulatedPaymentGateway(latency=0)


@pytest.fixture
def engine(storage, gateway, notifier, clock):
    return TransferEngine(storage, gateway=gateway, notifier=notifier, clock=clock, payment_timeout=1.0)


@pytest.fixture
def projector(storage, clock):
    return SummaryProjector(storage, clock=clock)
