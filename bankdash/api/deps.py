"""
Request dependencies: the caller's owner id and per-request services.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from bankdash.core.config import settings
from bankdash.database import get_db
from bankdash.services.accounts import AccountStore
from bankdash.services.cards import DebitCardService
from bankdash.services.events import ChangeNotifier
from bankdash.services.payments import PaymentGateway, SimulatedPaymentGateway
from bankdash.services.storage import LedgerStorage, SQLAlchemyLedgerStorage
from bankdash.services.summary import SummaryProjector
from bankdash.services.transactions import TransactionLog
from bankdash.services.transfers import TransferEngine

_payment_gateway = SimulatedPaymentGateway()


def get_owner_id(x_owner_id: Optional[str] = Header(None, alias="X-Owner-Id")) -> str:
    """
    The authenticated user's id, supplied by the identity provider in front
    of this service.
    """
    if not x_owner_id or not x_owner_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Owner-Id header"
        )
    return x_owner_id.strip()


def get_storage(db: Session = Depends(get_db)) -> LedgerStorage:
    return SQLAlchemyLedgerStorage(db)


def get_notifier(request: Request) -> ChangeNotifier:
    return request.app.state.notifier


def get_payment_gateway() -> PaymentGateway:
    return _payment_gateway


def get_account_store(
    storage: LedgerStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> AccountStore:
    return AccountStore(storage, notifier)


def get_transaction_log(
    storage: LedgerStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> TransactionLog:
    return TransactionLog(storage, notifier)


def get_card_service(
    storage: LedgerStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> DebitCardService:
    return DebitCardService(storage, notifier)


def get_transfer_engine(
    request: Request,
    storage: LedgerStorage = Depends(get_storage),
    notifier: ChangeNotifier = Depends(get_notifier),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> TransferEngine:
    return TransferEngine(
        storage,
        gateway=gateway,
        notifier=notifier,
        payment_timeout=settings.PAYMENT_TIMEOUT_SECONDS,
        in_flight=request.app.state.transfers_in_flight,
    )


def get_summary_projector(storage: LedgerStorage = Depends(get_storage)) -> SummaryProjector:
    return SummaryProjector(storage)
