"""
Transaction history API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from bankdash.api.deps import get_owner_id, get_transaction_log, get_transfer_engine
from bankdash.core.config import settings
from bankdash.schemas.transaction import ManualEntryCreate, Transaction, TransactionKind, TransactionPage, TransferResult
from bankdash.services.transactions import TransactionLog
from bankdash.services.transfers import TransferEngine

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("/", response_model=TransactionPage)
def list_transactions(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    owner_id: str = Depends(get_owner_id),
    log: TransactionLog = Depends(get_transaction_log)
):
    """
    Transaction history, newest first.

    - **page**: 1-based page number
    - **page_size**: Entries per page
    """
    return log.list(owner_id, page=page, page_size=page_size)


@router.get("/search", response_model=List[Transaction])
def search_transactions(
    kind: Optional[TransactionKind] = None,
    category: Optional[str] = None,
    q: Optional[str] = Query(None, description="Text to find in description, category or counterparty"),
    owner_id: str = Depends(get_owner_id),
    log: TransactionLog = Depends(get_transaction_log)
):
    """
    Filter the history by kind, category and free text.
    """
    return list(log.filter(owner_id, kind=kind, category=category, search_text=q))


@router.get("/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: str,
    owner_id: str = Depends(get_owner_id),
    log: TransactionLog = Depends(get_transaction_log)
):
    """
    Get one entry by ID.
    """
    return log.get(owner_id, transaction_id)


@router.post("/", response_model=TransferResult, status_code=status.HTTP_201_CREATED)
def create_manual_entry(
    entry: ManualEntryCreate,
    owner_id: str = Depends(get_owner_id),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Record an income or expense by hand; the account balance moves with it.
    """
    return engine.record_manual_entry(
        owner_id,
        account_id=entry.account_id,
        direction=entry.direction,
        amount=entry.amount,
        description=entry.description,
        category=entry.category,
        counterparty=entry.counterparty,
    )
