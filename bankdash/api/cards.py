"""
Debit card API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from bankdash.api.deps import get_card_service, get_owner_id, get_transaction_log, get_transfer_engine
from bankdash.schemas.card import CardPaymentRequest, DebitCard, DebitCardCreate
from bankdash.schemas.transaction import Transaction, TransferResult
from bankdash.services.cards import DebitCardService
from bankdash.services.transactions import TransactionLog
from bankdash.services.transfers import TransferEngine

router = APIRouter(prefix="/cards", tags=["Cards"])


@router.post("/", response_model=DebitCard, status_code=status.HTTP_201_CREATED)
def add_card(
    card_data: DebitCardCreate,
    owner_id: str = Depends(get_owner_id),
    cards: DebitCardService = Depends(get_card_service)
):
    """
    Register a debit card. The number is checked and then discarded; only
    the brand and last four digits are kept.
    """
    return cards.add_card(owner_id, card_data)


@router.get("/", response_model=List[DebitCard])
def list_cards(
    owner_id: str = Depends(get_owner_id),
    cards: DebitCardService = Depends(get_card_service)
):
    return cards.list_cards(owner_id)


@router.get("/{card_id}", response_model=DebitCard)
def get_card(
    card_id: str,
    owner_id: str = Depends(get_owner_id),
    cards: DebitCardService = Depends(get_card_service)
):
    return cards.get_card(owner_id, card_id)


@router.post("/{card_id}/payments", response_model=TransferResult, status_code=status.HTTP_201_CREATED)
def pay_with_card(
    card_id: str,
    payment: CardPaymentRequest,
    owner_id: str = Depends(get_owner_id),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Pay a merchant with a registered card, debiting the chosen account.
    """
    return engine.pay_with_card(
        owner_id,
        card_id,
        payment.amount,
        merchant=payment.merchant,
        description=payment.description,
        category=payment.category,
        from_account_id=payment.from_account_id,
    )


@router.get("/{card_id}/transactions", response_model=List[Transaction])
def get_card_transactions(
    card_id: str,
    owner_id: str = Depends(get_owner_id),
    log: TransactionLog = Depends(get_transaction_log)
):
    return log.for_card(owner_id, card_id)
