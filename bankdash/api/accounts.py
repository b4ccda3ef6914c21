"""
Account API endpoints.
Handles adding linked accounts and reading balances.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from bankdash.api.deps import get_account_store, get_owner_id, get_transaction_log
from bankdash.schemas.account import Account, AccountBalance, AccountCreate
from bankdash.schemas.transaction import Transaction
from bankdash.services.accounts import AccountStore
from bankdash.services.transactions import TransactionLog

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("/", response_model=Account, status_code=status.HTTP_201_CREATED)
def create_account(
    account_data: AccountCreate,
    owner_id: str = Depends(get_owner_id),
    store: AccountStore = Depends(get_account_store)
):
    """
    Add a linked bank account.

    - **display_name**: Name shown on the dashboard
    - **institution_name**: Bank or institution name
    - **external_account_number** / **routing_code**: Account details at the institution
    - **initial_balance**: Opening balance (default: 0.00)
    """
    return store.create_account(owner_id, account_data)


@router.get("/", response_model=List[Account])
def list_accounts(
    owner_id: str = Depends(get_owner_id),
    store: AccountStore = Depends(get_account_store)
):
    """
    List the caller's accounts in the order they were added.
    """
    return store.list_accounts(owner_id)


@router.get("/{account_id}", response_model=Account)
def get_account(
    account_id: str,
    owner_id: str = Depends(get_owner_id),
    store: AccountStore = Depends(get_account_store)
):
    """
    Get account details by account ID.
    """
    return store.get_account(owner_id, account_id)


@router.get("/{account_id}/balance", response_model=AccountBalance)
def get_account_balance(
    account_id: str,
    owner_id: str = Depends(get_owner_id),
    store: AccountStore = Depends(get_account_store)
):
    """
    Get account balance.
    """
    account = store.get_account(owner_id, account_id)
    return AccountBalance(account_id=account.id, balance=account.balance)


@router.get("/{account_id}/transactions", response_model=List[Transaction])
def get_account_transactions(
    account_id: str,
    owner_id: str = Depends(get_owner_id),
    log: TransactionLog = Depends(get_transaction_log)
):
    """
    Entries that moved money in or out of an account, newest first.
    """
    return log.for_account(owner_id, account_id)
