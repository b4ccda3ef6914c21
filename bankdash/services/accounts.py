"""
Account store.
Creates and reads an owner's accounts and applies balance deltas.
"""

from decimal import Decimal
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from bankdash.core.exceptions import InsufficientFundsError, NotFoundError, ValidationError
from bankdash.core.logging import get_logger
from bankdash.core.money import to_money
from bankdash.core.utils import new_id, utcnow
from bankdash.schemas.account import Account, AccountCreate
from bankdash.schemas.ledger import LedgerData
from bankdash.services.events import ChangeNotifier, LedgerChange
from bankdash.services.storage import LedgerStorage

logger = get_logger(__name__)


def find_account(ledger: LedgerData, account_id: str) -> Account:
    for account in ledger.accounts:
        if account.id == account_id:
            return account
    raise NotFoundError(f"Account {account_id} not found")


def apply_delta(ledger: LedgerData, account_id: str, delta: Decimal) -> Account:
    """
    Add a signed ``delta`` to an account inside an open ledger transaction.

    Raises:
        NotFoundError: Unknown account
        InsufficientFundsError: The balance would go negative
    """
    account = find_account(ledger, account_id)
    delta = to_money(delta)
    new_balance = account.balance + delta
    if new_balance < 0:
        raise InsufficientFundsError(account.id, account.balance, -delta)
    account.balance = to_money(new_balance)
    return account


def default_account(ledger: LedgerData, account_id: Optional[str] = None) -> Account:
    """The named account, or the owner's first account when none is named."""
    if account_id:
        return find_account(ledger, account_id)
    if not ledger.accounts:
        raise NotFoundError("No account available to debit; add an account first")
    return ledger.accounts[0]


class AccountStore:
    """
    Owner-scoped access to accounts.
    """

    def __init__(self, storage: LedgerStorage, notifier: Optional[ChangeNotifier] = None):
        self.storage = storage
        self.notifier = notifier

    def create_account(self, owner_id: str, account_data: Union[AccountCreate, Mapping[str, Any]]) -> Account:
        """
        Add a linked account for an owner.

        Raises:
            ValidationError: A descriptive field is missing or the data is malformed
        """
        if not isinstance(account_data, AccountCreate):
            try:
                account_data = AccountCreate.model_validate(account_data)
            except PydanticValidationError as exc:
                fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
                raise ValidationError(f"Invalid account data: {', '.join(fields) or 'malformed input'}") from exc

        with self.storage.transaction(owner_id) as ledger:
            account = Account(
                id=new_id(),
                owner_id=owner_id,
                display_name=account_data.display_name,
                institution_name=account_data.institution_name,
                external_account_number=account_data.external_account_number,
                routing_code=account_data.routing_code,
                balance=account_data.initial_balance,
                created_at=utcnow(),
            )
            ledger.accounts.append(account)

        logger.info("account_created", owner_id=owner_id, account_id=account.id)
        self._notify(owner_id, "account_created", account.id)
        return account

    def list_accounts(self, owner_id: str) -> List[Account]:
        return list(self.storage.load(owner_id).accounts)

    def get_account(self, owner_id: str, account_id: str) -> Account:
        return find_account(self.storage.load(owner_id), account_id)

    def update_balance(self, owner_id: str, account_id: str, delta) -> Account:
        """
        Apply a signed delta to one account on its own.

        The transfer engine composes ``apply_delta`` with log writes instead
        of calling this, so that both land in one transaction.
        """
        with self.storage.transaction(owner_id) as ledger:
            account = apply_delta(ledger, account_id, delta)

        logger.info("balance_updated", owner_id=owner_id, account_id=account_id, delta=str(delta))
        self._notify(owner_id, "balance_updated", account_id)
        return account

    def _notify(self, owner_id: str, action: str, account_id: str) -> None:
        if self.notifier is not None:
            self.notifier.publish(LedgerChange(owner_id=owner_id, action=action, account_ids=(account_id,)))
