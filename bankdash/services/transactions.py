"""
Transaction log.
Append-only history of an owner's money movements, with paging and search.
"""

import math
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from bankdash.core.config import settings
from bankdash.core.exceptions import NotFoundError, ValidationError
from bankdash.core.logging import get_logger
from bankdash.core.utils import new_id, utcnow
from bankdash.schemas.ledger import LedgerData
from bankdash.schemas.transaction import Transaction, TransactionDraft, TransactionKind, TransactionPage
from bankdash.services.events import ChangeNotifier, LedgerChange
from bankdash.services.storage import LedgerStorage

logger = get_logger(__name__)


def append_entry(ledger: LedgerData, owner_id: str, draft: TransactionDraft, timestamp: datetime) -> Transaction:
    """Append a new entry to an open ledger transaction and return it."""
    transaction = Transaction(
        **draft.model_dump(),
        id=new_id(),
        owner_id=owner_id,
        timestamp=timestamp,
    )
    ledger.transactions.append(transaction)
    return transaction


def ensure_reference_unused(ledger: LedgerData, reference_id: Optional[str]) -> None:
    """Reject a client reference that an earlier entry already carries."""
    if not reference_id:
        return
    if any(t.reference_id == reference_id for t in ledger.transactions):
        raise ValidationError(f"Transaction with reference {reference_id} already exists")


def newest_first(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Sort by timestamp descending; entries with equal timestamps keep reverse recording order."""
    indexed = sorted(enumerate(transactions), key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
    return [transaction for _, transaction in indexed]


def _coerce_kind(kind) -> Optional[TransactionKind]:
    if kind is None or kind == "":
        return None
    try:
        return TransactionKind(kind)
    except ValueError as exc:
        raise ValidationError(f"Unknown transaction kind: {kind}") from exc


class TransactionLog:
    """
    Owner-scoped access to the transaction history.
    """

    def __init__(
        self,
        storage: LedgerStorage,
        notifier: Optional[ChangeNotifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.notifier = notifier
        self.clock = clock

    def record(self, owner_id: str, entry: Union[TransactionDraft, Mapping[str, Any]]) -> Transaction:
        """
        Append one entry to the log. Balances are not touched; use the
        transfer engine for anything that moves money.
        """
        if not isinstance(entry, TransactionDraft):
            try:
                entry = TransactionDraft.model_validate(entry)
            except PydanticValidationError as exc:
                raise ValidationError(f"Invalid transaction: {exc.error_count()} invalid fields") from exc

        with self.storage.transaction(owner_id) as ledger:
            ensure_reference_unused(ledger, entry.reference_id)
            transaction = append_entry(ledger, owner_id, entry, self.clock())

        logger.info("transaction_recorded", owner_id=owner_id, transaction_id=transaction.id, kind=transaction.kind.value)
        if self.notifier is not None:
            self.notifier.publish(
                LedgerChange(owner_id=owner_id, action="transaction_recorded", transaction_ids=(transaction.id,))
            )
        return transaction

    def list(self, owner_id: str, page: int = 1, page_size: Optional[int] = None) -> TransactionPage:
        """
        One page of the history, newest first.

        Raises:
            ValidationError: page < 1 or page_size outside [1, MAX_PAGE_SIZE]
        """
        if page_size is None:
            page_size = settings.DEFAULT_PAGE_SIZE
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if page_size < 1 or page_size > settings.MAX_PAGE_SIZE:
            raise ValidationError(f"Page size must be between 1 and {settings.MAX_PAGE_SIZE}")

        ordered = newest_first(self.storage.load(owner_id).transactions)
        total = len(ordered)
        start = (page - 1) * page_size
        return TransactionPage(
            items=ordered[start:start + page_size],
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size),
        )

    def filter(
        self,
        owner_id: str,
        kind=None,
        category: Optional[str] = None,
        search_text: Optional[str] = None,
    ) -> Iterator[Transaction]:
        """
        Lazily yield entries matching every given criterion, newest first.

        ``category`` is compared case-insensitively; ``search_text`` is a
        case-insensitive substring of the description, category or
        counterparty.
        """
        kind = _coerce_kind(kind)
        category = category.strip().lower() if category else None
        needle = search_text.strip().lower() if search_text else None
        transactions = newest_first(self.storage.load(owner_id).transactions)
        return (t for t in transactions if self._matches(t, kind, category, needle))

    @staticmethod
    def _matches(transaction: Transaction, kind, category, needle) -> bool:
        if kind is not None and transaction.kind != kind:
            return False
        if category is not None and transaction.category.lower() != category:
            return False
        if needle:
            haystack = (transaction.description, transaction.category, transaction.counterparty)
            return any(needle in field.lower() for field in haystack)
        return True

    def get(self, owner_id: str, transaction_id: str) -> Transaction:
        for transaction in self.storage.load(owner_id).transactions:
            if transaction.id == transaction_id:
                return transaction
        raise NotFoundError(f"Transaction {transaction_id} not found")

    def for_account(self, owner_id: str, account_id: str) -> List[Transaction]:
        """Entries that moved money in or out of one account."""
        ledger = self.storage.load(owner_id)
        if not any(a.id == account_id for a in ledger.accounts):
            raise NotFoundError(f"Account {account_id} not found")
        return newest_first(
            t for t in ledger.transactions if t.account_id == account_id or t.counterparty == account_id
        )

    def for_card(self, owner_id: str, card_id: str) -> List[Transaction]:
        ledger = self.storage.load(owner_id)
        if not any(c.id == card_id for c in ledger.cards):
            raise NotFoundError(f"Card {card_id} not found")
        return newest_first(t for t in ledger.transactions if t.card_id == card_id)
