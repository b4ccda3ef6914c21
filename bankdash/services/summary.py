"""
Dashboard aggregates, recomputed from the ledger on every call.

Money moved between an owner's own accounts is neither income nor
spending, so internal-transfer entries are left out of every total except
the balance.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from bankdash.core.config import settings
from bankdash.core.exceptions import ValidationError
from bankdash.core.money import ZERO, to_money
from bankdash.core.utils import utcnow
from bankdash.schemas.summary import AccountSummary, MonthlyTotal
from bankdash.schemas.transaction import (
    INTERNAL_KINDS,
    Transaction,
    TransactionDirection,
    TransactionStatus,
)
from bankdash.services.storage import LedgerStorage
from bankdash.services.transactions import newest_first

UNCATEGORIZED = "Uncategorized"
MAX_MONTHS_BACK = 24


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return to_money(sum(amounts, ZERO))


def _completed_external(transactions: Iterable[Transaction], direction: TransactionDirection) -> List[Transaction]:
    return [
        t for t in transactions
        if t.direction == direction
        and t.status == TransactionStatus.COMPLETED
        and t.kind not in INTERNAL_KINDS
    ]


def _month_key(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{moment.year:04d}-{moment.month:02d}"


def trailing_months(today: date, months_back: int) -> List[str]:
    """``months_back`` month keys ending with ``today``'s month, oldest first."""
    keys = []
    year, month = today.year, today.month
    for _ in range(months_back):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


class SummaryProjector:
    """Read-only views over an owner's ledger."""

    def __init__(self, storage: LedgerStorage, clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.clock = clock

    def account_summary(self, owner_id: str) -> AccountSummary:
        ledger = self.storage.load(owner_id)
        transactions = ledger.transactions

        balance = _total(a.balance for a in ledger.accounts)
        pending = _total(
            t.amount for t in transactions
            if t.status == TransactionStatus.PENDING and t.direction == TransactionDirection.DEBIT
        )
        income = _total(t.amount for t in _completed_external(transactions, TransactionDirection.CREDIT))
        expenses = _total(t.amount for t in _completed_external(transactions, TransactionDirection.DEBIT))

        return AccountSummary(
            balance=balance,
            available_balance=to_money(balance - pending),
            pending_amount=pending,
            total_income=income,
            total_expenses=expenses,
            recent_transactions=newest_first(transactions)[:settings.RECENT_TRANSACTIONS_LIMIT],
        )

    def spending_by_category(self, owner_id: str) -> Dict[str, Decimal]:
        """Total debited per category."""
        totals: Dict[str, Decimal] = {}
        for t in _completed_external(self.storage.load(owner_id).transactions, TransactionDirection.DEBIT):
            category = t.category.strip() or UNCATEGORIZED
            totals[category] = totals.get(category, ZERO) + t.amount
        return {category: to_money(amount) for category, amount in totals.items()}

    def month_over_month(
        self, owner_id: str, months_back: int = 6, today: Optional[date] = None
    ) -> List[MonthlyTotal]:
        """
        Spending per calendar month (UTC) for the trailing ``months_back``
        months including the current one, oldest first. Months without
        spending are reported as zero.
        """
        if months_back < 1 or months_back > MAX_MONTHS_BACK:
            raise ValidationError(f"months_back must be between 1 and {MAX_MONTHS_BACK}")
        today = today or self.clock().date()

        totals = {key: ZERO for key in trailing_months(today, months_back)}
        for t in _completed_external(self.storage.load(owner_id).transactions, TransactionDirection.DEBIT):
            key = _month_key(t.timestamp)
            if key in totals:
                totals[key] += t.amount

        return [MonthlyTotal(month=key, total_amount=to_money(amount)) for key, amount in totals.items()]
