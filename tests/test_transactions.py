"""
Tests for the transaction log: recording, paging and filtering.
"""

import types
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from bankdash.core.exceptions import NotFoundError, ValidationError
from bankdash.schemas.transaction import (
    TransactionDirection,
    TransactionDraft,
    TransactionKind,
    TransactionStatus,
)

from helpers import OTHER_OWNER, OWNER, account_data


def draft(amount="10.00", description="Coffee", category="Food", kind=TransactionKind.MANUAL_ENTRY,
          direction=TransactionDirection.DEBIT, counterparty="Cafe"):
    return TransactionDraft(
        kind=kind,
        direction=direction,
        amount=Decimal(amount),
        counterparty=counterparty,
        description=description,
        category=category,
    )


def test_record_assigns_id_and_timestamp(log):
    """Test the log assigns identity and time to a recorded entry."""
    transaction = log.record(OWNER, draft())

    assert transaction.id
    assert transaction.owner_id == OWNER
    assert transaction.timestamp is not None
    assert transaction.status == TransactionStatus.COMPLETED
    assert log.get(OWNER, transaction.id) == transaction


def test_record_accepts_mapping(log):
    transaction = log.record(OWNER, {
        "kind": "manual-entry",
        "direction": "credit",
        "amount": "3000.00",
        "counterparty": "Employer",
        "description": "Salary Deposit",
        "category": "Income",
    })
    assert transaction.direction == TransactionDirection.CREDIT
    assert transaction.amount == Decimal("3000.00")


def test_record_rejects_malformed_entry(log):
    with pytest.raises(ValidationError):
        log.record(OWNER, {"kind": "manual-entry", "direction": "debit", "amount": "-1"})


def test_record_does_not_touch_balances(log, accounts):
    account = accounts.create_account(OWNER, account_data(balance="50.00"))
    log.record(OWNER, draft(amount="20.00"))
    assert accounts.get_account(OWNER, account.id).balance == Decimal("50.00")


def test_transactions_are_immutable(log):
    transaction = log.record(OWNER, draft())
    with pytest.raises(PydanticValidationError):
        transaction.amount = Decimal("1.00")


def test_get_unknown_transaction(log):
    with pytest.raises(NotFoundError):
        log.get(OWNER, "nope")


def test_list_newest_first(log):
    """Test the history is sorted by timestamp descending."""
    first = log.record(OWNER, draft(description="first"))
    second = log.record(OWNER, draft(description="second"))
    third = log.record(OWNER, draft(description="third"))

    page = log.list(OWNER, page=1, page_size=10)

    assert [t.id for t in page.items] == [third.id, second.id, first.id]
    assert page.total == 3
    assert page.total_pages == 1


def test_list_pagination_is_complete(log):
    """Test concatenating every page yields each entry exactly once."""
    recorded = [log.record(OWNER, draft(description=f"entry {i}")) for i in range(23)]

    first_page = log.list(OWNER, page=1, page_size=5)
    assert first_page.total == 23
    assert first_page.total_pages == 5

    collected = []
    for page in range(1, first_page.total_pages + 1):
        collected.extend(log.list(OWNER, page=page, page_size=5).items)

    assert len(collected) == 23
    assert len({t.id for t in collected}) == 23
    assert {t.id for t in collected} == {t.id for t in recorded}
    assert [t.id for t in collected] == [t.id for t in reversed(recorded)]


def test_list_page_past_end_is_empty(log):
    log.record(OWNER, draft())
    page = log.list(OWNER, page=3, page_size=10)
    assert page.items == []
    assert page.total == 1


def test_list_empty_history(log):
    page = log.list(OWNER)
    assert page.items == []
    assert page.total == 0
    assert page.total_pages == 0


@pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (1, 1000)])
def test_list_rejects_bad_paging(log, page, page_size):
    with pytest.raises(ValidationError):
        log.list(OWNER, page=page, page_size=page_size)


def test_list_is_repeatable(log):
    log.record(OWNER, draft())
    log.record(OWNER, draft(description="Bus", category="Transport"))
    assert log.list(OWNER) == log.list(OWNER)


def test_list_is_scoped_to_owner(log):
    log.record(OWNER, draft())
    assert log.list(OTHER_OWNER).total == 0


def test_filter_is_lazy(log):
    log.record(OWNER, draft())
    result = log.filter(OWNER, category="food")
    assert isinstance(result, types.GeneratorType)
    assert len(list(result)) == 1


def test_filter_by_kind_category_and_text(log):
    """Test filtering by each criterion and by combinations."""
    log.record(OWNER, draft(description="Grocery Shopping", category="Food"))
    log.record(OWNER, draft(description="Train ticket", category="Transport", counterparty="Rail Co"))
    log.record(OWNER, draft(
        description="Lunch money",
        category="Transfer",
        kind=TransactionKind.EXTERNAL_TRANSFER,
        counterparty="friend@example.com",
    ))

    assert [t.description for t in log.filter(OWNER, kind=TransactionKind.EXTERNAL_TRANSFER)] == ["Lunch money"]
    assert [t.description for t in log.filter(OWNER, kind="external-transfer")] == ["Lunch money"]
    assert [t.description for t in log.filter(OWNER, category="FOOD")] == ["Grocery Shopping"]
    assert [t.description for t in log.filter(OWNER, search_text="rail")] == ["Train ticket"]
    assert [t.description for t in log.filter(OWNER, search_text="friend@")] == ["Lunch money"]
    assert list(log.filter(OWNER, kind="manual-entry", category="Transfer")) == []
    assert len(list(log.filter(OWNER))) == 3


def test_filter_rejects_unknown_kind(log):
    with pytest.raises(ValidationError):
        log.filter(OWNER, kind="refund")


def test_record_rejects_reused_reference(log):
    entry = draft()
    entry.reference_id = "client-ref-1"
    log.record(OWNER, entry)

    with pytest.raises(ValidationError):
        log.record(OWNER, entry)

    assert log.list(OWNER).total == 1


def test_record_notifies_owner(log, notifier):
    seen = []
    notifier.subscribe(OWNER, seen.append)
    transaction = log.record(OWNER, draft())
    assert seen[0].transaction_ids == (transaction.id,)


def test_for_account_unknown_account(log):
    with pytest.raises(NotFoundError):
        log.for_account(OWNER, "missing")
