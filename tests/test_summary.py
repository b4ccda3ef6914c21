"""
Tests for the dashboard aggregates.
"""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from bankdash.core.exceptions import ValidationError
from bankdash.schemas.transaction import TransactionDirection, TransactionDraft, TransactionKind, TransactionStatus
from bankdash.services.summary import trailing_months

from helpers import OWNER, account_data


def test_spending_by_category(engine, accounts, projector):
    """Test three debits of 10.00 Food, 20.00 Food and 5.00 Transport."""
    account = accounts.create_account(OWNER, account_data(balance="100.00"))
    engine.record_manual_entry(OWNER, account.id, "debit", "10.00", "Groceries", "Food")
    engine.record_manual_entry(OWNER, account.id, "debit", "20.00", "Takeaway", "Food")
    engine.record_manual_entry(OWNER, account.id, "debit", "5.00", "Bus fare", "Transport")

    assert projector.spending_by_category(OWNER) == {
        "Food": Decimal("30.00"),
        "Transport": Decimal("5.00"),
    }


def test_spending_ignores_credits_and_internal_transfers(engine, accounts, log, projector):
    a = accounts.create_account(OWNER, account_data(name="A", balance="100.00"))
    b = accounts.create_account(OWNER, account_data(name="B"))
    engine.transfer_internal(OWNER, a.id, b.id, "40.00")
    engine.record_manual_entry(OWNER, a.id, "credit", "500.00", "Freelance Payment", "Income")
    log.record(OWNER, TransactionDraft(
        kind=TransactionKind.MANUAL_ENTRY,
        direction=TransactionDirection.DEBIT,
        amount=Decimal("7.00"),
        counterparty="",
        category="",
    ))

    assert projector.spending_by_category(OWNER) == {"Uncategorized": Decimal("7.00")}


def test_account_summary(engine, accounts, projector):
    a = accounts.create_account(OWNER, account_data(name="A", balance="1000.00"))
    b = accounts.create_account(OWNER, account_data(name="B", balance="500.00"))
    engine.transfer_internal(OWNER, a.id, b.id, "250.00")
    engine.record_manual_entry(OWNER, a.id, "credit", "3000.00", "Salary Deposit", "Income")
    engine.record_manual_entry(OWNER, a.id, "debit", "800.00", "Rent Payment", "Housing")
    asyncio.run(engine.transfer_external(OWNER, "friend@example.com", "50.00", "lunch"))

    summary = projector.account_summary(OWNER)

    assert summary.balance == Decimal("3650.00")
    assert summary.available_balance == Decimal("3650.00")
    assert summary.pending_amount == Decimal("0.00")
    assert summary.total_income == Decimal("3000.00")
    assert summary.total_expenses == Decimal("850.00")
    assert len(summary.recent_transactions) == 5
    assert summary.recent_transactions[0].kind == TransactionKind.EXTERNAL_TRANSFER


def test_account_summary_counts_pending_debits(accounts, log, projector):
    accounts.create_account(OWNER, account_data(balance="100.00"))
    log.record(OWNER, TransactionDraft(
        kind=TransactionKind.EXTERNAL_TRANSFER,
        direction=TransactionDirection.DEBIT,
        amount=Decimal("30.00"),
        counterparty="friend@example.com",
        status=TransactionStatus.PENDING,
    ))

    summary = projector.account_summary(OWNER)

    assert summary.pending_amount == Decimal("30.00")
    assert summary.available_balance == Decimal("70.00")
    assert summary.total_expenses == Decimal("0.00")


def test_account_summary_empty_ledger(projector):
    summary = projector.account_summary(OWNER)
    assert summary.balance == Decimal("0.00")
    assert summary.recent_transactions == []


def test_summary_keeps_cents(engine, accounts, projector):
    account = accounts.create_account(OWNER, account_data(balance="1.00"))
    for _ in range(3):
        engine.record_manual_entry(OWNER, account.id, "debit", "0.10", "Sweets", "Food")
    assert projector.spending_by_category(OWNER) == {"Food": Decimal("0.30")}
    assert projector.account_summary(OWNER).balance == Decimal("0.70")


def test_month_over_month(engine, accounts, clock, projector):
    """Test monthly spending for the trailing three months, oldest first."""
    account = accounts.create_account(OWNER, account_data(balance="1000.00"))

    clock.set(datetime(2023, 12, 20, tzinfo=timezone.utc))
    engine.record_manual_entry(OWNER, account.id, "debit", "99.00", "Too old", "Food")
    clock.set(datetime(2024, 1, 10, tzinfo=timezone.utc))
    engine.record_manual_entry(OWNER, account.id, "debit", "10.00", "Groceries", "Food")
    engine.record_manual_entry(OWNER, account.id, "debit", "15.00", "Cinema", "Leisure")
    clock.set(datetime(2024, 3, 2, tzinfo=timezone.utc))
    engine.record_manual_entry(OWNER, account.id, "debit", "7.25", "Taxi", "Transport")
    engine.record_manual_entry(OWNER, account.id, "credit", "500.00", "Salary", "Income")

    result = projector.month_over_month(OWNER, months_back=3, today=date(2024, 3, 15))

    assert [(m.month, m.total_amount) for m in result] == [
        ("2024-01", Decimal("25.00")),
        ("2024-02", Decimal("0.00")),
        ("2024-03", Decimal("7.25")),
    ]


def test_month_over_month_uses_clock_for_today(accounts, clock, projector):
    clock.set(datetime(2024, 5, 31, 23, 0, tzinfo=timezone.utc))
    result = projector.month_over_month(OWNER, months_back=2)
    assert [m.month for m in result] == ["2024-04", "2024-05"]


@pytest.mark.parametrize("months_back", [0, 25])
def test_month_over_month_range(projector, months_back):
    with pytest.raises(ValidationError):
        projector.month_over_month(OWNER, months_back=months_back)


def test_trailing_months_crosses_year():
    assert trailing_months(date(2024, 2, 1), 4) == ["2023-11", "2023-12", "2024-01", "2024-02"]
