"""
Pydantic schemas for dashboard aggregates.
"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel

from bankdash.schemas.transaction import Transaction


class AccountSummary(BaseModel):
    """Headline figures for the dashboard."""
    balance: Decimal
    available_balance: Decimal
    pending_amount: Decimal
    total_income: Decimal
    total_expenses: Decimal
    recent_transactions: List[Transaction]


class MonthlyTotal(BaseModel):
    month: str
    total_amount: Decimal
