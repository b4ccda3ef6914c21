"""
Dashboard summary API endpoints.
"""

from decimal import Decimal
from typing import Dict, List

from fastapi import APIRouter, Depends, Query

from bankdash.api.deps import get_owner_id, get_summary_projector
from bankdash.schemas.summary import AccountSummary, MonthlyTotal
from bankdash.services.summary import MAX_MONTHS_BACK, SummaryProjector

router = APIRouter(prefix="/summary", tags=["Summary"])


@router.get("/", response_model=AccountSummary)
def get_account_summary(
    owner_id: str = Depends(get_owner_id),
    projector: SummaryProjector = Depends(get_summary_projector)
):
    """
    Total balance, income, expenses and the five most recent entries.
    """
    return projector.account_summary(owner_id)


@router.get("/spending-by-category", response_model=Dict[str, Decimal])
def get_spending_by_category(
    owner_id: str = Depends(get_owner_id),
    projector: SummaryProjector = Depends(get_summary_projector)
):
    return projector.spending_by_category(owner_id)


@router.get("/month-over-month", response_model=List[MonthlyTotal])
def get_month_over_month(
    months: int = Query(6, ge=1, le=MAX_MONTHS_BACK),
    owner_id: str = Depends(get_owner_id),
    projector: SummaryProjector = Depends(get_summary_projector)
):
    """
    Spending per month for the trailing **months** months, oldest first.
    """
    return projector.month_over_month(owner_id, months_back=months)
