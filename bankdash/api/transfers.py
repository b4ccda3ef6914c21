"""
Transfer API endpoints.
Handles moving money between the caller's accounts and to external recipients.
"""

from fastapi import APIRouter, Depends, status

from bankdash.api.deps import get_owner_id, get_transfer_engine
from bankdash.schemas.transaction import ExternalTransferRequest, InternalTransferRequest, TransferResult
from bankdash.services.transfers import TransferEngine

router = APIRouter(prefix="/transfers", tags=["Transfers"])


@router.post("/internal", response_model=TransferResult, status_code=status.HTTP_201_CREATED)
def create_internal_transfer(
    transfer_data: InternalTransferRequest,
    owner_id: str = Depends(get_owner_id),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Move money between two of the caller's accounts.

    Debit and credit are recorded together with the balance changes, or not
    at all.

    - **from_account_id**: Source account
    - **to_account_id**: Destination account
    - **amount**: Transfer amount (must be positive)
    - **description**: Optional transfer description
    - **reference_id**: Optional client reference; a reused one is rejected
    """
    return engine.transfer_internal(
        owner_id,
        transfer_data.from_account_id,
        transfer_data.to_account_id,
        transfer_data.amount,
        description=transfer_data.description,
        reference_id=transfer_data.reference_id,
    )


@router.post("/external", response_model=TransferResult, status_code=status.HTTP_201_CREATED)
async def create_external_transfer(
    transfer_data: ExternalTransferRequest,
    owner_id: str = Depends(get_owner_id),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Send money to an email recipient by bank transfer or card.

    - **recipient_email**: Who receives the money
    - **method**: `bank` or `card`; `card` requires **card** details
    - **from_account_id**: Account to debit (default: first account)
    """
    return await engine.transfer_external(
        owner_id,
        transfer_data.recipient_email,
        transfer_data.amount,
        description=transfer_data.description,
        method=transfer_data.method,
        card=transfer_data.card,
        from_account_id=transfer_data.from_account_id,
        category=transfer_data.category,
        reference_id=transfer_data.reference_id,
    )
