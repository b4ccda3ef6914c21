"""
Pydantic schemas for transactions and transfer requests.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bankdash.schemas.account import Account


class TransactionKind(str, enum.Enum):
    """What produced a ledger entry."""
    INTERNAL_TRANSFER_DEBIT = "internal-transfer-debit"
    INTERNAL_TRANSFER_CREDIT = "internal-transfer-credit"
    EXTERNAL_TRANSFER = "external-transfer"
    CARD_PAYMENT = "card-payment"
    MANUAL_ENTRY = "manual-entry"


INTERNAL_KINDS = frozenset({
    TransactionKind.INTERNAL_TRANSFER_DEBIT,
    TransactionKind.INTERNAL_TRANSFER_CREDIT,
})


class TransactionDirection(str, enum.Enum):
    """Credit increases the balance, debit decreases it."""
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionStatus(str, enum.Enum):
    """Transaction status states."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    BANK = "bank"
    CARD = "card"


class TransactionDraft(BaseModel):
    """A ledger entry before the log assigns its id and timestamp."""
    kind: TransactionKind
    direction: TransactionDirection
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    counterparty: str
    description: str = ""
    category: str = ""
    status: TransactionStatus = TransactionStatus.COMPLETED
    account_id: Optional[str] = None
    correlation_id: Optional[str] = None
    reference_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    card_id: Optional[str] = None
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None
    payment_token: Optional[str] = None


class Transaction(TransactionDraft):
    """An immutable ledger entry."""
    id: str
    owner_id: str
    timestamp: datetime

    model_config = ConfigDict(frozen=True)

    @property
    def signed_amount(self) -> Decimal:
        if self.direction == TransactionDirection.CREDIT:
            return self.amount
        return -self.amount


class TransactionPage(BaseModel):
    """One page of the transaction history, newest first."""
    items: List[Transaction]
    page: int
    page_size: int
    total: int
    total_pages: int


class InternalTransferRequest(BaseModel):
    """Schema for moving money between two of the owner's accounts."""
    from_account_id: str = Field(..., min_length=1, description="Source account ID")
    to_account_id: str = Field(..., min_length=1, description="Destination account ID")
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2, description="Transfer amount (must be positive)")
    description: str = Field("", max_length=500, description="Optional transfer description")
    reference_id: Optional[str] = Field(None, max_length=100, description="Optional client reference; reusing one is rejected")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "from_account_id": "3f1c...",
                "to_account_id": "9a2b...",
                "amount": 250.00,
                "description": "Move to savings"
            }
        }
    )


class CardDetails(BaseModel):
    """Raw card input, handed to the payment collaborator and never stored."""
    number: str = Field(..., min_length=12, max_length=23, repr=False)
    exp_month: int = Field(..., ge=1, le=12)
    exp_year: int = Field(..., ge=2000, le=2100)
    cvc: str = Field(..., min_length=3, max_length=4, pattern=r"^\d+$", repr=False)
    cardholder_name: Optional[str] = Field(None, max_length=100)


class ExternalTransferRequest(BaseModel):
    """Schema for sending money to someone outside the ledger."""
    recipient_email: str = Field(..., max_length=254, description="Recipient email address")
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    description: str = Field("", max_length=500)
    method: PaymentMethod = PaymentMethod.BANK
    card: Optional[CardDetails] = Field(None, description="Required when method is 'card'")
    from_account_id: Optional[str] = Field(None, description="Account to debit; defaults to the first account")
    category: str = Field("Transfer", max_length=50)
    reference_id: Optional[str] = Field(None, max_length=100)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipient_email": "friend@example.com",
                "amount": 50.00,
                "description": "lunch",
                "method": "bank"
            }
        }
    )


class ManualEntryCreate(BaseModel):
    """Schema for recording an income or expense against an account."""
    account_id: str = Field(..., min_length=1)
    direction: TransactionDirection
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=500)
    category: str = Field(..., min_length=1, max_length=50)
    counterparty: str = Field("", max_length=200)


class TransferResult(BaseModel):
    """Everything a transfer changed, returned once it has committed."""
    correlation_id: str
    transactions: List[Transaction]
    accounts: List[Account]
