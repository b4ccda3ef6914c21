"""
Pydantic schemas for debit cards.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class DebitCardCreate(BaseModel):
    """Schema for registering a debit card. Only the last four digits are kept."""
    card_number: str = Field(..., min_length=12, max_length=23, repr=False)
    cardholder_name: str = Field(..., min_length=1, max_length=100)
    expiry_month: int = Field(..., ge=1, le=12)
    expiry_year: int = Field(..., ge=2000, le=2100)

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "card_number": "4242 4242 4242 4242",
                "cardholder_name": "John Doe",
                "expiry_month": 12,
                "expiry_year": 2030
            }
        }
    )


class DebitCard(BaseModel):
    """A registered debit card."""
    id: str
    owner_id: str
    cardholder_name: str
    brand: str
    last4: str
    expiry_month: int
    expiry_year: int
    created_at: datetime

    @computed_field
    @property
    def masked_number(self) -> str:
        return f"**** **** **** {self.last4}"


class CardPaymentRequest(BaseModel):
    """Schema for paying a merchant with a registered card."""
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    merchant: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=500)
    category: str = Field("Shopping", max_length=50)
    from_account_id: Optional[str] = None
