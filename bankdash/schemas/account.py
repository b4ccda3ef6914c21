"""
Pydantic schemas for Account API requests and responses.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bankdash.core.exceptions import ValidationError
from bankdash.core.money import to_money


class AccountCreate(BaseModel):
    """Schema for adding a linked bank account."""
    display_name: str = Field(..., min_length=1, max_length=100, description="Name shown on the dashboard")
    institution_name: str = Field(..., min_length=1, max_length=100, description="Bank or institution name")
    external_account_number: str = Field(..., min_length=1, max_length=34, description="Account number at the institution")
    routing_code: str = Field(..., min_length=1, max_length=20, description="Routing / sort code")
    initial_balance: Decimal = Field(
        default=Decimal("0.00"), ge=0, max_digits=15, decimal_places=2, description="Opening balance"
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "display_name": "Everyday Checking",
                "institution_name": "First National",
                "external_account_number": "000123456789",
                "routing_code": "021000021",
                "initial_balance": 1000.00
            }
        }
    )


class Account(BaseModel):
    """A balance-holding account owned by one user."""
    id: str
    owner_id: str
    display_name: str
    institution_name: str
    external_account_number: str
    routing_code: str
    balance: Decimal
    created_at: datetime

    @field_validator("balance", mode="before")
    @classmethod
    def _quantize_balance(cls, value):
        try:
            return to_money(value)
        except ValidationError as exc:
            raise ValueError(exc.message) from exc


class AccountBalance(BaseModel):
    """Schema for account balance response."""
    account_id: str
    balance: Decimal
