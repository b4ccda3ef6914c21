"""
The per-owner persisted document: accounts, transactions and cards.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from bankdash.core.exceptions import PersistenceError
from bankdash.schemas.account import Account
from bankdash.schemas.card import DebitCard
from bankdash.schemas.transaction import Transaction


class LedgerData(BaseModel):
    """
    Whole-document view of one owner's ledger.

    Stores read and write this as a unit; a collection that is missing or
    not a list is treated as empty.
    """
    accounts: List[Account] = Field(default_factory=list)
    transactions: List[Transaction] = Field(default_factory=list)
    cards: List[DebitCard] = Field(default_factory=list)

    @field_validator("accounts", "transactions", "cards", mode="before")
    @classmethod
    def _default_collection(cls, value):
        if not isinstance(value, list):
            return []
        return value

    @classmethod
    def from_document(cls, document: Optional[Any]) -> "LedgerData":
        """Parse a stored document, recovering from missing collections."""
        if not isinstance(document, dict):
            return cls()
        try:
            return cls.model_validate(document)
        except PydanticValidationError as exc:
            raise PersistenceError(
                f"Stored ledger document is corrupt ({exc.error_count()} invalid fields)"
            ) from exc

    def to_document(self) -> dict:
        return self.model_dump(mode="json")
