"""
Debit card management.
"""

from typing import List, Optional

from bankdash.core.exceptions import NotFoundError, ValidationError
from bankdash.core.logging import get_logger
from bankdash.core.utils import new_id, utcnow
from bankdash.schemas.card import DebitCard, DebitCardCreate
from bankdash.schemas.ledger import LedgerData
from bankdash.services.events import ChangeNotifier, LedgerChange
from bankdash.services.payments import detect_brand, digits_only, is_expired, luhn_checksum_ok
from bankdash.services.storage import LedgerStorage

logger = get_logger(__name__)


def find_card(ledger: LedgerData, card_id: str) -> DebitCard:
    for card in ledger.cards:
        if card.id == card_id:
            return card
    raise NotFoundError(f"Card {card_id} not found")


class DebitCardService:
    """Registers and looks up an owner's debit cards."""

    def __init__(self, storage: LedgerStorage, notifier: Optional[ChangeNotifier] = None):
        self.storage = storage
        self.notifier = notifier

    def add_card(self, owner_id: str, card_data: DebitCardCreate) -> DebitCard:
        """
        Register a card, keeping only its brand and last four digits.

        Raises:
            ValidationError: Invalid card number, expired card, or the card is already registered
        """
        if not luhn_checksum_ok(card_data.card_number):
            raise ValidationError("Invalid card number")
        if is_expired(card_data.expiry_month, card_data.expiry_year):
            raise ValidationError("Card has expired")

        digits = digits_only(card_data.card_number)
        brand = detect_brand(digits)
        last4 = digits[-4:]

        with self.storage.transaction(owner_id) as ledger:
            for existing in ledger.cards:
                if (existing.brand, existing.last4, existing.expiry_month, existing.expiry_year) == (
                    brand, last4, card_data.expiry_month, card_data.expiry_year
                ):
                    raise ValidationError(f"{brand} card ending {last4} is already registered")
            card = DebitCard(
                id=new_id(),
                owner_id=owner_id,
                cardholder_name=card_data.cardholder_name,
                brand=brand,
                last4=last4,
                expiry_month=card_data.expiry_month,
                expiry_year=card_data.expiry_year,
                created_at=utcnow(),
            )
            ledger.cards.append(card)

        logger.info("card_added", owner_id=owner_id, card_id=card.id, brand=brand, last4=last4)
        if self.notifier is not None:
            self.notifier.publish(LedgerChange(owner_id=owner_id, action="card_added", card_ids=(card.id,)))
        return card

    def list_cards(self, owner_id: str) -> List[DebitCard]:
        return list(self.storage.load(owner_id).cards)

    def get_card(self, owner_id: str, card_id: str) -> DebitCard:
        return find_card(self.storage.load(owner_id), card_id)
