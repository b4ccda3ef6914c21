"""
Payment tokenization collaborator.

The ledger never keeps raw card numbers: card input is exchanged with a
payment provider for a payment-method token plus the last four digits and
the brand, and only those are recorded.
"""

import asyncio
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional

from bankdash.core.config import settings
from bankdash.core.exceptions import PaymentMethodError
from bankdash.core.logging import get_logger
from bankdash.schemas.transaction import CardDetails

logger = get_logger(__name__)


def digits_only(card_number: str) -> str:
    return "".join(ch for ch in card_number if ch.isdigit())


def luhn_checksum_ok(card_number: str) -> bool:
    """Validate a card number with the Luhn algorithm."""
    digits = digits_only(card_number)
    if not 12 <= len(digits) <= 19:
        return False
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def detect_brand(card_number: str) -> str:
    """Card brand from the issuer prefix."""
    digits = digits_only(card_number)
    if digits.startswith("4"):
        return "Visa"
    if digits[:2] in {"51", "52", "53", "54", "55"} or "2221" <= digits[:4] <= "2720":
        return "Mastercard"
    if digits[:2] in {"34", "37"}:
        return "American Express"
    if digits.startswith("6011") or digits.startswith("65"):
        return "Discover"
    return "Unknown"


def is_expired(exp_month: int, exp_year: int, today: Optional[date] = None) -> bool:
    """A card is valid through the last day of its expiry month."""
    today = today or date.today()
    return (exp_year, exp_month) < (today.year, today.month)


@dataclass(frozen=True)
class PaymentMethodToken:
    """Non-sensitive result of tokenizing a card."""
    token: str
    last4: str
    brand: str


class PaymentGateway(ABC):
    """Interface to the payment tokenization provider."""

    @abstractmethod
    async def create_payment_method(self, card: CardDetails) -> PaymentMethodToken:
        """
        Exchange raw card input for a payment-method token.

        Raises:
            PaymentMethodError: The provider rejected the card
        """


class SimulatedPaymentGateway(PaymentGateway):
    """
    Stand-in provider for development and tests.

    Rejects cards that fail the Luhn check or have expired, waits
    ``latency`` seconds, and issues random ``pm_`` tokens.
    """

    def __init__(self, latency: Optional[float] = None):
        self.latency = settings.PAYMENT_SIMULATED_LATENCY_SECONDS if latency is None else latency

    async def create_payment_method(self, card: CardDetails) -> PaymentMethodToken:
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        if not luhn_checksum_ok(card.number):
            raise PaymentMethodError("Invalid card number")
        if is_expired(card.exp_month, card.exp_year):
            raise PaymentMethodError("Card has expired")
        digits = digits_only(card.number)
        token = PaymentMethodToken(
            token="pm_" + secrets.token_hex(12),
            last4=digits[-4:],
            brand=detect_brand(digits),
        )
        logger.info("payment_method_created", brand=token.brand, last4=token.last4)
        return token


async def tokenize_card(
    gateway: PaymentGateway, card: CardDetails, timeout: Optional[float] = None
) -> PaymentMethodToken:
    """
    Call the gateway with a timeout, normalising every failure to
    ``PaymentMethodError``.
    """
    timeout = settings.PAYMENT_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        return await asyncio.wait_for(gateway.create_payment_method(card), timeout=timeout)
    except PaymentMethodError:
        raise
    except asyncio.TimeoutError as exc:
        logger.warning("payment_method_timeout", timeout=timeout)
        raise PaymentMethodError("Payment provider timed out") from exc
    except Exception as exc:
        logger.warning("payment_method_failed", error=str(exc))
        raise PaymentMethodError(f"Payment provider error: {exc}") from exc
