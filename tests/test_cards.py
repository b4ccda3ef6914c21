"""
Tests for debit card registration and the simulated payment provider.
"""

import asyncio
from datetime import date

import pytest

from bankdash.core.exceptions import NotFoundError, PaymentMethodError, ValidationError
from bankdash.schemas.card import DebitCardCreate
from bankdash.schemas.transaction import CardDetails
from bankdash.services.payments import (
    SimulatedPaymentGateway,
    detect_brand,
    is_expired,
    luhn_checksum_ok,
    tokenize_card,
)

from helpers import OWNER


def new_card(number="4242 4242 4242 4242", month=12, year=2099):
    return DebitCardCreate(card_number=number, cardholder_name="John Doe", expiry_month=month, expiry_year=year)


# ==================== CARD HELPER TESTS ====================

@pytest.mark.parametrize("number", ["4242424242424242", "4242-4242-4242-4242", "5555555555554444", "378282246310005"])
def test_luhn_accepts_valid_numbers(number):
    assert luhn_checksum_ok(number)


@pytest.mark.parametrize("number", ["4242424242424241", "1234", "0000 0000 00"])
def test_luhn_rejects_invalid_numbers(number):
    assert not luhn_checksum_ok(number)


@pytest.mark.parametrize("number,brand", [
    ("4242424242424242", "Visa"),
    ("5555555555554444", "Mastercard"),
    ("2223003122003222", "Mastercard"),
    ("378282246310005", "American Express"),
    ("6011111111111117", "Discover"),
    ("9999999999999995", "Unknown"),
])
def test_detect_brand(number, brand):
    assert detect_brand(number) == brand


def test_is_expired():
    today = date(2024, 6, 15)
    assert not is_expired(6, 2024, today)
    assert is_expired(5, 2024, today)
    assert not is_expired(1, 2025, today)


# ==================== CARD SERVICE TESTS ====================

def test_add_card_keeps_only_last_four(cards, storage):
    """Test the stored card has brand and last four digits but no number."""
    card = cards.add_card(OWNER, new_card())

    assert card.brand == "Visa"
    assert card.last4 == "4242"
    assert card.masked_number == "**** **** **** 4242"
    assert "4242424242424242" not in storage.raw(OWNER)
    assert "4242 4242 4242 4242" not in storage.raw(OWNER)


def test_add_card_rejects_invalid_number(cards):
    with pytest.raises(ValidationError):
        cards.add_card(OWNER, new_card(number="4242 4242 4242 4241"))
    assert cards.list_cards(OWNER) == []


def test_add_card_rejects_expired_card(cards):
    with pytest.raises(ValidationError):
        cards.add_card(OWNER, new_card(year=2001))


def test_add_card_rejects_duplicate(cards):
    cards.add_card(OWNER, new_card())
    with pytest.raises(ValidationError):
        cards.add_card(OWNER, new_card())


def test_list_and_get_cards(cards):
    visa = cards.add_card(OWNER, new_card())
    mastercard = cards.add_card(OWNER, new_card(number="5555 5555 5555 4444"))

    assert [c.id for c in cards.list_cards(OWNER)] == [visa.id, mastercard.id]
    assert cards.get_card(OWNER, mastercard.id).brand == "Mastercard"


def test_get_unknown_card(cards):
    with pytest.raises(NotFoundError):
        cards.get_card(OWNER, "missing")


# ==================== PAYMENT PROVIDER TESTS ====================

def test_simulated_gateway_issues_token():
    card = CardDetails(number="4242424242424242", exp_month=12, exp_year=2099, cvc="123")
    token = asyncio.run(SimulatedPaymentGateway(latency=0).create_payment_method(card))
    assert token.token.startswith("pm_")
    assert token.last4 == "4242"
    assert token.brand == "Visa"


def test_simulated_gateway_rejects_expired_card():
    card = CardDetails(number="4242424242424242", exp_month=1, exp_year=2001, cvc="123")
    with pytest.raises(PaymentMethodError):
        asyncio.run(SimulatedPaymentGateway(latency=0).create_payment_method(card))


def test_tokenize_card_wraps_unexpected_errors():
    class BrokenGateway(SimulatedPaymentGateway):
        async def create_payment_method(self, card):
            raise ConnectionError("provider unreachable")

    card = CardDetails(number="4242424242424242", exp_month=12, exp_year=2099, cvc="123")
    with pytest.raises(PaymentMethodError) as exc_info:
        asyncio.run(tokenize_card(BrokenGateway(), card, timeout=1))
    assert "provider unreachable" in exc_info.value.message
