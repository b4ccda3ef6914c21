"""
Fixed-point money helpers. Every stored or aggregated amount goes through
``to_money`` so values never carry more than two decimal places.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from bankdash.core.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest amount a 15-digit, 2-place column holds
MAX_AMOUNT = Decimal("9999999999999.99")


def to_money(value) -> Decimal:
    """Convert ``value`` to a Decimal rounded half-up to cents."""
    if isinstance(value, float):
        # str() first so 0.1 becomes Decimal("0.1") rather than its binary expansion
        value = str(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc


def positive_amount(value) -> Decimal:
    """Validate a transfer amount: strictly positive, at most two decimal places."""
    if isinstance(value, float):
        value = str(value)
    try:
        raw = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc
    if not raw.is_finite() or raw <= 0:
        raise ValidationError("Amount must be greater than zero")
    if raw > MAX_AMOUNT:
        raise ValidationError(f"Amount cannot exceed {MAX_AMOUNT}")
    try:
        rounded = raw.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc
    if raw != rounded:
        raise ValidationError("Amount cannot have more than two decimal places")
    return to_money(raw)
