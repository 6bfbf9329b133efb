"""Validation for monetary amounts stored as NUMERIC(16, 2)."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from poker_ledger.services.errors import InvalidArgumentError

MAX_INTEGER_DIGITS = 14
MAX_FRACTION_DIGITS = 2
CENT = Decimal("0.01")


def integer_digits(value: Decimal) -> int:
    """Number of digits left of the decimal point (``0.5`` has one)."""
    if value == 0 or abs(value) < 1:
        return 1
    return value.adjusted() + 1


def fraction_digits(value: Decimal) -> int:
    """Number of significant digits right of the decimal point."""
    if value == 0:
        return 0
    exponent = value.normalize().as_tuple().exponent
    return max(0, -int(exponent))


def validate_money(value: object, field: str) -> Decimal:
    """Coerce ``value`` to a two-place Decimal or raise InvalidArgumentError.

    Accepts Decimal, int and decimal strings. Floats are refused because they
    cannot carry cents exactly; callers send amounts as strings.
    """
    if value is None:
        raise InvalidArgumentError(f"{field} is required", field=field)
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidArgumentError(
            f"{field} must be a decimal string, not {type(value).__name__}",
            field=field,
        )
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidArgumentError(
                f"{field} is not a decimal number: {value!r}", field=field
            ) from None
    else:
        raise InvalidArgumentError(
            f"{field} has unsupported type {type(value).__name__}", field=field
        )

    if not amount.is_finite():
        raise InvalidArgumentError(f"{field} must be finite", field=field)
    if amount < 0:
        raise InvalidArgumentError(f"{field} must not be negative", field=field)
    if fraction_digits(amount) > MAX_FRACTION_DIGITS:
        raise InvalidArgumentError(
            f"{field} allows at most {MAX_FRACTION_DIGITS} fractional digits",
            field=field,
        )
    if integer_digits(amount) > MAX_INTEGER_DIGITS:
        raise InvalidArgumentError(
            f"{field} allows at most {MAX_INTEGER_DIGITS} integer digits",
            field=field,
        )
    return amount.quantize(CENT)
