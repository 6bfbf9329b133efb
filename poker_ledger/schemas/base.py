"""Column helpers shared by the ledger tables."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import BigInteger, Column, DateTime, Numeric
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field

from poker_ledger.utils.money import CENT, MAX_FRACTION_DIGITS, MAX_INTEGER_DIGITS

MONEY_SCALE = MAX_FRACTION_DIGITS
MONEY_PRECISION = MAX_INTEGER_DIGITS + MONEY_SCALE
CENTS = Decimal(10) ** MONEY_SCALE


def utcnow() -> datetime:
    return datetime.now(UTC)


class Money(TypeDecorator):
    """NUMERIC(16, 2) where the backend has it; integer cents on SQLite.

    SQLite gives NUMERIC columns REAL affinity, so amounts would pass
    through a double. Cents in an INTEGER column keep values and SUM exact.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):  # type: ignore[no-untyped-def]
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True))

    def process_bind_param(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is None:
            return None
        amount = Decimal(value)
        if dialect.name == "sqlite":
            return int((amount * CENTS).to_integral_value())
        return amount

    def process_result_value(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is None:
            return None
        if dialect.name == "sqlite":
            return (Decimal(int(value)) / CENTS).quantize(CENT)
        return Decimal(value).quantize(CENT)


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamps, stored and returned in UTC.

    Naive values are taken to be UTC already; SQLite drops the offset on
    storage, so it is restored on the way out.
    """

    impl = DateTime
    cache_ok = True

    def __init__(self) -> None:
        super().__init__(timezone=True)

    def process_bind_param(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


def MoneyField(description: str | None = None) -> Any:
    """14 integer digits plus cents, never null."""
    return Field(sa_column=Column(Money(), nullable=False), description=description)


def TimestampField(*, nullable: bool = False) -> Any:
    if nullable:
        return Field(default=None, sa_type=UTCDateTime)
    return Field(default_factory=utcnow, sa_type=UTCDateTime)


ZERO = Decimal("0.00")
