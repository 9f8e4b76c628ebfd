"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID

CENTS = Decimal("0.01")

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True)
class ConferenceId:
    """Unique identifier for a Conference."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FeeId:
    """Unique identifier for a registration fee."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Currency:
    """Three-letter ISO 4217 currency code."""

    code: str

    def __post_init__(self) -> None:
        if not _CURRENCY_RE.match(self.code):
            raise ValueError("Currency must be a 3-letter uppercase code")

    @classmethod
    def parse(cls, value: str) -> Self:
        return cls(code=value.strip().upper())

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def of(cls, amount: Decimal | int | str, currency: str) -> Self:
        return cls(amount=round_money(Decimal(amount)), currency=Currency.parse(currency))

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")

    def is_exhausted_by(self, sold_count: int) -> bool:
        return sold_count >= self.value


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def gross_from_net(net: Decimal, vat_percentage: Decimal) -> Decimal:
    return round_money(net * (1 + vat_percentage / 100))


def net_from_gross(gross: Decimal, vat_percentage: Decimal) -> Decimal:
    return round_money(gross / (1 + vat_percentage / 100))
