"""Domain models representing persisted state and its projections.

These are pure domain objects with no API input rules.
Django ORM models are in registration_fees/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from registration_fees.domain.availability import UnavailableReason
from registration_fees.domain.errors import FeeValidationError
from registration_fees.domain.value_objects import (
    Capacity,
    ConferenceId,
    Currency,
    FeeId,
    Money,
)

MAX_NAME_LENGTH = 255


@dataclass(frozen=True)
class Conference:
    """Domain representation of the conference that owns a fee catalog."""

    id: ConferenceId
    slug: str
    name: str
    currency: Currency | None = None
    vat_percentage: Decimal | None = None


@dataclass(frozen=True)
class FeeTerms:
    """Admin-editable attributes of a fee.

    ``validate`` enforces the invariants every stored fee must satisfy; stores
    only ever persist validated terms.
    """

    name: str
    valid_from: date
    valid_to: date
    is_active: bool
    price_net: Decimal
    price_gross: Decimal
    currency: Currency
    capacity: Capacity | None = None
    display_order: int | None = None

    def validate(self) -> None:
        if not self.name.strip():
            raise FeeValidationError("Name is required", field="name")
        if len(self.name) > MAX_NAME_LENGTH:
            raise FeeValidationError("Name is too long", field="name")
        if self.valid_from > self.valid_to:
            raise FeeValidationError("Valid to must be on or after valid from", field="valid_to")
        if self.price_net < 0 or self.price_gross < 0:
            raise FeeValidationError("Prices cannot be negative", field="price_net")
        if self.price_gross < self.price_net:
            raise FeeValidationError(
                "Gross price cannot be lower than net price", field="price_gross"
            )
        if self.display_order is not None and self.display_order < 0:
            raise FeeValidationError("Display order cannot be negative", field="display_order")


@dataclass(frozen=True)
class FeeDefinition:
    """Domain representation of a custom registration fee."""

    id: FeeId
    conference_id: ConferenceId
    name: str
    valid_from: date
    valid_to: date
    is_active: bool
    price_net: Decimal
    price_gross: Decimal
    currency: Currency
    capacity: Capacity | None
    display_order: int
    created_at: datetime
    updated_at: datetime

    @property
    def gross(self) -> Money:
        return Money(amount=self.price_gross, currency=self.currency)

    def terms(self) -> FeeTerms:
        return FeeTerms(
            name=self.name,
            valid_from=self.valid_from,
            valid_to=self.valid_to,
            is_active=self.is_active,
            price_net=self.price_net,
            price_gross=self.price_gross,
            currency=self.currency,
            capacity=self.capacity,
            display_order=self.display_order,
        )


@dataclass(frozen=True)
class RegistrationFeeOption:
    """Fee as offered on the public registration form (gross price only)."""

    id: FeeId
    name: str
    price_gross: Decimal
    currency: Currency
    is_available: bool
    disabled_reason: UnavailableReason | None = None
    sold_count: int | None = None
    capacity: Capacity | None = None


@dataclass(frozen=True)
class RegistrationFeeOptionAdmin:
    """Fee as listed on the admin dashboard."""

    fee: FeeDefinition
    sold_count: int
    is_sold_out: bool


@dataclass(frozen=True)
class PublicFeeList:
    """Fees for the registration form plus the currency label to render."""

    currency: Currency
    fees: tuple[RegistrationFeeOption, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PriceSnapshot:
    """Gross price in effect when a reservation was committed."""

    price_gross: Decimal
    currency: Currency

    @classmethod
    def of(cls, fee: FeeDefinition) -> "PriceSnapshot":
        return cls(price_gross=fee.price_gross, currency=fee.currency)


@dataclass(frozen=True)
class Reservation:
    """Result of a successful allocation."""

    registration_id: str
    fee_id: FeeId
    price: PriceSnapshot
    reserved_at: datetime
