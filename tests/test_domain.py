"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from registration_fees.domain import Capacity, Currency, FeeId, FeeTerms, Money
from registration_fees.domain.errors import (
    AllocationError,
    ErrorCode,
    FeeNotFoundError,
    FeeValidationError,
)
from registration_fees.domain.availability import UnavailableReason, as_calendar_date
from registration_fees.domain.pricing import PriceInput, derive_prices


def make_terms(**overrides) -> FeeTerms:
    data = {
        "name": "Regular",
        "valid_from": date(2025, 1, 1),
        "valid_to": date(2025, 1, 31),
        "is_active": True,
        "price_net": Decimal("80.00"),
        "price_gross": Decimal("100.00"),
        "currency": Currency(code="EUR"),
        "capacity": Capacity(value=10),
        "display_order": 0,
    }
    data.update(overrides)
    return FeeTerms(**data)


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        """Money can be created with positive amount."""
        money = Money(amount=Decimal("10.50"), currency=Currency(code="EUR"))
        assert money.amount == Decimal("10.50")

    def test_money_accepts_zero(self):
        """Money can be created with zero."""
        assert Money(amount=Decimal("0"), currency=Currency(code="EUR")).amount == 0

    def test_money_rejects_negative_amount(self):
        """Money raises ValueError for negative amount."""
        with pytest.raises(ValueError):
            Money(amount=Decimal("-0.01"), currency=Currency(code="EUR"))

    def test_money_str_format(self):
        """Money string representation is formatted to 2 decimal places."""
        assert str(Money.of("12.5", "eur")) == "12.50 EUR"


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_positive_value(self):
        assert Capacity(value=50).value == 50

    def test_capacity_accepts_zero(self):
        """A zero capacity is valid and is exhausted immediately."""
        assert Capacity(value=0).is_exhausted_by(0)

    def test_capacity_rejects_negative_value(self):
        with pytest.raises(ValueError):
            Capacity(value=-1)

    def test_capacity_exhaustion(self):
        assert not Capacity(value=2).is_exhausted_by(1)
        assert Capacity(value=2).is_exhausted_by(2)


class TestCurrency:
    """Tests for Currency value object."""

    def test_parse_normalizes_case(self):
        assert Currency.parse(" usd ").code == "USD"

    @pytest.mark.parametrize("code", ["EU", "EURO", "eur", "12A", ""])
    def test_rejects_malformed_codes(self, code):
        with pytest.raises(ValueError):
            Currency(code=code)


class TestFeeId:
    """Tests for FeeId value object."""

    def test_from_string_valid_uuid(self):
        raw = uuid.uuid4()
        assert FeeId.from_string(str(raw)).value == raw

    def test_from_string_invalid_uuid(self):
        with pytest.raises(ValueError):
            FeeId.from_string("not-a-uuid")


class TestFeeTerms:
    """Tests for fee invariants."""

    def test_valid_terms_pass(self):
        make_terms().validate()

    def test_window_may_be_a_single_day(self):
        make_terms(valid_from=date(2025, 3, 1), valid_to=date(2025, 3, 1)).validate()

    def test_rejects_inverted_window(self):
        with pytest.raises(FeeValidationError) as exc:
            make_terms(valid_from=date(2025, 2, 1), valid_to=date(2025, 1, 1)).validate()
        assert exc.value.field == "valid_to"

    def test_rejects_gross_below_net(self):
        with pytest.raises(FeeValidationError) as exc:
            make_terms(price_net=Decimal("100"), price_gross=Decimal("99.99")).validate()
        assert exc.value.field == "price_gross"

    def test_rejects_negative_price(self):
        with pytest.raises(FeeValidationError):
            make_terms(price_net=Decimal("-1"), price_gross=Decimal("0")).validate()

    def test_rejects_blank_name(self):
        with pytest.raises(FeeValidationError):
            make_terms(name="   ").validate()


class TestPricing:
    """Tests for net/gross derivation."""

    def test_explicit_pair_is_kept(self):
        prices = PriceInput(price_net=Decimal("80"), price_gross=Decimal("100"))
        assert derive_prices(prices, Decimal("25")) == (Decimal("80.00"), Decimal("100.00"))

    def test_net_price_gets_vat_added(self):
        prices = PriceInput(price_net=Decimal("100"))
        assert derive_prices(prices, Decimal("25")) == (Decimal("100.00"), Decimal("125.00"))

    def test_gross_price_gets_vat_removed(self):
        prices = PriceInput(price_gross=Decimal("125"))
        assert derive_prices(prices, Decimal("25")) == (Decimal("100.00"), Decimal("125.00"))

    def test_prices_include_vat_flag_marks_net_field_as_gross(self):
        prices = PriceInput(price_net=Decimal("119"), prices_include_vat=True)
        assert derive_prices(prices, Decimal("19")) == (Decimal("100.00"), Decimal("119.00"))

    def test_fee_vat_overrides_conference_vat(self):
        prices = PriceInput(price_net=Decimal("100"), vat_percentage=Decimal("19"))
        assert derive_prices(prices, Decimal("25")) == (Decimal("100.00"), Decimal("119.00"))

    def test_without_vat_net_equals_gross(self):
        prices = PriceInput(price_gross=Decimal("49.999"))
        assert derive_prices(prices, None) == (Decimal("50.00"), Decimal("50.00"))

    def test_missing_price_is_rejected(self):
        with pytest.raises(FeeValidationError):
            derive_prices(PriceInput(), Decimal("25"))


class TestErrors:
    """Tests for structured domain errors."""

    def test_allocation_error_carries_reason(self):
        error = AllocationError(UnavailableReason.SOLD_OUT)
        assert error.code is ErrorCode.FEE_UNAVAILABLE
        assert error.reason is UnavailableReason.SOLD_OUT
        assert str(error).startswith("FEE_UNAVAILABLE: ")

    def test_not_found_message_is_user_safe(self):
        error = FeeNotFoundError("abc")
        assert error.message == "Fee not found"
        assert error.fee_id == "abc"

    def test_errors_are_exceptions(self):
        with pytest.raises(FeeNotFoundError):
            raise FeeNotFoundError("abc")


def test_aware_datetimes_are_compared_in_utc():
    late_evening_new_york = datetime(2025, 1, 31, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert as_calendar_date(late_evening_new_york) == date(2025, 2, 1)
    assert as_calendar_date(datetime(2025, 1, 31, 23, 59, tzinfo=timezone.utc)) == date(2025, 1, 31)
