"""Net/gross price derivation for fee input."""

from dataclasses import dataclass
from decimal import Decimal

from registration_fees.domain.errors import FeeValidationError
from registration_fees.domain.value_objects import gross_from_net, net_from_gross, round_money


@dataclass(frozen=True)
class PriceInput:
    """Prices as submitted by an admin.

    Either an explicit ``price_net``/``price_gross`` pair, or a single amount in
    one of them that is completed using the VAT rate. A lone ``price_gross``
    (or ``prices_include_vat``) means the amount already includes VAT.
    """

    price_net: Decimal | None = None
    price_gross: Decimal | None = None
    prices_include_vat: bool = False
    vat_percentage: Decimal | None = None

    @property
    def is_empty(self) -> bool:
        return self.price_net is None and self.price_gross is None


def derive_prices(
    prices: PriceInput, conference_vat: Decimal | None = None
) -> tuple[Decimal, Decimal]:
    """Return ``(price_net, price_gross)`` rounded to cents.

    The fee's own VAT rate overrides the conference rate.

    Raises:
        FeeValidationError: If no price is given or the VAT rate is negative.
    """
    if prices.is_empty:
        raise FeeValidationError("Price is required", field="price_net")

    if prices.price_net is not None and prices.price_gross is not None:
        return round_money(prices.price_net), round_money(prices.price_gross)

    vat = prices.vat_percentage if prices.vat_percentage is not None else conference_vat
    vat = vat or Decimal("0")
    if vat < 0:
        raise FeeValidationError("VAT percentage cannot be negative", field="vat_percentage")

    includes_vat = prices.price_gross is not None or prices.prices_include_vat
    amount = prices.price_gross if prices.price_gross is not None else prices.price_net
    if amount < 0:
        raise FeeValidationError("Prices cannot be negative", field="price_net")

    if vat == 0:
        amount = round_money(amount)
        return amount, amount
    if includes_vat:
        return net_from_gross(amount, vat), round_money(amount)
    return round_money(amount), gross_from_net(amount, vat)
