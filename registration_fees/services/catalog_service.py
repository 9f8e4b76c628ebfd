"""Fee catalog service - admin management of a conference's fees.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any

from registration_fees.domain import Capacity, Conference, Currency, FeeDefinition, FeeTerms
from registration_fees.domain.errors import FeeNotFoundError, FeeValidationError, InvalidFeeIdError
from registration_fees.domain.pricing import PriceInput, derive_prices
from registration_fees.services.tenancy import parse_fee_id, resolve_conference
from registration_fees.stores.interfaces import ConferenceResolver, FeeStore, RegistrationStore

logger = logging.getLogger(__name__)

PLAIN_FIELDS = ("valid_from", "valid_to", "is_active", "display_order")


@dataclass(frozen=True)
class FeeInput:
    """Admin input for a new fee."""

    name: str
    valid_from: date
    valid_to: date
    prices: PriceInput = field(default_factory=PriceInput)
    is_active: bool = True
    currency: str | None = None
    capacity: int | None = None
    display_order: int | None = None


class FeeRemoval(Enum):
    DELETED = "deleted"
    DEACTIVATED = "deactivated"


def _capacity(value: int | None) -> Capacity | None:
    if value is None:
        return None
    try:
        return Capacity(value=int(value))
    except ValueError:
        raise FeeValidationError("Capacity cannot be negative", field="capacity") from None


class FeeCatalogService:
    """Create, edit, order and retire registration fees."""

    def __init__(
        self,
        fees: FeeStore,
        registrations: RegistrationStore,
        conferences: ConferenceResolver,
        default_currency: str = "EUR",
    ) -> None:
        self._fees = fees
        self._registrations = registrations
        self._conferences = conferences
        self._default_currency = default_currency

    def list_fees(self, conference_ref: str, active_only: bool = False) -> list[FeeDefinition]:
        conference = resolve_conference(self._conferences, conference_ref)
        return self._fees.list_fees(conference.id, active_only=active_only)

    def create_fee(self, conference_ref: str, data: FeeInput) -> FeeDefinition:
        """Create a fee at the end of the conference's list unless an order is given.

        Raises:
            ConferenceNotFoundError: If the conference does not exist.
            FeeValidationError: If the input breaks a fee invariant.
        """
        conference = resolve_conference(self._conferences, conference_ref)
        price_net, price_gross = derive_prices(data.prices, conference.vat_percentage)
        terms = FeeTerms(
            name=data.name.strip(),
            valid_from=data.valid_from,
            valid_to=data.valid_to,
            is_active=data.is_active,
            price_net=price_net,
            price_gross=price_gross,
            currency=self._currency_for(conference, data.currency),
            capacity=_capacity(data.capacity),
            display_order=data.display_order,
        )
        terms.validate()
        if terms.display_order is None:
            terms = replace(terms, display_order=self._fees.next_display_order(conference.id))

        fee = self._fees.create_fee(conference.id, terms)
        logger.info("Registration fee created: fee=%s conference=%s", fee.id, conference.id)
        return fee

    def update_fee(
        self, fee_ref: str, conference_ref: str, changes: Mapping[str, Any]
    ) -> FeeDefinition:
        """Apply a partial update to a fee of the conference.

        Only keys present in ``changes`` are touched; a ``capacity`` of None
        makes the fee unlimited. Price keys are derived the same way as on
        creation.

        Raises:
            InvalidFeeIdError: If the fee_ref is not a valid UUID.
            ConferenceNotFoundError: If the conference does not exist.
            FeeNotFoundError: If the fee does not belong to the conference.
            FeeValidationError: If the patched fee breaks a fee invariant.
        """
        fee_id = parse_fee_id(fee_ref)
        conference = resolve_conference(self._conferences, conference_ref)
        current = self._fees.get_fee(fee_id, conference.id)
        if current is None:
            raise FeeNotFoundError(fee_ref)

        updates: dict[str, Any] = {key: changes[key] for key in PLAIN_FIELDS if key in changes}
        if "name" in changes:
            updates["name"] = changes["name"].strip()
        if "capacity" in changes:
            updates["capacity"] = _capacity(changes["capacity"])
        if "price_net" in changes or "price_gross" in changes:
            prices = PriceInput(
                price_net=changes.get("price_net"),
                price_gross=changes.get("price_gross"),
                prices_include_vat=bool(changes.get("prices_include_vat", False)),
                vat_percentage=changes.get("vat_percentage"),
            )
            updates["price_net"], updates["price_gross"] = derive_prices(
                prices, conference.vat_percentage
            )

        # A None display_order keeps the stored one.
        terms = replace(current.terms(), **{"display_order": None, **updates})
        terms.validate()
        fee = self._fees.update_fee(fee_id, conference.id, terms)
        if fee is None:
            raise FeeNotFoundError(fee_ref)
        logger.info(
            "Registration fee updated: fee=%s conference=%s fields=%s",
            fee.id,
            conference.id,
            sorted(updates),
        )
        return fee

    def reorder_fees(self, conference_ref: str, fee_refs: Sequence[str]) -> int:
        """Assign display_order 0..n-1 following ``fee_refs``.

        Ids of other conferences or of deleted fees are skipped. Returns the
        number of fees reordered.

        Raises:
            ConferenceNotFoundError: If the conference does not exist.
            FeeValidationError: If the list is empty, has duplicates or
                malformed ids.
        """
        if not fee_refs:
            raise FeeValidationError("fee_ids array is required", field="fee_ids")
        if len(set(fee_refs)) != len(fee_refs):
            raise FeeValidationError("fee_ids must not repeat", field="fee_ids")
        try:
            fee_ids = [parse_fee_id(ref) for ref in fee_refs]
        except InvalidFeeIdError:
            raise FeeValidationError("fee_ids must be UUIDs", field="fee_ids") from None

        conference = resolve_conference(self._conferences, conference_ref)
        updated = self._fees.reorder_fees(conference.id, fee_ids)
        if updated != len(fee_ids):
            logger.info(
                "Reorder skipped %d unknown fee ids for conference=%s",
                len(fee_ids) - updated,
                conference.id,
            )
        return updated

    def delete_fee(self, fee_ref: str, conference_ref: str) -> FeeRemoval:
        """Remove a fee, or deactivate it when registrations reference it.

        Raises:
            InvalidFeeIdError: If the fee_ref is not a valid UUID.
            ConferenceNotFoundError: If the conference does not exist.
            FeeNotFoundError: If the fee does not belong to the conference.
        """
        fee_id = parse_fee_id(fee_ref)
        conference = resolve_conference(self._conferences, conference_ref)
        current = self._fees.get_fee(fee_id, conference.id)
        if current is None:
            raise FeeNotFoundError(fee_ref)

        if self._registrations.is_fee_referenced(fee_id):
            self._fees.update_fee(
                fee_id,
                conference.id,
                replace(current.terms(), is_active=False, display_order=None),
            )
            logger.info("Registration fee deactivated instead of deleted: fee=%s", fee_id)
            return FeeRemoval.DEACTIVATED

        if not self._fees.delete_fee(fee_id, conference.id):
            raise FeeNotFoundError(fee_ref)
        logger.info("Registration fee deleted: fee=%s conference=%s", fee_id, conference.id)
        return FeeRemoval.DELETED

    def _currency_for(self, conference: Conference, submitted: str | None) -> Currency:
        if conference.currency is not None:
            return conference.currency
        try:
            return Currency.parse(submitted or self._default_currency)
        except ValueError:
            raise FeeValidationError(
                "Currency must be a 3-letter code", field="currency"
            ) from None
