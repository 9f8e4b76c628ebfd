"""Read-side projections of a conference's fees.

These views are informational only. The allocation gate re-validates
availability at commit time and never trusts them.
"""

from datetime import datetime

from registration_fees.domain import (
    Conference,
    Currency,
    PublicFeeList,
    RegistrationFeeOption,
    RegistrationFeeOptionAdmin,
    evaluate,
)
from registration_fees.domain.availability import is_sold_out
from registration_fees.services.clock import Clock
from registration_fees.services.tenancy import resolve_conference
from registration_fees.services.usage_counter import UsageCounter
from registration_fees.stores.interfaces import ConferenceResolver, FeeStore, RegistrationStore


class FeeProjectionService:
    """Builds the public form list and the admin dashboard list."""

    def __init__(
        self,
        fees: FeeStore,
        registrations: RegistrationStore,
        conferences: ConferenceResolver,
        clock: Clock,
        default_currency: str = "EUR",
    ) -> None:
        self._fees = fees
        self._usage = UsageCounter(registrations)
        self._conferences = conferences
        self._clock = clock
        self._default_currency = Currency.parse(default_currency)

    def list_for_form(
        self, conference_ref: str, now: datetime | None = None
    ) -> list[RegistrationFeeOption]:
        """Return purchasable-or-disabled fees for the registration form.

        Inactive fees are hidden entirely; other unavailable fees are kept
        with a ``disabled_reason`` so the form can show them greyed out.
        """
        conference = resolve_conference(self._conferences, conference_ref)
        return self._form_options(conference, now or self._clock.now())

    def get_public_fees(self, conference_ref: str, now: datetime | None = None) -> PublicFeeList:
        conference = resolve_conference(self._conferences, conference_ref)
        options = self._form_options(conference, now or self._clock.now())
        if options:
            currency = options[0].currency
        else:
            currency = conference.currency or self._default_currency
        return PublicFeeList(currency=currency, fees=tuple(options))

    def list_for_admin(self, conference_ref: str) -> list[RegistrationFeeOptionAdmin]:
        """Return every fee, inactive ones included, with usage figures."""
        conference = resolve_conference(self._conferences, conference_ref)
        fees = self._fees.list_fees(conference.id)
        counts = self._usage.sold_counts(conference.id)
        rows = []
        for fee in fees:
            sold_count = counts.get(fee.id, 0)
            rows.append(
                RegistrationFeeOptionAdmin(
                    fee=fee,
                    sold_count=sold_count,
                    is_sold_out=is_sold_out(fee, sold_count),
                )
            )
        return rows

    def _form_options(self, conference: Conference, now: datetime) -> list[RegistrationFeeOption]:
        fees = self._fees.list_fees(conference.id, active_only=True)
        counts = self._usage.sold_counts(conference.id)
        options = []
        for fee in fees:
            sold_count = counts.get(fee.id, 0)
            verdict = evaluate(fee, now, sold_count)
            options.append(
                RegistrationFeeOption(
                    id=fee.id,
                    name=fee.name,
                    price_gross=fee.price_gross,
                    currency=fee.currency,
                    is_available=verdict.is_available,
                    disabled_reason=verdict.reason,
                    sold_count=sold_count,
                    capacity=fee.capacity,
                )
            )
        return options
