"""Wires services to the Django-backed stores for the HTTP handlers."""

from dataclasses import dataclass

from django.conf import settings

from registration_fees.services import (
    AllocationGate,
    FeeCatalogService,
    FeeProjectionService,
    SystemClock,
)
from registration_fees.stores.django_store import (
    DjangoConferenceResolver,
    DjangoFeeStore,
    DjangoRegistrationStore,
)


@dataclass(frozen=True)
class FeeServices:
    catalog: FeeCatalogService
    projections: FeeProjectionService
    gate: AllocationGate


def get_fee_services() -> FeeServices:
    options = settings.REGISTRATION_FEES
    fees = DjangoFeeStore(lock_timeout_ms=options["LOCK_TIMEOUT_MS"])
    registrations = DjangoRegistrationStore()
    conferences = DjangoConferenceResolver()
    clock = SystemClock()
    return FeeServices(
        catalog=FeeCatalogService(
            fees,
            registrations,
            conferences,
            default_currency=options["DEFAULT_CURRENCY"],
        ),
        projections=FeeProjectionService(
            fees,
            registrations,
            conferences,
            clock,
            default_currency=options["DEFAULT_CURRENCY"],
        ),
        gate=AllocationGate(
            fees,
            registrations,
            conferences,
            clock,
            max_attempts=options["RESERVE_MAX_ATTEMPTS"],
            retry_backoff=options["RESERVE_RETRY_BACKOFF_SECONDS"],
        ),
    )
