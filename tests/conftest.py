"""Pytest configuration and shared fixtures."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from registration_fees.domain import Conference, ConferenceId, Currency
from registration_fees.domain.pricing import PriceInput
from registration_fees.services import (
    AllocationGate,
    FeeCatalogService,
    FeeInput,
    FeeProjectionService,
)
from registration_fees.services.clock import Clock
from registration_fees.stores.memory_store import (
    InMemoryConferenceResolver,
    InMemoryFeeStore,
    InMemoryRegistrationStore,
)


class FixedClock(Clock):
    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def set_date(self, day: date) -> None:
        self.instant = datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)


class MemoryWorld:
    """In-memory stores with services wired the way the handlers wire them."""

    def __init__(self, clock: FixedClock) -> None:
        self.clock = clock
        self.conference = Conference(
            id=ConferenceId(value=uuid.uuid4()),
            slug="devconf-2025",
            name="DevConf 2025",
            currency=Currency(code="EUR"),
        )
        self.other_conference = Conference(
            id=ConferenceId(value=uuid.uuid4()),
            slug="other-2025",
            name="Other 2025",
        )
        self.fees = InMemoryFeeStore(lock_timeout=2.0)
        self.registrations = InMemoryRegistrationStore()
        self.conferences = InMemoryConferenceResolver(self.conference, self.other_conference)
        self.catalog = FeeCatalogService(self.fees, self.registrations, self.conferences)
        self.projections = FeeProjectionService(
            self.fees, self.registrations, self.conferences, clock
        )
        self.gate = AllocationGate(
            self.fees, self.registrations, self.conferences, clock, sleep=lambda _: None
        )

    @property
    def conference_ref(self) -> str:
        return str(self.conference.id)

    def add_fee(self, conference: Conference | None = None, **overrides):
        data = {
            "name": "Early Bird",
            "valid_from": date(2025, 1, 1),
            "valid_to": date(2025, 1, 31),
            "prices": PriceInput(price_net=Decimal("100"), price_gross=Decimal("100")),
            "is_active": True,
            "currency": "EUR",
            "capacity": None,
        }
        data.update(overrides)
        conference = conference or self.conference
        return self.catalog.create_fee(str(conference.id), FeeInput(**data))


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def world(clock: FixedClock) -> MemoryWorld:
    return MemoryWorld(clock)
