"""In-process implementations of the fee engine stores.

Thread-safe, so they can stand in for the relational stores when exercising
concurrent reservations without a database server.
"""

import itertools
import threading
import uuid
from collections import defaultdict
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from registration_fees.domain import (
    Conference,
    ConferenceId,
    FeeDefinition,
    FeeId,
    FeeTerms,
    PriceSnapshot,
)
from registration_fees.domain.errors import RegistrationConflictError, TransientConflictError
from registration_fees.stores.interfaces import ConferenceResolver, FeeStore, RegistrationStore


class InMemoryFeeStore(FeeStore):
    """Dictionary-backed fee catalog with one lock per fee."""

    def __init__(self, lock_timeout: float = 5.0) -> None:
        self._lock_timeout = lock_timeout
        self._catalog_lock = threading.RLock()
        self._fees: dict[FeeId, FeeDefinition] = {}
        self._fee_locks: defaultdict[FeeId, threading.Lock] = defaultdict(threading.Lock)
        self._insertion = itertools.count()
        self._inserted_at: dict[FeeId, int] = {}

    def _sort_key(self, fee: FeeDefinition):
        return (fee.display_order, fee.created_at, self._inserted_at[fee.id], str(fee.id))

    def list_fees(self, conference_id: ConferenceId, active_only: bool = False) -> list[FeeDefinition]:
        with self._catalog_lock:
            fees = [fee for fee in self._fees.values() if fee.conference_id == conference_id]
        if active_only:
            fees = [fee for fee in fees if fee.is_active]
        return sorted(fees, key=self._sort_key)

    def get_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> FeeDefinition | None:
        with self._catalog_lock:
            fee = self._fees.get(fee_id)
        if fee is None or fee.conference_id != conference_id:
            return None
        return fee

    def next_display_order(self, conference_id: ConferenceId) -> int:
        orders = [fee.display_order for fee in self.list_fees(conference_id)]
        return max(orders) + 1 if orders else 0

    def create_fee(self, conference_id: ConferenceId, terms: FeeTerms) -> FeeDefinition:
        now = datetime.now(timezone.utc)
        fee = FeeDefinition(
            id=FeeId(value=uuid.uuid4()),
            conference_id=conference_id,
            name=terms.name,
            valid_from=terms.valid_from,
            valid_to=terms.valid_to,
            is_active=terms.is_active,
            price_net=terms.price_net,
            price_gross=terms.price_gross,
            currency=terms.currency,
            capacity=terms.capacity,
            display_order=terms.display_order or 0,
            created_at=now,
            updated_at=now,
        )
        with self._catalog_lock:
            self._fees[fee.id] = fee
            self._inserted_at[fee.id] = next(self._insertion)
        return fee

    def update_fee(
        self, fee_id: FeeId, conference_id: ConferenceId, terms: FeeTerms
    ) -> FeeDefinition | None:
        with self._catalog_lock:
            current = self.get_fee(fee_id, conference_id)
            if current is None:
                return None
            updated = replace(
                current,
                name=terms.name,
                valid_from=terms.valid_from,
                valid_to=terms.valid_to,
                is_active=terms.is_active,
                price_net=terms.price_net,
                price_gross=terms.price_gross,
                currency=terms.currency,
                capacity=terms.capacity,
                display_order=(
                    terms.display_order
                    if terms.display_order is not None
                    else current.display_order
                ),
                updated_at=max(current.updated_at, datetime.now(timezone.utc)),
            )
            self._fees[fee_id] = updated
        return updated

    def delete_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> bool:
        with self._catalog_lock:
            if self.get_fee(fee_id, conference_id) is None:
                return False
            del self._fees[fee_id]
        return True

    def reorder_fees(self, conference_id: ConferenceId, fee_ids: Sequence[FeeId]) -> int:
        with self._catalog_lock:
            now = datetime.now(timezone.utc)
            staged = {}
            for index, fee_id in enumerate(fee_ids):
                fee = self.get_fee(fee_id, conference_id)
                if fee is not None:
                    staged[fee_id] = replace(fee, display_order=index, updated_at=now)
            self._fees.update(staged)
        return len(staged)

    @contextmanager
    def lock_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> Iterator[FeeDefinition | None]:
        with self._catalog_lock:
            lock = self._fee_locks[fee_id]
        if not lock.acquire(timeout=self._lock_timeout):
            raise TransientConflictError(f"Timed out waiting for fee {fee_id}")
        try:
            yield self.get_fee(fee_id, conference_id)
        finally:
            lock.release()


@dataclass
class _LedgerEntry:
    id: str
    conference_id: ConferenceId
    fee_id: FeeId
    reference: str
    status: str
    price: PriceSnapshot


class InMemoryRegistrationStore(RegistrationStore):
    """List-backed registrations ledger."""

    CANCELLED = "cancelled"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[_LedgerEntry] = []

    def count_active(self, fee_id: FeeId) -> int:
        with self._lock:
            return sum(
                1 for e in self._entries if e.fee_id == fee_id and e.status != self.CANCELLED
            )

    def count_active_by_fee(self, conference_id: ConferenceId) -> dict[FeeId, int]:
        counts: dict[FeeId, int] = {}
        with self._lock:
            for entry in self._entries:
                if entry.conference_id == conference_id and entry.status != self.CANCELLED:
                    counts[entry.fee_id] = counts.get(entry.fee_id, 0) + 1
        return counts

    def is_fee_referenced(self, fee_id: FeeId) -> bool:
        with self._lock:
            return any(e.fee_id == fee_id for e in self._entries)

    def create_with_fee(
        self,
        conference_id: ConferenceId,
        fee_id: FeeId,
        price: PriceSnapshot,
        reference: str,
    ) -> str:
        with self._lock:
            if any(e.reference == reference for e in self._entries):
                raise RegistrationConflictError(reference)
            entry = _LedgerEntry(
                id=str(uuid.uuid4()),
                conference_id=conference_id,
                fee_id=fee_id,
                reference=reference,
                status="confirmed",
                price=price,
            )
            self._entries.append(entry)
        return entry.id

    def cancel(self, reference: str) -> None:
        with self._lock:
            for entry in self._entries:
                if entry.reference == reference:
                    entry.status = self.CANCELLED


class InMemoryConferenceResolver(ConferenceResolver):
    """Resolves conferences registered with ``add``."""

    def __init__(self, *conferences: Conference) -> None:
        self._conferences = list(conferences)

    def add(self, conference: Conference) -> None:
        self._conferences.append(conference)

    def resolve(self, conference_ref: str) -> Conference | None:
        for conference in self._conferences:
            if conference_ref in (str(conference.id), conference.slug):
                return conference
        return None
