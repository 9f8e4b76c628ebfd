"""Derived fee usage.

sold_count is never stored; it is recomputed from the registrations ledger so
it cannot drift from the registrations that actually exist.
"""

from registration_fees.domain import ConferenceId, FeeId
from registration_fees.stores.interfaces import RegistrationStore


class UsageCounter:
    """Counts non-cancelled registrations per fee."""

    def __init__(self, registrations: RegistrationStore) -> None:
        self._registrations = registrations

    def sold_count(self, fee_id: FeeId) -> int:
        return self._registrations.count_active(fee_id)

    def sold_counts(self, conference_id: ConferenceId) -> dict[FeeId, int]:
        """Return counts for every fee of the conference in one ledger query.

        Fees without registrations are absent from the mapping.
        """
        return self._registrations.count_active_by_fee(conference_id)
