"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import AbstractContextManager

from registration_fees.domain import (
    Conference,
    ConferenceId,
    FeeDefinition,
    FeeId,
    FeeTerms,
    PriceSnapshot,
)


class FeeStore(ABC):
    """Interface for fee catalog persistence, always scoped by conference."""

    @abstractmethod
    def list_fees(self, conference_id: ConferenceId, active_only: bool = False) -> list[FeeDefinition]:
        """Return fees ordered by display_order, then created_at, then id."""
        ...

    @abstractmethod
    def get_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> FeeDefinition | None:
        """Return a fee of the conference, or None if it does not belong to it."""
        ...

    @abstractmethod
    def next_display_order(self, conference_id: ConferenceId) -> int:
        """Return the display_order that places a new fee at the end of the list."""
        ...

    @abstractmethod
    def create_fee(self, conference_id: ConferenceId, terms: FeeTerms) -> FeeDefinition:
        """Persist validated terms with display_order already resolved."""
        ...

    @abstractmethod
    def update_fee(
        self, fee_id: FeeId, conference_id: ConferenceId, terms: FeeTerms
    ) -> FeeDefinition | None:
        """Replace a fee's terms. Returns None if the fee is not in the conference."""
        ...

    @abstractmethod
    def delete_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> bool:
        """Physically delete a fee. Returns False if it is not in the conference."""
        ...

    @abstractmethod
    def reorder_fees(self, conference_id: ConferenceId, fee_ids: Sequence[FeeId]) -> int:
        """Set display_order to each id's index as one atomic unit.

        Ids that are not fees of the conference are skipped. Returns the
        number of fees updated.
        """
        ...

    @abstractmethod
    def lock_fee(
        self, fee_id: FeeId, conference_id: ConferenceId
    ) -> AbstractContextManager[FeeDefinition | None]:
        """Open an isolated scope holding the fee's capacity lock.

        Yields the freshly read fee (None if it is not in the conference).
        Registrations created inside the scope commit with it.

        Raises:
            TransientConflictError: If the lock cannot be acquired in time or
                the scope fails to commit because of a concurrent write.
        """
        ...


class RegistrationStore(ABC):
    """Interface for the registrations ledger the fee engine consumes."""

    @abstractmethod
    def count_active(self, fee_id: FeeId) -> int:
        """Return the number of non-cancelled registrations claiming the fee."""
        ...

    @abstractmethod
    def count_active_by_fee(self, conference_id: ConferenceId) -> dict[FeeId, int]:
        """Return non-cancelled registration counts for every fee of a conference."""
        ...

    @abstractmethod
    def is_fee_referenced(self, fee_id: FeeId) -> bool:
        """Check if any registration, cancelled or not, references the fee."""
        ...

    @abstractmethod
    def create_with_fee(
        self,
        conference_id: ConferenceId,
        fee_id: FeeId,
        price: PriceSnapshot,
        reference: str,
    ) -> str:
        """Create a confirmed registration linked to the fee and return its id.

        Raises:
            RegistrationConflictError: If ``reference`` is already registered.
        """
        ...


class ConferenceResolver(ABC):
    """Interface for resolving the tenant that scopes catalog operations."""

    @abstractmethod
    def resolve(self, conference_ref: str) -> Conference | None:
        """Return a conference by UUID or slug, or None if not found."""
        ...
