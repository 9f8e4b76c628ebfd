"""Allocation gate - the only path that commits a registrant to a fee.

Every reservation re-reads the fee and its usage under the fee's lock, so two
concurrent reservations can never both see the last free unit. Prices are
taken from the fee at commit time, never from what the client saw.
"""

import logging
import time
from collections.abc import Callable

from registration_fees.domain import (
    Conference,
    FeeId,
    PriceSnapshot,
    Reservation,
    evaluate,
)
from registration_fees.domain.errors import (
    AllocationError,
    FeeNotFoundError,
    FeeValidationError,
    TransientConflictError,
)
from registration_fees.services.clock import Clock
from registration_fees.services.tenancy import parse_fee_id, resolve_conference
from registration_fees.services.usage_counter import UsageCounter
from registration_fees.stores.interfaces import ConferenceResolver, FeeStore, RegistrationStore

logger = logging.getLogger(__name__)


class AllocationGate:
    """Serializes capacity accounting per fee."""

    def __init__(
        self,
        fees: FeeStore,
        registrations: RegistrationStore,
        conferences: ConferenceResolver,
        clock: Clock,
        max_attempts: int = 3,
        retry_backoff: float = 0.05,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._fees = fees
        self._registrations = registrations
        self._usage = UsageCounter(registrations)
        self._conferences = conferences
        self._clock = clock
        self._max_attempts = max_attempts
        self._retry_backoff = retry_backoff
        self._sleep = sleep

    def reserve(self, fee_ref: str, conference_ref: str, reference: str) -> Reservation:
        """Reserve one unit of a fee for the registration identified by ``reference``.

        Lock conflicts are retried up to ``max_attempts`` times. Business
        outcomes are final and never retried.

        Raises:
            InvalidFeeIdError: If the fee_ref is not a valid UUID.
            ConferenceNotFoundError: If the conference does not exist.
            FeeValidationError: If the reference is blank.
            FeeNotFoundError: If the fee does not belong to the conference.
            AllocationError: If the fee is unavailable at commit time.
            RegistrationConflictError: If the registration already holds a fee.
            TransientConflictError: If every attempt hit a lock conflict.
        """
        fee_id = parse_fee_id(fee_ref)
        conference = resolve_conference(self._conferences, conference_ref)
        reference = (reference or "").strip()
        if not reference:
            raise FeeValidationError("Registration reference is required", field="reference")

        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._reserve_once(fee_id, conference, reference)
            except TransientConflictError as exc:
                if attempt == self._max_attempts:
                    logger.error(
                        "Giving up reserving fee=%s after %d attempts: %s",
                        fee_id,
                        attempt,
                        exc.detail,
                    )
                    raise
                logger.warning(
                    "Transient conflict reserving fee=%s (attempt %d/%d): %s",
                    fee_id,
                    attempt,
                    self._max_attempts,
                    exc.detail,
                )
                self._sleep(self._retry_backoff * attempt)

        raise AssertionError("unreachable")

    def _reserve_once(self, fee_id: FeeId, conference: Conference, reference: str) -> Reservation:
        with self._fees.lock_fee(fee_id, conference.id) as fee:
            if fee is None:
                raise FeeNotFoundError(str(fee_id))

            now = self._clock.now()
            sold_count = self._usage.sold_count(fee_id)
            verdict = evaluate(fee, now, sold_count)
            if not verdict.is_available:
                logger.info(
                    "Reservation rejected: fee=%s reason=%s sold=%d",
                    fee_id,
                    verdict.reason.value,
                    sold_count,
                )
                raise AllocationError(verdict.reason)

            price = PriceSnapshot.of(fee)
            registration_id = self._registrations.create_with_fee(
                conference.id, fee.id, price, reference
            )

        logger.info(
            "Fee reserved: fee=%s registration=%s price=%s",
            fee_id,
            registration_id,
            fee.gross,
        )
        return Reservation(
            registration_id=registration_id,
            fee_id=fee_id,
            price=price,
            reserved_at=now,
        )
