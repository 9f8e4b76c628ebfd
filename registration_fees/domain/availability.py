"""Availability evaluation for registration fees.

``evaluate`` is a pure function: the same fee, instant and sold count always
produce the same verdict. Reasons are checked in a fixed precedence so that a
fee that is both inactive and sold out is reported as inactive.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from registration_fees.domain.models import FeeDefinition


class UnavailableReason(Enum):
    """Why a fee cannot be selected, in precedence order."""

    INACTIVE = "inactive"
    NOT_AVAILABLE_YET = "not_available_yet"
    EXPIRED = "expired"
    SOLD_OUT = "sold_out"


@dataclass(frozen=True)
class Availability:
    """Verdict for one fee at one instant."""

    reason: UnavailableReason | None = None

    @property
    def is_available(self) -> bool:
        return self.reason is None


AVAILABLE = Availability()


def as_calendar_date(now: date | datetime) -> date:
    """Return the calendar date fee windows are compared against.

    Aware datetimes are converted to UTC first; naive datetimes and dates are
    taken as-is.
    """
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date()
    return now


def is_sold_out(fee: FeeDefinition, sold_count: int) -> bool:
    return fee.capacity is not None and fee.capacity.is_exhausted_by(sold_count)


def _first_reason(fee: FeeDefinition, today: date, sold_count: int) -> UnavailableReason | None:
    match (fee.is_active, today < fee.valid_from, today > fee.valid_to, is_sold_out(fee, sold_count)):
        case (False, _, _, _):
            return UnavailableReason.INACTIVE
        case (True, True, _, _):
            return UnavailableReason.NOT_AVAILABLE_YET
        case (True, False, True, _):
            return UnavailableReason.EXPIRED
        case (True, False, False, True):
            return UnavailableReason.SOLD_OUT
        case _:
            return None


def evaluate(fee: FeeDefinition, now: date | datetime, sold_count: int) -> Availability:
    """Decide whether ``fee`` can be purchased at ``now`` given ``sold_count``.

    Window bounds are inclusive: a fee is available on both ``valid_from``
    and ``valid_to``.
    """
    reason = _first_reason(fee, as_calendar_date(now), sold_count)
    if reason is None:
        return AVAILABLE
    return Availability(reason=reason)

