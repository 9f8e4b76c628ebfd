"""Conference scoping and identifier parsing shared by the fee services."""

from registration_fees.domain import Conference, FeeId
from registration_fees.domain.errors import ConferenceNotFoundError, InvalidFeeIdError
from registration_fees.stores.interfaces import ConferenceResolver


def resolve_conference(resolver: ConferenceResolver, conference_ref: str) -> Conference:
    """Return the conference for an id or slug.

    Raises:
        ConferenceNotFoundError: If nothing matches.
    """
    conference = resolver.resolve(conference_ref)
    if conference is None:
        raise ConferenceNotFoundError(conference_ref)
    return conference


def parse_fee_id(fee_ref: str) -> FeeId:
    try:
        return FeeId.from_string(fee_ref)
    except (ValueError, TypeError, AttributeError):
        raise InvalidFeeIdError() from None
