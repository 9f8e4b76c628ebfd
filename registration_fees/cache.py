"""Cache keys for the public fee list.

The list is cached under every reference a client may use for the
conference (its id and its slug) so both can be invalidated together.
"""

from uuid import UUID

from django.conf import settings
from django.core.cache import cache

PUBLIC_FEES_KEY = "registration_fees:public:{ref}"


def public_fees_key(conference_ref: str) -> str:
    """Key for a conference reference; UUIDs in any spelling share one key."""
    try:
        conference_ref = str(UUID(conference_ref))
    except ValueError:
        pass
    return PUBLIC_FEES_KEY.format(ref=conference_ref)


def get_public_fees(conference_ref: str):
    return cache.get(public_fees_key(conference_ref))


def set_public_fees(conference_ref: str, payload) -> None:
    cache.set(
        public_fees_key(conference_ref),
        payload,
        timeout=settings.REGISTRATION_FEES["PUBLIC_CACHE_TTL"],
    )


def invalidate_public_fees(*conference_refs: str) -> None:
    cache.delete_many([public_fees_key(ref) for ref in conference_refs if ref])
