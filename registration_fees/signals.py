"""Django signals for cache invalidation.

The public fee list is dropped whenever a fee changes or a registration is
written, so a reservation shows up on the form on the next read. Invalidation
runs after commit so a concurrent reader cannot re-cache uncommitted state.
"""

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from conferences.models import Conference, Registration
from registration_fees import cache
from registration_fees.models import RegistrationFee

fees_reordered = Signal()


def _invalidate_conference(conference_id) -> None:
    slug = Conference.objects.filter(pk=conference_id).values_list("slug", flat=True).first()
    cache.invalidate_public_fees(str(conference_id), slug)


def _invalidate_on_commit(conference_id) -> None:
    transaction.on_commit(lambda: _invalidate_conference(conference_id), robust=True)


@receiver([post_save, post_delete], sender=RegistrationFee)
def invalidate_fee_cache(sender, instance, **kwargs):
    """Invalidate caches when a fee is saved or deleted."""
    _invalidate_on_commit(instance.conference_id)


@receiver(fees_reordered)
def invalidate_reordered_cache(sender, conference_id, **kwargs):
    """Invalidate caches after a bulk reorder, which bypasses post_save."""
    _invalidate_on_commit(conference_id)


@receiver([post_save, post_delete], sender=Registration)
def invalidate_registration_cache(sender, instance, **kwargs):
    """Invalidate caches when a registration is saved or deleted."""
    _invalidate_on_commit(instance.conference_id)


@receiver([post_save, post_delete], sender=Conference)
def invalidate_conference_cache(sender, instance, **kwargs):
    """Invalidate caches when a conference is saved or deleted."""
    cache.invalidate_public_fees(str(instance.pk), instance.slug)
