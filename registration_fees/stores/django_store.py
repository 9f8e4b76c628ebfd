"""Django ORM implementations of the fee engine stores."""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, OperationalError, connection, transaction
from django.db.models import Count, Max
from django.utils import timezone

from conferences.models import Conference as ConferenceRow
from conferences.models import Registration
from registration_fees.domain import (
    Capacity,
    Conference,
    ConferenceId,
    Currency,
    FeeDefinition,
    FeeId,
    FeeTerms,
    PriceSnapshot,
)
from registration_fees.domain.errors import RegistrationConflictError, TransientConflictError
from registration_fees.models import RegistrationFee
from registration_fees.signals import fees_reordered
from registration_fees.stores.interfaces import ConferenceResolver, FeeStore, RegistrationStore


def fee_to_domain(row: RegistrationFee) -> FeeDefinition:
    return FeeDefinition(
        id=FeeId(value=row.id),
        conference_id=ConferenceId(value=row.conference_id),
        name=row.name,
        valid_from=row.valid_from,
        valid_to=row.valid_to,
        is_active=row.is_active,
        price_net=row.price_net,
        price_gross=row.price_gross,
        currency=Currency(code=row.currency),
        capacity=Capacity(value=row.capacity) if row.capacity is not None else None,
        display_order=row.display_order,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


TERM_COLUMNS = [
    "name",
    "valid_from",
    "valid_to",
    "is_active",
    "price_net",
    "price_gross",
    "currency",
    "capacity",
]


def _apply_terms(row: RegistrationFee, terms: FeeTerms) -> list[str]:
    """Copy terms onto the row and return the columns that were written."""
    row.name = terms.name
    row.valid_from = terms.valid_from
    row.valid_to = terms.valid_to
    row.is_active = terms.is_active
    row.price_net = terms.price_net
    row.price_gross = terms.price_gross
    row.currency = terms.currency.code
    row.capacity = terms.capacity.value if terms.capacity is not None else None
    if terms.display_order is None:
        return list(TERM_COLUMNS)
    row.display_order = terms.display_order
    return [*TERM_COLUMNS, "display_order"]


class DjangoFeeStore(FeeStore):
    """Relational fee store using Django ORM.

    ``lock_fee`` takes a ``SELECT ... FOR UPDATE`` row lock on the fee inside a
    transaction. On PostgreSQL the wait is bounded by ``lock_timeout``.
    """

    def __init__(self, lock_timeout_ms: int | None = None) -> None:
        if lock_timeout_ms is None:
            lock_timeout_ms = settings.REGISTRATION_FEES["LOCK_TIMEOUT_MS"]
        self._lock_timeout_ms = lock_timeout_ms

    def _scoped(self, conference_id: ConferenceId):
        return RegistrationFee.objects.filter(conference_id=conference_id.value)

    def list_fees(self, conference_id: ConferenceId, active_only: bool = False) -> list[FeeDefinition]:
        rows = self._scoped(conference_id).order_by("display_order", "created_at", "id")
        if active_only:
            rows = rows.filter(is_active=True)
        return [fee_to_domain(row) for row in rows]

    def get_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> FeeDefinition | None:
        row = self._scoped(conference_id).filter(pk=fee_id.value).first()
        return fee_to_domain(row) if row is not None else None

    def next_display_order(self, conference_id: ConferenceId) -> int:
        current = self._scoped(conference_id).aggregate(top=Max("display_order"))["top"]
        return 0 if current is None else current + 1

    def create_fee(self, conference_id: ConferenceId, terms: FeeTerms) -> FeeDefinition:
        row = RegistrationFee(conference_id=conference_id.value)
        _apply_terms(row, terms)
        row.save()
        return fee_to_domain(row)

    def update_fee(
        self, fee_id: FeeId, conference_id: ConferenceId, terms: FeeTerms
    ) -> FeeDefinition | None:
        with transaction.atomic():
            row = (
                self._scoped(conference_id)
                .select_for_update()
                .filter(pk=fee_id.value)
                .first()
            )
            if row is None:
                return None
            columns = _apply_terms(row, terms)
            row.save(update_fields=[*columns, "updated_at"])
        return fee_to_domain(row)

    def delete_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> bool:
        deleted, _ = self._scoped(conference_id).filter(pk=fee_id.value).delete()
        return deleted > 0

    def reorder_fees(self, conference_id: ConferenceId, fee_ids: Sequence[FeeId]) -> int:
        positions = {fee_id.value: index for index, fee_id in enumerate(fee_ids)}
        with transaction.atomic():
            rows = list(
                self._scoped(conference_id)
                .select_for_update()
                .filter(pk__in=list(positions))
            )
            now = timezone.now()
            for row in rows:
                row.display_order = positions[row.id]
                row.updated_at = now
            RegistrationFee.objects.bulk_update(rows, ["display_order", "updated_at"])
            fees_reordered.send(sender=RegistrationFee, conference_id=conference_id.value)
        return len(rows)

    @contextmanager
    def lock_fee(self, fee_id: FeeId, conference_id: ConferenceId) -> Iterator[FeeDefinition | None]:
        try:
            with transaction.atomic():
                self._bound_lock_wait()
                row = (
                    self._scoped(conference_id)
                    .select_for_update()
                    .filter(pk=fee_id.value)
                    .first()
                )
                yield fee_to_domain(row) if row is not None else None
        except OperationalError as exc:
            raise TransientConflictError(str(exc)) from exc

    def _bound_lock_wait(self) -> None:
        if connection.vendor != "postgresql":
            return
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT set_config('lock_timeout', %s, true)",
                [f"{self._lock_timeout_ms}ms"],
            )


class DjangoRegistrationStore(RegistrationStore):
    """Registrations ledger backed by the conferences app."""

    def _active(self):
        return Registration.objects.exclude(status=Registration.Status.CANCELLED)

    def count_active(self, fee_id: FeeId) -> int:
        return self._active().filter(registration_fee_id=fee_id.value).count()

    def count_active_by_fee(self, conference_id: ConferenceId) -> dict[FeeId, int]:
        rows = (
            self._active()
            .filter(
                registration_fee__isnull=False,
                registration_fee__conference_id=conference_id.value,
            )
            .values("registration_fee_id")
            .annotate(sold=Count("id"))
        )
        return {FeeId(value=row["registration_fee_id"]): row["sold"] for row in rows}

    def is_fee_referenced(self, fee_id: FeeId) -> bool:
        return Registration.objects.filter(registration_fee_id=fee_id.value).exists()

    def create_with_fee(
        self,
        conference_id: ConferenceId,
        fee_id: FeeId,
        price: PriceSnapshot,
        reference: str,
    ) -> str:
        try:
            with transaction.atomic():
                row = Registration.objects.create(
                    conference_id=conference_id.value,
                    registration_fee_id=fee_id.value,
                    reference=reference,
                    status=Registration.Status.CONFIRMED,
                    price_gross=price.price_gross,
                    currency=price.currency.code,
                )
        except IntegrityError as exc:
            raise RegistrationConflictError(reference) from exc
        return str(row.id)


class DjangoConferenceResolver(ConferenceResolver):
    """Resolves conferences by primary key or slug."""

    def resolve(self, conference_ref: str) -> Conference | None:
        try:
            lookup = {"pk": UUID(conference_ref)}
        except ValueError:
            lookup = {"slug": conference_ref}
        row = ConferenceRow.objects.filter(**lookup).first()
        if row is None:
            return None
        return Conference(
            id=ConferenceId(value=row.id),
            slug=row.slug,
            name=row.name,
            currency=Currency(code=row.currency) if row.currency else None,
            vat_percentage=row.vat_percentage,
        )
