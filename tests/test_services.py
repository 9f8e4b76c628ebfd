"""Unit tests for the fee catalog and projection services.

These test error handling and domain error mapping against in-memory stores.
Run with: pytest tests/test_services.py -v
"""

import random
import threading
from datetime import date
from decimal import Decimal

import pytest

from registration_fees.domain import Capacity, UnavailableReason
from registration_fees.domain.errors import (
    ConferenceNotFoundError,
    FeeNotFoundError,
    FeeValidationError,
    InvalidFeeIdError,
)
from registration_fees.domain.pricing import PriceInput
from registration_fees.services import FeeRemoval


def reorder_after_read(world, monkeypatch, fee_ids):
    """Commit a reorder right after the next fee read, once."""
    read_fee = world.fees.get_fee
    fired = []

    def read_then_reorder(fee_id, conference_id):
        fee = read_fee(fee_id, conference_id)
        if not fired:
            fired.append(True)
            world.fees.reorder_fees(world.conference.id, fee_ids)
        return fee

    monkeypatch.setattr(world.fees, "get_fee", read_then_reorder)


class TestCreateFee:
    """Tests for FeeCatalogService.create_fee."""

    def test_first_fee_gets_order_zero_and_next_goes_last(self, world):
        first = world.add_fee(name="Early Bird")
        second = world.add_fee(name="Regular")
        assert (first.display_order, second.display_order) == (0, 1)

    def test_explicit_display_order_is_kept(self, world):
        world.add_fee(name="A")
        fee = world.add_fee(name="B", display_order=7)
        assert fee.display_order == 7
        assert world.add_fee(name="C").display_order == 8

    def test_name_is_trimmed(self, world):
        assert world.add_fee(name="  Student  ").name == "Student"

    def test_conference_currency_wins(self, world):
        fee = world.add_fee(currency="USD")
        assert fee.currency.code == "EUR"

    def test_submitted_currency_used_when_conference_has_none(self, world):
        fee = world.add_fee(conference=world.other_conference, currency="usd")
        assert fee.currency.code == "USD"

    def test_bad_currency_rejected(self, world):
        with pytest.raises(FeeValidationError):
            world.add_fee(conference=world.other_conference, currency="US")

    def test_inverted_window_rejected(self, world):
        with pytest.raises(FeeValidationError):
            world.add_fee(valid_from=date(2025, 2, 1), valid_to=date(2025, 1, 1))

    def test_gross_below_net_rejected(self, world):
        with pytest.raises(FeeValidationError):
            world.add_fee(prices=PriceInput(price_net=Decimal("100"), price_gross=Decimal("90")))

    def test_negative_capacity_rejected(self, world):
        with pytest.raises(FeeValidationError):
            world.add_fee(capacity=-1)

    def test_nothing_is_stored_on_validation_error(self, world):
        with pytest.raises(FeeValidationError):
            world.add_fee(capacity=-1)
        assert world.catalog.list_fees(world.conference_ref) == []

    def test_unknown_conference(self, world):
        with pytest.raises(ConferenceNotFoundError):
            world.catalog.list_fees("no-such-conference")

    def test_conference_resolved_by_slug(self, world):
        world.add_fee()
        assert len(world.catalog.list_fees("devconf-2025")) == 1


class TestUpdateFee:
    """Tests for FeeCatalogService.update_fee."""

    def test_partial_update(self, world):
        fee = world.add_fee(capacity=10)
        updated = world.catalog.update_fee(
            str(fee.id), world.conference_ref, {"name": "Late", "capacity": None}
        )
        assert updated.name == "Late"
        assert updated.capacity is None
        assert updated.valid_from == fee.valid_from
        assert updated.updated_at >= fee.updated_at

    def test_price_update_uses_vat(self, world):
        fee = world.add_fee()
        updated = world.catalog.update_fee(
            str(fee.id),
            world.conference_ref,
            {"price_net": Decimal("100"), "vat_percentage": Decimal("25")},
        )
        assert (updated.price_net, updated.price_gross) == (Decimal("100.00"), Decimal("125.00"))

    def test_update_is_revalidated(self, world):
        fee = world.add_fee()
        with pytest.raises(FeeValidationError):
            world.catalog.update_fee(
                str(fee.id), world.conference_ref, {"valid_to": date(2024, 12, 1)}
            )
        assert world.fees.get_fee(fee.id, fee.conference_id).valid_to == date(2025, 1, 31)

    def test_other_conference_cannot_update(self, world):
        fee = world.add_fee(name="Early Bird")
        with pytest.raises(FeeNotFoundError):
            world.catalog.update_fee(
                str(fee.id), str(world.other_conference.id), {"name": "Hijacked"}
            )
        assert world.fees.get_fee(fee.id, fee.conference_id).name == "Early Bird"

    def test_malformed_fee_id(self, world):
        with pytest.raises(InvalidFeeIdError):
            world.catalog.update_fee("nope", world.conference_ref, {"name": "x"})

    def test_reorder_committed_mid_update_is_kept(self, world, monkeypatch):
        """A reorder landing between the update's read and write survives it."""
        a = world.add_fee(name="A")
        b = world.add_fee(name="B")
        reorder_after_read(world, monkeypatch, [b.id, a.id])

        world.catalog.update_fee(str(a.id), world.conference_ref, {"name": "A renamed"})

        fees = world.catalog.list_fees(world.conference_ref)
        assert [(f.name, f.display_order) for f in fees] == [("B", 0), ("A renamed", 1)]

    def test_explicit_display_order_is_applied(self, world):
        fee = world.add_fee()
        updated = world.catalog.update_fee(str(fee.id), world.conference_ref, {"display_order": 4})
        assert updated.display_order == 4


class TestReorderFees:
    """Tests for FeeCatalogService.reorder_fees."""

    def test_reorder_assigns_indexes(self, world):
        a = world.add_fee(name="A")
        b = world.add_fee(name="B")
        c = world.add_fee(name="C")

        world.catalog.reorder_fees(world.conference_ref, [str(c.id), str(a.id), str(b.id)])

        fees = world.catalog.list_fees(world.conference_ref)
        assert [(f.name, f.display_order) for f in fees] == [("C", 0), ("A", 1), ("B", 2)]

    def test_foreign_and_unknown_ids_are_ignored(self, world):
        a = world.add_fee(name="A")
        b = world.add_fee(name="B")
        foreign = world.add_fee(conference=world.other_conference, name="Foreign", display_order=5)
        unknown = "0b8c1f4e-0000-4000-8000-000000000000"

        updated = world.catalog.reorder_fees(
            world.conference_ref, [str(b.id), str(foreign.id), unknown, str(a.id)]
        )

        assert updated == 2
        assert world.fees.get_fee(foreign.id, foreign.conference_id).display_order == 5
        names = [f.name for f in world.catalog.list_fees(world.conference_ref)]
        assert names == ["B", "A"]

    def test_empty_list_rejected(self, world):
        with pytest.raises(FeeValidationError):
            world.catalog.reorder_fees(world.conference_ref, [])

    def test_duplicates_rejected(self, world):
        a = world.add_fee()
        with pytest.raises(FeeValidationError):
            world.catalog.reorder_fees(world.conference_ref, [str(a.id), str(a.id)])

    def test_malformed_ids_rejected(self, world):
        with pytest.raises(FeeValidationError):
            world.catalog.reorder_fees(world.conference_ref, ["not-a-uuid"])

    def test_readers_never_see_a_partial_reorder(self, world):
        """Every list taken during reorders shows display orders 0..n-1 once each."""
        fee_refs = [str(world.add_fee(name=f"Fee {i}").id) for i in range(6)]
        done = threading.Event()
        snapshots = []

        def read():
            while not done.is_set():
                fees = world.catalog.list_fees(world.conference_ref)
                snapshots.append(sorted(f.display_order for f in fees))

        reader = threading.Thread(target=read)
        reader.start()
        shuffler = random.Random(7)
        try:
            for _ in range(200):
                shuffler.shuffle(fee_refs)
                world.catalog.reorder_fees(world.conference_ref, fee_refs)
        finally:
            done.set()
            reader.join()

        assert snapshots
        assert all(orders == list(range(6)) for orders in snapshots)


class TestDeleteFee:
    """Tests for FeeCatalogService.delete_fee."""

    def test_unreferenced_fee_is_deleted(self, world):
        fee = world.add_fee()
        assert world.catalog.delete_fee(str(fee.id), world.conference_ref) is FeeRemoval.DELETED
        assert world.catalog.list_fees(world.conference_ref) == []

    def test_referenced_fee_is_deactivated(self, world):
        fee = world.add_fee()
        world.gate.reserve(str(fee.id), world.conference_ref, "reg-1")

        removal = world.catalog.delete_fee(str(fee.id), world.conference_ref)

        assert removal is FeeRemoval.DEACTIVATED
        assert world.fees.get_fee(fee.id, fee.conference_id).is_active is False

    def test_cancelled_registrations_still_protect_the_fee(self, world):
        fee = world.add_fee()
        world.gate.reserve(str(fee.id), world.conference_ref, "reg-1")
        world.registrations.cancel("reg-1")
        removal = world.catalog.delete_fee(str(fee.id), world.conference_ref)
        assert removal is FeeRemoval.DEACTIVATED

    def test_deactivation_keeps_concurrent_reorder(self, world, monkeypatch):
        a = world.add_fee(name="A")
        b = world.add_fee(name="B")
        world.gate.reserve(str(a.id), world.conference_ref, "reg-1")
        reorder_after_read(world, monkeypatch, [b.id, a.id])

        world.catalog.delete_fee(str(a.id), world.conference_ref)

        fees = world.catalog.list_fees(world.conference_ref)
        assert [(f.name, f.display_order, f.is_active) for f in fees] == [
            ("B", 0, True),
            ("A", 1, False),
        ]

    def test_other_conference_cannot_delete(self, world):
        fee = world.add_fee()
        with pytest.raises(FeeNotFoundError):
            world.catalog.delete_fee(str(fee.id), str(world.other_conference.id))


class TestListFees:
    """Tests for catalog ordering."""

    def test_ties_broken_by_creation(self, world):
        first = world.add_fee(name="First", display_order=0)
        second = world.add_fee(name="Second", display_order=0)
        fees = world.catalog.list_fees(world.conference_ref)
        assert [f.id for f in fees] == [first.id, second.id]

    def test_active_only(self, world):
        world.add_fee(name="On")
        world.add_fee(name="Off", is_active=False)
        fees = world.catalog.list_fees(world.conference_ref, active_only=True)
        assert [f.name for f in fees] == ["On"]


class TestProjections:
    """Tests for FeeProjectionService."""

    def test_form_hides_inactive_and_disables_others(self, world):
        world.add_fee(name="Open")
        world.add_fee(name="Hidden", is_active=False)
        world.add_fee(name="Future", valid_from=date(2025, 3, 1), valid_to=date(2025, 3, 31))
        world.add_fee(name="Past", valid_from=date(2024, 1, 1), valid_to=date(2024, 12, 31))

        options = world.projections.list_for_form(world.conference_ref)

        assert [(o.name, o.is_available, o.disabled_reason) for o in options] == [
            ("Open", True, None),
            ("Future", False, UnavailableReason.NOT_AVAILABLE_YET),
            ("Past", False, UnavailableReason.EXPIRED),
        ]

    def test_form_reports_usage(self, world):
        fee = world.add_fee(capacity=2)
        world.gate.reserve(str(fee.id), world.conference_ref, "reg-1")
        world.gate.reserve(str(fee.id), world.conference_ref, "reg-2")
        world.registrations.cancel("reg-2")

        [option] = world.projections.list_for_form(world.conference_ref)

        assert option.sold_count == 1
        assert option.capacity == Capacity(value=2)
        assert option.is_available

    def test_admin_includes_inactive_and_sold_out_flag(self, world):
        full = world.add_fee(name="Full", capacity=1)
        world.add_fee(name="Off", is_active=False)
        world.gate.reserve(str(full.id), world.conference_ref, "reg-1")

        rows = world.projections.list_for_admin(world.conference_ref)

        assert [(r.fee.name, r.sold_count, r.is_sold_out) for r in rows] == [
            ("Full", 1, True),
            ("Off", 0, False),
        ]

    def test_public_currency_falls_back_to_conference(self, world):
        fee_list = world.projections.get_public_fees(world.conference_ref)
        assert fee_list.fees == ()
        assert fee_list.currency.code == "EUR"

    def test_public_currency_falls_back_to_default(self, world):
        fee_list = world.projections.get_public_fees(str(world.other_conference.id))
        assert fee_list.currency.code == "EUR"

    def test_public_currency_from_first_fee(self, world):
        world.add_fee(conference=world.other_conference, currency="GBP")
        fee_list = world.projections.get_public_fees("other-2025")
        assert fee_list.currency.code == "GBP"
