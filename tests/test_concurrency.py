# ================================
# CONCURRENT TRANSITION TESTS (test_concurrency.py)
# ================================

"""
Two confirmations racing for the last unit.

The race is forced deterministically: the first inventory read of the
"slow" confirmation lets a competing confirmation run to completion in a
second session and then hands back the stale snapshot it read before.
"""

import pytest

from app.config import settings
from app.core.exceptions import NoUnitsAvailable, ConcurrentModification
from app.models import Reservation
from app.services.inventory_service import PropertyInventoryStore
from app.services.reservation_lifecycle import ReservationStatus
from app.services.reservation_service import ReservationService

CONFIRMED = ReservationStatus.CONFIRMED


@pytest.fixture
def contested(db, customer, other_customer, make_property, future_time):
    """One free unit, two pending reservations for it"""
    property = make_property(units_total=1, units_available=1)
    slow = ReservationService.request_reservation(db, customer, property.id, future_time).reservation
    fast = ReservationService.request_reservation(db, other_customer, property.id, future_time).reservation
    return property, slow, fast


def interleave(monkeypatch, session_factory, competitor_id, actor_id, times=1):
    """Patch get_inventory so the first `times` reads race against a competing confirm"""
    original = PropertyInventoryStore.get_inventory
    state = {"raced": 0, "reads": 0}

    def racing_get_inventory(db, property_id, lock=False):
        state["reads"] += 1
        if state["raced"] >= times:
            return original(db, property_id, lock=lock)

        state["raced"] += 1
        stale = original(db, property_id, lock=lock)

        with session_factory() as other:
            from app.models import Profile
            actor = other.get(Profile, actor_id)
            ReservationService.transition_status(other, competitor_id, CONFIRMED, actor)

        return stale

    monkeypatch.setattr(PropertyInventoryStore, "get_inventory", staticmethod(racing_get_inventory))
    return state


class TestConcurrentConfirm:
    """Only one of two racing confirmations may consume the last unit."""

    def test_loser_sees_zero_and_is_rejected(
        self, db, agent, contested, session_factory, monkeypatch
    ):
        """The stale write loses the version check, the retry reads 0 and refuses."""
        property, slow, fast = contested
        state = interleave(monkeypatch, session_factory, fast.id, agent.id)

        with pytest.raises(NoUnitsAvailable):
            ReservationService.transition_status(db, slow.id, CONFIRMED, agent)

        # First read raced, the retry read fresh data
        assert state["reads"] >= 3

        monkeypatch.undo()
        snapshot = PropertyInventoryStore.get_inventory(db, property.id)
        assert snapshot.units_available == 0
        assert snapshot.status == "reserved"

        statuses = {
            r.id: r.status
            for r in db.query(Reservation).populate_existing().all()
        }
        assert statuses[fast.id] == "confirmed"
        assert statuses[slow.id] == "pending"

    def test_loser_under_clamp_policy_does_not_oversell_inventory(
        self, db, agent, contested, session_factory, monkeypatch
    ):
        """With clamp the loser is confirmed as oversold, inventory never goes below 0."""
        property, slow, fast = contested
        interleave(monkeypatch, session_factory, fast.id, agent.id)
        monkeypatch.setattr(settings, "OVERSELL_POLICY", "clamp")

        result = ReservationService.transition_status(db, slow.id, CONFIRMED, agent)

        assert result.oversold
        assert result.inventory is None

        snapshot = PropertyInventoryStore.get_inventory(db, property.id)
        assert snapshot.units_available == 0
        # Only the winner wrote the inventory
        assert snapshot.version == 2

    def test_gives_up_after_max_attempts(
        self, db, agent, customer, make_property, future_time, session_factory, monkeypatch
    ):
        """Losing every attempt ends in ConcurrentModification with nothing applied."""
        monkeypatch.setattr(settings, "TRANSITION_MAX_ATTEMPTS", 2)
        property = make_property(units_total=5)
        slow = ReservationService.request_reservation(db, customer, property.id, future_time).reservation

        original = PropertyInventoryStore.get_inventory

        def always_stale(db_, property_id, lock=False):
            stale = original(db_, property_id, lock=lock)
            # Someone else bumps the version after every read
            with session_factory() as other:
                fresh = original(other, property_id)
                PropertyInventoryStore.set_inventory(
                    other, property_id, fresh.units_available, fresh.status, expected_version=fresh.version
                )
                other.commit()
            return stale

        monkeypatch.setattr(PropertyInventoryStore, "get_inventory", staticmethod(always_stale))

        with pytest.raises(ConcurrentModification):
            ReservationService.transition_status(db, slow.id, CONFIRMED, agent)

        monkeypatch.undo()
        assert db.query(Reservation).filter_by(id=slow.id).populate_existing().one().status == "pending"
        assert PropertyInventoryStore.get_inventory(db, property.id).units_available == 5
