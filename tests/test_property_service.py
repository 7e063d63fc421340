# ================================
# PROPERTY & METRICS SERVICE TESTS (test_property_service.py)
# ================================

import pytest
import uuid
from decimal import Decimal

from app.core.exceptions import (
    AppException, Unauthorized, NotFound, InventoryOutOfBounds, InventoryNotTracked
)
from app.models import AuditLog
from app.schemas.property import PropertyCreate
from app.services.inventory_service import PropertyInventoryStore
from app.services.metrics_service import MetricsService
from app.services.notification_service import NotificationService
from app.services.property_service import PropertyService
from app.services.reservation_lifecycle import ReservationStatus
from app.services.reservation_service import ReservationService


class TestCreateProperty:

    def test_units_available_defaults_to_total(self, db, admin, agent):
        data = PropertyCreate(name="Sunset Villa", price=Decimal("1200.00"), agent_id=agent.id, units_total=3)

        property, _ = PropertyService.create_property(db, data, admin)

        assert property.units_total == 3
        assert property.units_available == 3
        assert property.status == "available"
        assert property.version == 1

    def test_zero_units_is_reserved(self, db, admin):
        property, _ = PropertyService.create_property(db, PropertyCreate(name="Full House", units_total=0), admin)

        assert property.status == "reserved"

    def test_untracked_property(self, db, admin):
        property, _ = PropertyService.create_property(db, PropertyCreate(name="Cabin"), admin)

        assert property.units_total is None
        assert property.units_available is None
        assert property.status == "available"

    def test_announces_to_active_customers(self, db, admin, customer, other_customer):
        property, events = PropertyService.create_property(db, PropertyCreate(name="Harbor Loft"), admin)

        assert {e.user_id for e in events} == {customer.id, other_customer.id}
        assert all(e.type == "property_new" and e.related_id == property.id for e in events)

    def test_audited(self, db, admin):
        property, _ = PropertyService.create_property(db, PropertyCreate(name="Cabin"), admin)

        entry = db.query(AuditLog).filter_by(action="PROPERTY_CREATED").one()
        assert entry.resource_id == property.id

    def test_admin_only(self, db, agent):
        with pytest.raises(Unauthorized):
            PropertyService.create_property(db, PropertyCreate(name="Cabin"), agent)

    def test_agent_must_be_agent(self, db, admin, customer):
        with pytest.raises(AppException) as exc_info:
            PropertyService.create_property(db, PropertyCreate(name="Cabin", agent_id=customer.id), admin)

        assert exc_info.value.error_code == "INVALID_AGENT"

    def test_schema_rejects_available_above_total(self):
        with pytest.raises(ValueError):
            PropertyCreate(name="Cabin", units_total=1, units_available=2)


class TestPropertyAdministration:

    def test_list_newest_first(self, db, make_property, agent, other_agent):
        first = make_property(name="First")
        second = make_property(name="Second", agent_id=other_agent.id)

        assert [p.id for p in PropertyService.list_properties(db)] == [second.id, first.id]
        assert [p.id for p in PropertyService.list_properties(db, agent_id=agent.id)] == [first.id]

    def test_assign_agent(self, db, admin, other_agent, make_property):
        property = make_property(agent_id=None)

        updated = PropertyService.assign_agent(db, property.id, other_agent.id, admin)

        assert updated.agent_id == other_agent.id

    def test_assign_inactive_agent_refused(self, db, admin, other_agent, make_property):
        property = make_property()
        other_agent.is_active = False
        db.commit()

        with pytest.raises(AppException):
            PropertyService.assign_agent(db, property.id, other_agent.id, admin)

    def test_assign_unknown_property(self, db, admin, agent):
        with pytest.raises(NotFound):
            PropertyService.assign_agent(db, uuid.uuid4(), agent.id, admin)

    def test_override_inventory(self, db, admin, make_property):
        property = make_property(units_total=2, units_available=2)

        snapshot = PropertyService.override_inventory(db, property.id, 0, admin)

        assert snapshot.units_available == 0
        assert snapshot.status == "reserved"
        assert snapshot.version == 2
        assert PropertyInventoryStore.get_inventory(db, property.id).status == "reserved"

    def test_override_with_new_total(self, db, admin, make_property):
        property = make_property(units_total=2)

        snapshot = PropertyService.override_inventory(db, property.id, 4, admin, units_total=6)

        assert (snapshot.units_available, snapshot.units_total) == (4, 6)

    def test_override_out_of_bounds(self, db, admin, make_property):
        property = make_property(units_total=2)

        with pytest.raises(InventoryOutOfBounds):
            PropertyService.override_inventory(db, property.id, 3, admin)

        assert PropertyInventoryStore.get_inventory(db, property.id).units_available == 2

    def test_override_untracked_property(self, db, admin, make_property):
        """Untracked properties need a total before units can be set."""
        property = make_property()

        with pytest.raises(InventoryNotTracked):
            PropertyService.override_inventory(db, property.id, 1, admin)

        snapshot = PropertyService.override_inventory(db, property.id, 1, admin, units_total=3)
        assert (snapshot.units_available, snapshot.units_total) == (1, 3)

    def test_override_admin_only(self, db, agent, make_property):
        property = make_property(units_total=2)

        with pytest.raises(Unauthorized):
            PropertyService.override_inventory(db, property.id, 1, agent)


class TestMetrics:

    @pytest.fixture
    def activity(self, db, agent, customer, other_customer, make_property, future_time):
        villa = make_property(name="Villa", units_total=2)
        loft = make_property(name="Loft", units_total=2)
        confirmed = ReservationService.request_reservation(db, customer, villa.id, future_time).reservation
        ReservationService.request_reservation(db, customer, loft.id, future_time)
        ReservationService.request_reservation(db, other_customer, villa.id, future_time)
        ReservationService.transition_status(db, confirmed.id, ReservationStatus.CONFIRMED, agent)

    def test_admin_metrics(self, db, activity):
        metrics = MetricsService.admin_metrics(db)

        assert metrics.total_properties == 2
        assert metrics.total_agents == 1
        assert metrics.reservations_this_month == 3
        assert metrics.conversion_rate == 33

    def test_agent_metrics(self, db, agent, activity):
        metrics = MetricsService.agent_metrics(db, agent)

        # One conversation per customer/property pair
        assert metrics.active_conversations == 3
        assert metrics.total_customers == 2
        assert metrics.pending_reservations == 2

    def test_customer_metrics(self, db, customer, notifier, activity):
        notifier.notify(customer.id, "property_new", "New Property")

        metrics = MetricsService.customer_metrics(db, customer)

        assert metrics.active_reservations == 2
        assert metrics.conversations == 2
        assert metrics.unread_notifications == 1
        assert NotificationService.list_notifications(db, customer)[1] == 1

    def test_empty_admin_metrics(self, db):
        metrics = MetricsService.admin_metrics(db)

        assert metrics.reservations_this_month == 0
        assert metrics.conversion_rate == 0
