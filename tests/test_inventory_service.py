# ================================
# INVENTORY STORE TESTS (test_inventory_service.py)
# ================================

import pytest
import uuid

from app.core.exceptions import NotFound, ConcurrentModification, InventoryOutOfBounds, InventoryNotTracked
from app.models import Property
from app.services.inventory_service import PropertyInventoryStore


class TestGetInventory:

    def test_reads_snapshot(self, db, make_property):
        """Snapshot mirrors the stored row."""
        property = make_property(units_total=3, units_available=2)

        snapshot = PropertyInventoryStore.get_inventory(db, property.id)

        assert snapshot.property_id == property.id
        assert snapshot.units_total == 3
        assert snapshot.units_available == 2
        assert snapshot.status == "available"
        assert snapshot.version == 1
        assert snapshot.tracks_inventory

    def test_locked_read(self, db, make_property):
        """lock=True works on backends without FOR UPDATE as well."""
        property = make_property(units_total=1)

        snapshot = PropertyInventoryStore.get_inventory(db, property.id, lock=True)

        assert snapshot.units_available == 1

    def test_unknown_property(self, db):
        with pytest.raises(NotFound):
            PropertyInventoryStore.get_inventory(db, uuid.uuid4())


class TestSetInventory:

    def test_write_bumps_version(self, db, make_property):
        """A write at the current version lands and bumps the version."""
        property = make_property(units_total=2)

        updated = PropertyInventoryStore.set_inventory(
            db, property.id, units_available=1, status="available", expected_version=1
        )
        db.commit()

        assert updated.version == 2
        stored = PropertyInventoryStore.get_inventory(db, property.id)
        assert stored.units_available == 1
        assert stored.version == 2

    def test_stale_version_is_rejected(self, db, make_property):
        """Writing with an outdated version raises and changes nothing."""
        property = make_property(units_total=2)
        PropertyInventoryStore.set_inventory(db, property.id, 1, "available", expected_version=1)
        db.commit()

        with pytest.raises(ConcurrentModification):
            PropertyInventoryStore.set_inventory(db, property.id, 0, "reserved", expected_version=1)
        db.rollback()

        stored = PropertyInventoryStore.get_inventory(db, property.id)
        assert stored.units_available == 1
        assert stored.version == 2

    @pytest.mark.parametrize("units_available", [-1, 3])
    def test_out_of_bounds_is_rejected(self, db, make_property, units_available):
        """Counts outside [0, units_total] never reach the database."""
        property = make_property(units_total=2)

        with pytest.raises(InventoryOutOfBounds) as exc_info:
            PropertyInventoryStore.set_inventory(db, property.id, units_available, "available", expected_version=1)

        assert exc_info.value.status_code == 422
        assert PropertyInventoryStore.get_inventory(db, property.id).units_available == 2

    def test_total_override(self, db, make_property):
        """units_total can be changed together with units_available."""
        property = make_property(units_total=2)

        updated = PropertyInventoryStore.set_inventory(
            db, property.id, units_available=4, status="available", expected_version=1, units_total=5
        )
        db.commit()

        assert updated.units_total == 5
        stored = db.query(Property).filter(Property.id == property.id).populate_existing().one()
        assert stored.units_total == 5
        assert stored.units_available == 4

    def test_available_requires_total(self, db, make_property):
        """An untracked property cannot get a unit count without a total."""
        property = make_property()

        with pytest.raises(InventoryNotTracked) as exc_info:
            PropertyInventoryStore.set_inventory(db, property.id, 1, "available", expected_version=1)

        assert exc_info.value.error_code == "INVENTORY_NOT_TRACKED"
        assert "does not track units" in exc_info.value.detail
