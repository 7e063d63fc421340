# ================================
# PROPERTY INVENTORY STORE (services/inventory_service.py)
# ================================

from typing import Optional
from sqlalchemy.orm import Session
import logging
import uuid

from app.models.business import Property
from app.schemas.property import InventorySnapshot
from app.core.exceptions import NotFound, ConcurrentModification, InventoryOutOfBounds, InventoryNotTracked

logger = logging.getLogger(__name__)

class PropertyInventoryStore:
    """
    Storage for a property's unit counts.

    Writes are compare-and-swap on Property.version: a write only lands if
    nobody else wrote the row since the snapshot was taken. Bounds are
    checked here as well, so no caller can persist an out-of-range count.
    """

    @staticmethod
    def get_inventory(
        db: Session,
        property_id: uuid.UUID,
        lock: bool = False
    ) -> InventorySnapshot:
        """Read the current inventory; `lock` takes a row lock (SELECT ... FOR UPDATE)"""

        query = db.query(Property).filter(Property.id == property_id)
        if lock:
            query = query.with_for_update()

        # Always read the row from the database, not the identity map
        property = query.populate_existing().first()

        if not property:
            raise NotFound("Property not found")

        return InventorySnapshot(
            property_id=property.id,
            units_total=property.units_total,
            units_available=property.units_available,
            status=property.status,
            version=property.version
        )

    @staticmethod
    def set_inventory(
        db: Session,
        property_id: uuid.UUID,
        units_available: Optional[int],
        status: str,
        expected_version: int,
        units_total: Optional[int] = None
    ) -> InventorySnapshot:
        """
        Write new inventory values if the row is still at `expected_version`.

        `units_total` is only changed when given (administrative override).
        Does not commit; the caller owns the transaction.
        """
        values = {
            Property.units_available: units_available,
            Property.status: status,
            Property.version: expected_version + 1,
        }

        if units_total is None:
            current_total = db.query(Property.units_total).filter(Property.id == property_id).scalar()
        else:
            current_total = units_total
            values[Property.units_total] = units_total

        if units_available is not None:
            if current_total is None:
                raise InventoryNotTracked()
            if not 0 <= units_available <= current_total:
                raise InventoryOutOfBounds(units_available, current_total)

        updated = db.query(Property).filter(
            Property.id == property_id,
            Property.version == expected_version
        ).update(values, synchronize_session=False)

        if updated != 1:
            logger.warning(
                f"Inventory write lost race for property {property_id} at version {expected_version}"
            )
            raise ConcurrentModification("Property inventory changed concurrently")

        return InventorySnapshot(
            property_id=property_id,
            units_total=current_total,
            units_available=units_available,
            status=status,
            version=expected_version + 1
        )
