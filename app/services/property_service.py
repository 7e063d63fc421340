# ================================
# PROPERTY SERVICE (services/property_service.py)
# ================================

from typing import Optional, List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging
import uuid

from app.models.business import Property
from app.models.profile import Profile
from app.schemas.property import PropertyCreate, InventorySnapshot
from app.schemas.notification import NotificationEvent
from app.core.exceptions import AppException, NotFound, Unauthorized, StorageFailure
from app.services.inventory_service import PropertyInventoryStore
from app.services.notification_service import property_new_event
from app.services.reservation_lifecycle import PropertyStatus, derive_property_status
from app.utils.audit import audit_logger

logger = logging.getLogger(__name__)

class PropertyService:
    """Service für Property-Verwaltung und Unit-Inventar"""

    @staticmethod
    def _require_admin(actor: Profile) -> None:
        if not actor.is_admin:
            raise Unauthorized("Admin access required")

    @staticmethod
    def _get_active_agent(db: Session, agent_id: uuid.UUID) -> Profile:
        agent = db.query(Profile).filter(Profile.id == agent_id).first()

        if not agent or not agent.is_agent or not agent.is_active:
            raise AppException("Agent not found or inactive", 400, "INVALID_AGENT")

        return agent

    @staticmethod
    def create_property(
        db: Session,
        data: PropertyCreate,
        actor: Profile
    ) -> Tuple[Property, List[NotificationEvent]]:
        """
        Create a listing. units_available defaults to units_total, status is
        derived from it. Returns the property and one 'property_new' event per
        active customer, to be dispatched after commit.
        """
        PropertyService._require_admin(actor)

        if data.agent_id:
            PropertyService._get_active_agent(db, data.agent_id)

        units_available = data.units_available
        if data.units_total is not None and units_available is None:
            units_available = data.units_total

        status = PropertyStatus.AVAILABLE
        if units_available is not None:
            status = derive_property_status(units_available)

        property = Property(
            id=uuid.uuid4(),
            name=data.name,
            location=data.location,
            price=data.price,
            description=data.description,
            agent_id=data.agent_id,
            units_total=data.units_total,
            units_available=units_available,
            status=status.value,
            version=1
        )

        try:
            db.add(property)

            audit_logger.log_business_event(
                db=db,
                action="PROPERTY_CREATED",
                user_id=actor.id,
                resource_type="property",
                resource_id=property.id,
                new_values={
                    "name": data.name,
                    "agent_id": data.agent_id,
                    "units_total": data.units_total,
                    "units_available": units_available
                }
            )

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create property: {e}", exc_info=True)
            raise StorageFailure("Could not create property")

        db.refresh(property)

        customer_ids = [
            row.id for row in db.query(Profile.id).filter(
                Profile.role == "customer",
                Profile.is_active == True
            ).all()
        ]
        events = [property_new_event(cid, property.id, property.name) for cid in customer_ids]

        logger.info(f"Property {property.id} created by {actor.id}, announcing to {len(events)} customers")

        return property, events

    @staticmethod
    def get_property(db: Session, property_id: uuid.UUID) -> Property:
        property = db.query(Property).filter(Property.id == property_id).first()
        if not property:
            raise NotFound("Property not found")
        return property

    @staticmethod
    def list_properties(
        db: Session,
        agent_id: Optional[uuid.UUID] = None
    ) -> List[Property]:
        """Newest first"""
        query = db.query(Property)

        if agent_id:
            query = query.filter(Property.agent_id == agent_id)

        return query.order_by(Property.created_at.desc()).all()

    @staticmethod
    def assign_agent(
        db: Session,
        property_id: uuid.UUID,
        agent_id: uuid.UUID,
        actor: Profile
    ) -> Property:
        """Set the handling agent; only affects reservations requested afterwards"""
        PropertyService._require_admin(actor)

        property = PropertyService.get_property(db, property_id)
        PropertyService._get_active_agent(db, agent_id)

        old_agent_id = property.agent_id
        property.agent_id = agent_id

        try:
            audit_logger.log_business_event(
                db=db,
                action="PROPERTY_AGENT_ASSIGNED",
                user_id=actor.id,
                resource_type="property",
                resource_id=property_id,
                old_values={"agent_id": old_agent_id},
                new_values={"agent_id": agent_id}
            )

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to assign agent to property {property_id}: {e}", exc_info=True)
            raise StorageFailure("Could not assign agent")

        db.refresh(property)

        logger.info(f"Property {property_id} assigned to agent {agent_id}")
        return property

    @staticmethod
    def override_inventory(
        db: Session,
        property_id: uuid.UUID,
        units_available: int,
        actor: Profile,
        units_total: Optional[int] = None
    ) -> InventorySnapshot:
        """Administrative correction of the unit counts (bounds and version checked by the store)"""
        PropertyService._require_admin(actor)

        snapshot = PropertyInventoryStore.get_inventory(db, property_id, lock=True)

        try:
            updated = PropertyInventoryStore.set_inventory(
                db,
                property_id,
                units_available=units_available,
                status=derive_property_status(units_available).value,
                expected_version=snapshot.version,
                units_total=units_total
            )

            audit_logger.log_business_event(
                db=db,
                action="PROPERTY_INVENTORY_OVERRIDDEN",
                user_id=actor.id,
                resource_type="property",
                resource_id=property_id,
                old_values={
                    "units_total": snapshot.units_total,
                    "units_available": snapshot.units_available
                },
                new_values={
                    "units_total": updated.units_total,
                    "units_available": updated.units_available
                }
            )

            db.commit()
        except AppException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to override inventory of property {property_id}: {e}", exc_info=True)
            raise StorageFailure("Could not update inventory")

        logger.info(
            f"Inventory of property {property_id} set to "
            f"{updated.units_available}/{updated.units_total} by {actor.id}"
        )
        return updated
