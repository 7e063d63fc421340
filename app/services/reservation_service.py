# ================================
# RESERVATION SERVICE (services/reservation_service.py)
# ================================

from typing import Optional, List
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging
import uuid

from app.config import settings
from app.models.business import (
    Reservation, ReservationStatusHistory, Property, Conversation, ACTIVE_RESERVATION_INDEX
)
from app.models.profile import Profile
from app.schemas.property import InventorySnapshot
from app.schemas.notification import NotificationEvent
from app.core.exceptions import (
    AppException, DuplicateActiveReservation, PropertyUnassigned, Unauthorized,
    CannotDeletePending, NotFound, StorageFailure, ConcurrentModification
)
from app.services.inventory_service import PropertyInventoryStore
from app.services.notification_service import (
    reservation_pending_event, reservation_confirmed_event, reservation_cancelled_event,
    reservation_withdrawn_event
)
from app.services.reservation_lifecycle import (
    ReservationStatus, OversellPolicy, ACTIVE_STATUSES, ADMIN_ONLY_TARGETS, CUSTOMER_TARGETS,
    validate_transition, plan_inventory
)
from app.utils.audit import audit_logger

logger = logging.getLogger(__name__)

def _violates_active_reservation_index(error: IntegrityError) -> bool:
    """True if the insert collided with another active reservation of the customer"""
    diag = getattr(error.orig, "diag", None)
    if diag is not None and getattr(diag, "constraint_name", None):
        return diag.constraint_name == ACTIVE_RESERVATION_INDEX

    message = str(error.orig)
    # SQLite names the columns instead of the index
    return (
        ACTIVE_RESERVATION_INDEX in message
        or "UNIQUE constraint failed: reservations.customer_id, reservations.property_id" in message
    )

class ReservationRequestResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    reservation: Reservation
    conversation_id: uuid.UUID
    events: List[NotificationEvent] = []

class TransitionResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    reservation: Reservation
    inventory: Optional[InventorySnapshot] = None  # set only when inventory changed
    oversold: bool = False
    events: List[NotificationEvent] = []

class ReservationService:
    """
    Reservation lifecycle: viewing requests, status transitions and their
    inventory side effects, deletion and listings.

    Notifications are returned as events, never written here; the caller
    hands them to the Notifier once the transaction has committed.
    """

    @staticmethod
    def request_reservation(
        db: Session,
        customer: Profile,
        property_id: uuid.UUID,
        reservation_time: datetime,
        notes: Optional[str] = None
    ) -> ReservationRequestResult:
        """Create a pending viewing request (inventory is untouched)"""

        if not customer.is_customer:
            raise Unauthorized("Only customers can request viewings")

        property = db.query(Property).filter(Property.id == property_id).first()
        if not property:
            raise NotFound("Property not found")

        if not property.agent_id:
            raise PropertyUnassigned()

        existing_active = db.query(Reservation).filter(
            Reservation.customer_id == customer.id,
            Reservation.property_id == property_id,
            Reservation.status.in_([s.value for s in ACTIVE_STATUSES])
        ).first()

        if existing_active:
            raise DuplicateActiveReservation()

        try:
            reservation = Reservation(
                id=uuid.uuid4(),
                customer_id=customer.id,
                property_id=property_id,
                agent_id=property.agent_id,
                reservation_time=reservation_time,
                status=ReservationStatus.PENDING.value,
                notes=notes
            )
            db.add(reservation)

            db.add(ReservationStatusHistory(
                reservation_id=reservation.id,
                from_status=None,
                to_status=ReservationStatus.PENDING.value,
                changed_by=customer.id,
                notes="Reservation requested"
            ))

            conversation = ReservationService._ensure_conversation(
                db, customer.id, property.agent_id, property_id
            )

            audit_logger.log_business_event(
                db=db,
                action="RESERVATION_CREATED",
                user_id=customer.id,
                resource_type="reservation",
                resource_id=reservation.id,
                new_values={
                    "property_id": property_id,
                    "agent_id": property.agent_id,
                    "reservation_time": reservation_time,
                    "status": ReservationStatus.PENDING.value
                }
            )

            db.commit()

        except IntegrityError as e:
            db.rollback()
            if _violates_active_reservation_index(e):
                # Lost the race against a parallel request by the same customer
                raise DuplicateActiveReservation()
            logger.error(f"Integrity error while creating reservation: {e}", exc_info=True)
            raise StorageFailure("Could not create reservation")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create reservation: {e}", exc_info=True)
            raise StorageFailure("Could not create reservation")

        db.refresh(reservation)

        logger.info(f"Reservation {reservation.id} requested by {customer.id} for property {property_id}")

        return ReservationRequestResult(
            reservation=reservation,
            conversation_id=conversation.id,
            events=[reservation_pending_event(
                customer.id, reservation.id, property.name, reservation_time
            )]
        )

    @staticmethod
    def _ensure_conversation(
        db: Session,
        customer_id: uuid.UUID,
        agent_id: uuid.UUID,
        property_id: uuid.UUID
    ) -> Conversation:
        """Reuse the customer/agent/property conversation or open a new one"""
        conversation = db.query(Conversation).filter(
            Conversation.customer_id == customer_id,
            Conversation.agent_id == agent_id,
            Conversation.property_id == property_id
        ).first()

        if conversation:
            return conversation

        conversation = Conversation(
            id=uuid.uuid4(),
            customer_id=customer_id,
            agent_id=agent_id,
            property_id=property_id,
            status="active",
            last_message_time=datetime.now(timezone.utc)
        )
        db.add(conversation)
        return conversation

    @staticmethod
    def _authorize_transition(actor: Profile, reservation: Reservation, new_status: ReservationStatus) -> None:
        if actor.is_admin:
            return

        if actor.is_customer:
            if reservation.customer_id != actor.id:
                raise Unauthorized("You can only cancel your own reservations")
            if new_status not in CUSTOMER_TARGETS:
                raise Unauthorized("Customers can only cancel their reservations")
            return

        if not actor.is_agent:
            raise Unauthorized("Only agents and admins can change reservation status")

        if reservation.agent_id != actor.id:
            raise Unauthorized("You can only manage reservations assigned to you")

        if new_status in ADMIN_ONLY_TARGETS:
            raise Unauthorized(f"Only admins can mark reservations as {new_status.value}")

    @staticmethod
    def transition_status(
        db: Session,
        reservation_id: uuid.UUID,
        new_status: ReservationStatus,
        actor: Profile,
        rejection_reason: Optional[str] = None,
        oversell_policy: Optional[OversellPolicy] = None
    ) -> TransitionResult:
        """
        Move a reservation to `new_status` and adjust the property inventory.

        The reservation write and the inventory write are both
        compare-and-swap and commit together. When another writer got there
        first, everything is rolled back and the cycle starts over from a
        fresh read, up to TRANSITION_MAX_ATTEMPTS times.
        """
        policy = oversell_policy or OversellPolicy(settings.OVERSELL_POLICY)
        attempts = max(1, settings.TRANSITION_MAX_ATTEMPTS)

        for attempt in range(1, attempts + 1):
            try:
                result = ReservationService._attempt_transition(
                    db, reservation_id, new_status, actor, rejection_reason, policy
                )
            except ConcurrentModification:
                db.rollback()
                logger.warning(
                    f"Concurrent update on reservation {reservation_id} "
                    f"(attempt {attempt}/{attempts}), retrying"
                )
                continue
            except AppException:
                db.rollback()
                raise
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Storage failure during reservation transition: {e}", exc_info=True)
                raise StorageFailure("Could not update reservation status")

            logger.info(
                f"Reservation {reservation_id} moved to {new_status.value} by {actor.id}"
                + (f", inventory now {result.inventory.units_available}/{result.inventory.units_total}"
                   if result.inventory else "")
            )
            return result

        raise ConcurrentModification(
            f"Reservation {reservation_id} kept changing, gave up after {attempts} attempts"
        )

    @staticmethod
    def _attempt_transition(
        db: Session,
        reservation_id: uuid.UUID,
        new_status: ReservationStatus,
        actor: Profile,
        rejection_reason: Optional[str],
        policy: OversellPolicy
    ) -> TransitionResult:
        """One read-decide-write cycle; commits on success"""

        reservation = db.query(Reservation).filter(
            Reservation.id == reservation_id
        ).populate_existing().first()

        if not reservation:
            raise NotFound("Reservation not found")

        ReservationService._authorize_transition(actor, reservation, new_status)

        current_status = ReservationStatus(reservation.status)
        validate_transition(current_status, new_status, rejection_reason, actor.role)

        snapshot = PropertyInventoryStore.get_inventory(db, reservation.property_id, lock=True)
        plan = plan_inventory(snapshot, current_status, new_status, policy)

        values = {
            Reservation.status: new_status.value,
            Reservation.updated_at: datetime.now(timezone.utc),
        }
        if new_status == ReservationStatus.CANCELLED and rejection_reason and not actor.is_customer:
            values[Reservation.rejection_reason] = rejection_reason.strip()

        # Compare-and-swap on the status we validated against
        updated = db.query(Reservation).filter(
            Reservation.id == reservation_id,
            Reservation.status == current_status.value
        ).update(values, synchronize_session=False)

        if updated != 1:
            raise ConcurrentModification("Reservation status changed concurrently")

        inventory = None
        if plan.changed:
            inventory = PropertyInventoryStore.set_inventory(
                db,
                reservation.property_id,
                units_available=plan.units_available,
                status=plan.status,
                expected_version=snapshot.version
            )

        db.add(ReservationStatusHistory(
            reservation_id=reservation_id,
            from_status=current_status.value,
            to_status=new_status.value,
            changed_by=actor.id,
            notes=rejection_reason
        ))

        audit_logger.log_business_event(
            db=db,
            action="RESERVATION_STATUS_CHANGED",
            user_id=actor.id,
            resource_type="reservation",
            resource_id=reservation_id,
            old_values={
                "status": current_status.value,
                "units_available": snapshot.units_available
            },
            new_values={
                "status": new_status.value,
                "units_available": plan.units_available,
                "oversold": plan.oversold
            }
        )

        db.commit()

        reservation = db.query(Reservation).filter(
            Reservation.id == reservation_id
        ).options(
            selectinload(Reservation.property)
        ).populate_existing().one()

        return TransitionResult(
            reservation=reservation,
            inventory=inventory,
            oversold=plan.oversold,
            events=ReservationService._transition_events(reservation, new_status, actor)
        )

    @staticmethod
    def _transition_events(
        reservation: Reservation,
        new_status: ReservationStatus,
        actor: Profile
    ) -> List[NotificationEvent]:
        property_name = reservation.property.name if reservation.property else "the property"

        # Customer withdrew the request: tell the agent, not the customer
        if actor.is_customer:
            if new_status == ReservationStatus.CANCELLED and reservation.agent_id:
                return [reservation_withdrawn_event(
                    reservation.agent_id, reservation.id, property_name, reservation.reservation_time
                )]
            return []

        if new_status == ReservationStatus.CONFIRMED:
            return [reservation_confirmed_event(
                reservation.customer_id, reservation.id, property_name, reservation.reservation_time
            )]

        if new_status == ReservationStatus.CANCELLED:
            return [reservation_cancelled_event(
                reservation.customer_id, reservation.id, property_name, reservation.rejection_reason
            )]

        return []

    @staticmethod
    def delete_reservation(
        db: Session,
        reservation_id: uuid.UUID,
        customer: Profile
    ) -> None:
        """Owner-only removal of a resolved reservation; inventory stays as is"""

        reservation = db.query(Reservation).filter(
            Reservation.id == reservation_id
        ).first()

        if not reservation:
            raise NotFound("Reservation not found")

        if reservation.customer_id != customer.id:
            raise Unauthorized("You can only delete your own reservations")

        if reservation.status == ReservationStatus.PENDING.value:
            raise CannotDeletePending()

        try:
            audit_logger.log_business_event(
                db=db,
                action="RESERVATION_DELETED",
                user_id=customer.id,
                resource_type="reservation",
                resource_id=reservation_id,
                old_values={
                    "property_id": reservation.property_id,
                    "status": reservation.status
                }
            )

            db.delete(reservation)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete reservation {reservation_id}: {e}", exc_info=True)
            raise StorageFailure("Could not delete reservation")

    @staticmethod
    def get_reservation(
        db: Session,
        reservation_id: uuid.UUID,
        user: Profile
    ) -> Reservation:
        """Get reservation by ID with visibility check"""

        reservation = db.query(Reservation).filter(
            Reservation.id == reservation_id
        ).options(
            selectinload(Reservation.property),
            selectinload(Reservation.customer)
        ).first()

        if not reservation:
            raise NotFound("Reservation not found")

        if user.is_customer and reservation.customer_id != user.id:
            raise Unauthorized("You can only view your own reservations")
        if user.is_agent and reservation.agent_id != user.id:
            raise Unauthorized("You can only view reservations assigned to you")

        return reservation

    @staticmethod
    def list_reservations(
        db: Session,
        user: Profile,
        customer_id: Optional[uuid.UUID] = None,
        agent_id: Optional[uuid.UUID] = None,
        property_id: Optional[uuid.UUID] = None,
        status: Optional[ReservationStatus] = None
    ) -> List[Reservation]:
        """Operational view: ordered by viewing time, earliest first"""

        # Customers and agents only ever see their own rows
        if user.is_customer:
            customer_id = user.id
        elif user.is_agent:
            agent_id = user.id

        query = db.query(Reservation).options(
            selectinload(Reservation.property),
            selectinload(Reservation.customer)
        )

        if customer_id:
            query = query.filter(Reservation.customer_id == customer_id)
        if agent_id:
            query = query.filter(Reservation.agent_id == agent_id)
        if property_id:
            query = query.filter(Reservation.property_id == property_id)
        if status is not None:
            query = query.filter(Reservation.status == status.value)

        return query.order_by(
            Reservation.reservation_time.asc(),
            Reservation.created_at.asc()
        ).all()

    @staticmethod
    def list_report(db: Session) -> List[Reservation]:
        """Audit view: resolved (confirmed/cancelled) reservations, newest request first"""

        return db.query(Reservation).filter(
            Reservation.status.in_([
                ReservationStatus.CONFIRMED.value,
                ReservationStatus.CANCELLED.value
            ])
        ).options(
            selectinload(Reservation.property),
            selectinload(Reservation.customer)
        ).order_by(
            Reservation.created_at.desc()
        ).all()

    @staticmethod
    def get_reservation_history(
        db: Session,
        reservation_id: uuid.UUID,
        user: Profile
    ) -> List[ReservationStatusHistory]:
        """Get status history for a reservation"""

        # Visibility follows the reservation itself
        ReservationService.get_reservation(db, reservation_id, user)

        return db.query(ReservationStatusHistory).filter(
            ReservationStatusHistory.reservation_id == reservation_id
        ).order_by(
            ReservationStatusHistory.changed_at.desc()
        ).all()
