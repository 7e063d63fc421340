# ================================
# NOTIFICATION SERVICE (services/notification_service.py)
# ================================

from typing import Optional, List, Iterable
from datetime import datetime
from sqlalchemy.orm import Session
import logging
import uuid

from app.config import settings
from app.core.database import SessionLocal, get_db_session
from app.core.exceptions import NotFound, Unauthorized
from app.models.business import Notification
from app.models.profile import Profile
from app.schemas.notification import NotificationEvent

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"

def _when(reservation_time: datetime) -> str:
    return f"{reservation_time.strftime(DATE_FORMAT)} at {reservation_time.strftime(TIME_FORMAT)}"

def reservation_pending_event(
    customer_id: uuid.UUID,
    reservation_id: uuid.UUID,
    property_name: str,
    reservation_time: datetime
) -> NotificationEvent:
    return NotificationEvent(
        user_id=customer_id,
        type="reservation_pending",
        title="Reservation Submitted",
        description=(
            f"Your reservation for {property_name} on {_when(reservation_time)} "
            f"has been created and is waiting for the agent's confirmation."
        ),
        related_id=reservation_id
    )

def reservation_confirmed_event(
    customer_id: uuid.UUID,
    reservation_id: uuid.UUID,
    property_name: str,
    reservation_time: datetime
) -> NotificationEvent:
    return NotificationEvent(
        user_id=customer_id,
        type="reservation_confirmed",
        title="Reservation Confirmed",
        description=f"Your reservation for {property_name} on {_when(reservation_time)} has been confirmed.",
        related_id=reservation_id
    )

def reservation_cancelled_event(
    customer_id: uuid.UUID,
    reservation_id: uuid.UUID,
    property_name: str,
    rejection_reason: Optional[str] = None
) -> NotificationEvent:
    description = f"Your reservation for {property_name} has been cancelled."
    if rejection_reason:
        description += f" Reason: {rejection_reason}"

    return NotificationEvent(
        user_id=customer_id,
        type="reservation_cancelled",
        title="Reservation Cancelled",
        description=description,
        related_id=reservation_id
    )

def reservation_withdrawn_event(
    agent_id: uuid.UUID,
    reservation_id: uuid.UUID,
    property_name: str,
    reservation_time: datetime
) -> NotificationEvent:
    return NotificationEvent(
        user_id=agent_id,
        type="reservation_cancelled",
        title="Reservation Withdrawn",
        description=f"The customer cancelled the viewing of {property_name} on {_when(reservation_time)}.",
        related_id=reservation_id
    )

MESSAGE_PREVIEW_LENGTH = 100

def message_event(
    recipient_id: uuid.UUID,
    conversation_id: uuid.UUID,
    sender_name: str,
    message: str
) -> NotificationEvent:
    if len(message) > MESSAGE_PREVIEW_LENGTH:
        message = message[:MESSAGE_PREVIEW_LENGTH] + "..."

    return NotificationEvent(
        user_id=recipient_id,
        type="message",
        title=f"New message from {sender_name}",
        description=message,
        related_id=conversation_id
    )

def property_new_event(
    customer_id: uuid.UUID,
    property_id: uuid.UUID,
    property_name: str
) -> NotificationEvent:
    return NotificationEvent(
        user_id=customer_id,
        type="property_new",
        title="New Property Available",
        description=f"{property_name} has just been listed. Take a look!",
        related_id=property_id
    )

class Notifier:
    """
    Best-effort delivery of notifications.

    Every notification is written in its own session, never in the session
    of the change that caused it. Failures are logged and dropped.
    """

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def notify(
        self,
        user_id: uuid.UUID,
        type: str,
        title: str,
        description: Optional[str] = None,
        related_id: Optional[uuid.UUID] = None
    ) -> bool:
        """Store one notification; returns False if it could not be stored"""
        try:
            with get_db_session(self.session_factory) as db:
                db.add(Notification(
                    user_id=user_id,
                    type=type,
                    title=title,
                    description=description,
                    related_id=related_id
                ))
            return True
        except Exception as e:
            logger.error(
                f"Failed to send '{type}' notification to {user_id}: {e}",
                exc_info=True
            )
            return False

    def dispatch(self, events: Iterable[NotificationEvent]) -> int:
        """Send a batch of events, returns how many were stored"""
        sent = 0
        for event in events:
            if self.notify(
                user_id=event.user_id,
                type=event.type,
                title=event.title,
                description=event.description,
                related_id=event.related_id
            ):
                sent += 1
        return sent

notifier = Notifier()

class NotificationService:
    """Recipient-side notification operations"""

    @staticmethod
    def list_notifications(
        db: Session,
        user: Profile,
        limit: Optional[int] = None
    ) -> tuple[List[Notification], int]:
        """Newest first, plus the total unread count"""

        notifications = db.query(Notification).filter(
            Notification.user_id == user.id
        ).order_by(
            Notification.created_at.desc()
        ).limit(limit or settings.NOTIFICATION_LIST_LIMIT).all()

        unread_count = db.query(Notification).filter(
            Notification.user_id == user.id,
            Notification.is_read == False
        ).count()

        return notifications, unread_count

    @staticmethod
    def _get_own_notification(db: Session, notification_id: uuid.UUID, user: Profile) -> Notification:
        notification = db.query(Notification).filter(Notification.id == notification_id).first()

        if not notification:
            raise NotFound("Notification not found")

        if notification.user_id != user.id:
            raise Unauthorized("You can only manage your own notifications")

        return notification

    @staticmethod
    def mark_read(
        db: Session,
        notification_id: uuid.UUID,
        user: Profile,
        is_read: bool = True
    ) -> Notification:
        notification = NotificationService._get_own_notification(db, notification_id, user)
        notification.is_read = is_read

        db.commit()
        db.refresh(notification)

        return notification

    @staticmethod
    def delete_notification(
        db: Session,
        notification_id: uuid.UUID,
        user: Profile
    ) -> None:
        notification = NotificationService._get_own_notification(db, notification_id, user)

        db.delete(notification)
        db.commit()
