# ================================
# METRICS SERVICE (services/metrics_service.py)
# ================================

from datetime import datetime, timezone
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.business import Property, Reservation, Conversation, Notification
from app.models.profile import Profile
from app.services.reservation_lifecycle import ReservationStatus, ACTIVE_STATUSES

class AdminMetrics(BaseModel):
    total_properties: int
    total_agents: int
    reservations_this_month: int
    conversion_rate: int  # confirmed / this month's reservations, in percent

class AgentMetrics(BaseModel):
    active_conversations: int
    total_customers: int
    pending_reservations: int

class CustomerMetrics(BaseModel):
    active_reservations: int
    conversations: int
    unread_notifications: int

def _start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

class MetricsService:
    """Dashboard-Kennzahlen je Rolle"""

    @staticmethod
    def admin_metrics(db: Session, now: datetime = None) -> AdminMetrics:
        month_start = _start_of_month(now or datetime.now(timezone.utc))

        total_properties = db.query(func.count(Property.id)).scalar() or 0
        total_agents = db.query(func.count(Profile.id)).filter(Profile.role == "agent").scalar() or 0

        monthly = db.query(Reservation.status).filter(Reservation.created_at >= month_start).all()
        reservations_this_month = len(monthly)
        confirmed = sum(1 for (status,) in monthly if status == ReservationStatus.CONFIRMED.value)

        conversion_rate = 0
        if reservations_this_month:
            conversion_rate = round(confirmed / reservations_this_month * 100)

        return AdminMetrics(
            total_properties=total_properties,
            total_agents=total_agents,
            reservations_this_month=reservations_this_month,
            conversion_rate=conversion_rate
        )

    @staticmethod
    def agent_metrics(db: Session, agent: Profile) -> AgentMetrics:
        active_conversations = db.query(func.count(Conversation.id)).filter(
            Conversation.agent_id == agent.id,
            Conversation.status == "active"
        ).scalar() or 0

        total_customers = db.query(func.count(func.distinct(Conversation.customer_id))).filter(
            Conversation.agent_id == agent.id
        ).scalar() or 0

        pending_reservations = db.query(func.count(Reservation.id)).filter(
            Reservation.agent_id == agent.id,
            Reservation.status == ReservationStatus.PENDING.value
        ).scalar() or 0

        return AgentMetrics(
            active_conversations=active_conversations,
            total_customers=total_customers,
            pending_reservations=pending_reservations
        )

    @staticmethod
    def customer_metrics(db: Session, customer: Profile) -> CustomerMetrics:
        active_reservations = db.query(func.count(Reservation.id)).filter(
            Reservation.customer_id == customer.id,
            Reservation.status.in_([s.value for s in ACTIVE_STATUSES])
        ).scalar() or 0

        conversations = db.query(func.count(Conversation.id)).filter(
            Conversation.customer_id == customer.id
        ).scalar() or 0

        unread_notifications = db.query(func.count(Notification.id)).filter(
            Notification.user_id == customer.id,
            Notification.is_read == False
        ).scalar() or 0

        return CustomerMetrics(
            active_reservations=active_reservations,
            conversations=conversations,
            unread_notifications=unread_notifications
        )
