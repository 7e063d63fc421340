# ================================
# RESERVATION SCHEMAS (schemas/reservation.py)
# ================================

from typing import Optional
from datetime import datetime, timezone
from pydantic import Field, field_validator
import uuid

from app.schemas.base import BaseSchema, BaseResponseSchema, TimestampMixin
from app.schemas.property import InventorySnapshot
from app.services.reservation_lifecycle import ReservationStatus

class ReservationCreate(BaseSchema):
    """Schema for requesting a viewing"""
    property_id: uuid.UUID
    reservation_time: datetime
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('reservation_time')
    @classmethod
    def validate_future_time(cls, v: datetime) -> datetime:
        """Normalize to UTC and require a future viewing time"""
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        v = v.astimezone(timezone.utc)
        if v <= datetime.now(timezone.utc):
            raise ValueError('reservation_time must be in the future')
        return v

class ReservationStatusUpdate(BaseSchema):
    """Schema for moving a reservation to a new status"""
    status: ReservationStatus
    rejection_reason: Optional[str] = Field(None, max_length=2000)

class ReservationResponse(BaseResponseSchema, TimestampMixin):
    """Reservation with all stored fields"""
    customer_id: uuid.UUID
    property_id: uuid.UUID
    agent_id: Optional[uuid.UUID] = None
    reservation_time: datetime
    status: ReservationStatus
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None

class ReservationListResponse(ReservationResponse):
    """Reservation row for dashboards, with display names"""
    customer_name: Optional[str] = None
    property_name: Optional[str] = None

class ReservationCreated(BaseSchema):
    reservation_id: uuid.UUID
    conversation_id: uuid.UUID

class ReservationTransitionResponse(BaseSchema):
    ok: bool = True
    reservation: ReservationResponse
    inventory: Optional[InventorySnapshot] = None
    oversold: bool = False

class ReservationStatusHistoryResponse(BaseResponseSchema):
    """Status history entry"""
    reservation_id: uuid.UUID
    from_status: Optional[ReservationStatus] = None
    to_status: ReservationStatus
    changed_by: Optional[uuid.UUID] = None
    changed_at: datetime
    notes: Optional[str] = None
