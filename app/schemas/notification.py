# ================================
# NOTIFICATION SCHEMAS (schemas/notification.py)
# ================================

from typing import Optional, List
from pydantic import BaseModel, ConfigDict
import uuid

from app.schemas.base import BaseSchema, BaseResponseSchema, TimestampMixin

class NotificationEvent(BaseModel):
    """A notification waiting to be delivered after the core change commits"""
    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    type: str
    title: str
    description: Optional[str] = None
    related_id: Optional[uuid.UUID] = None

class NotificationResponse(BaseResponseSchema, TimestampMixin):
    user_id: uuid.UUID
    type: str
    title: str
    description: Optional[str] = None
    related_id: Optional[uuid.UUID] = None
    is_read: bool

class NotificationListResponse(BaseSchema):
    notifications: List[NotificationResponse]
    unread_count: int

class NotificationReadUpdate(BaseSchema):
    is_read: bool = True
