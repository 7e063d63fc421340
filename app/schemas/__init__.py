# ================================
# SCHEMAS PACKAGE INITIALIZATION (schemas/__init__.py)
# ================================

"""
Pydantic Schemas Package

Zentrale Imports für die Basis-Schemas. Reservation-Schemas hängen an
services.reservation_lifecycle und werden direkt aus app.schemas.reservation
importiert.
"""

# Base Schemas
from app.schemas.base import (
    BaseSchema,
    BaseResponseSchema,
    TimestampMixin,
    ErrorResponse,
    OkResponse
)

# Property Schemas
from app.schemas.property import (
    InventorySnapshot,
    PropertyCreate,
    PropertyAgentAssign,
    InventoryOverride,
    PropertyResponse
)

# Notification Schemas
from app.schemas.notification import (
    NotificationEvent,
    NotificationResponse,
    NotificationListResponse,
    NotificationReadUpdate
)

# Profile Schemas
from app.schemas.profile import AgentResponse, AgentStatusUpdate

# Conversation Schemas
from app.schemas.conversation import (
    ConversationResponse,
    ChatMessageCreate,
    ChatMessageResponse,
    ConversationStatusUpdate
)

__all__ = [
    "BaseSchema", "BaseResponseSchema", "TimestampMixin", "ErrorResponse", "OkResponse",
    "InventorySnapshot", "PropertyCreate", "PropertyAgentAssign", "InventoryOverride", "PropertyResponse",
    "NotificationEvent", "NotificationResponse", "NotificationListResponse", "NotificationReadUpdate",
    "AgentResponse", "AgentStatusUpdate",
    "ConversationResponse", "ChatMessageCreate", "ChatMessageResponse", "ConversationStatusUpdate",
]
