# ================================
# DATABASE INITIALIZATION (models/__init__.py)
# ================================

"""
Database Models Package

Importiert alle Models für Alembic Auto-Generation
"""

from app.models.base import Base

from app.models.profile import Profile
from app.models.business import (
    Property,
    Reservation, ReservationStatusHistory,
    Conversation, ChatMessage, Notification
)
from app.models.audit import AuditLog

__all__ = [
    "Base",
    "Profile",
    "Property",
    "Reservation",
    "ReservationStatusHistory",
    "Conversation",
    "ChatMessage",
    "Notification",
    "AuditLog",
]
