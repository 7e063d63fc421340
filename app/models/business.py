# ================================
# BUSINESS MODELS (models/business.py)
# ================================

from sqlalchemy import (
    Column, String, Text, Integer, Numeric, Boolean, DateTime, ForeignKey,
    Index, CheckConstraint, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID

from app.models.base import Base, utcnow

ACTIVE_RESERVATION_CLAUSE = "status IN ('pending', 'confirmed')"
ACTIVE_RESERVATION_INDEX = "uq_reservations_active_customer_property"

class Property(Base):
    """Rental listing with optional multi-unit inventory"""
    __tablename__ = "properties"

    # Foreign Keys
    agent_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True)  # Handling agent

    # Listing Information
    name = Column(String(255), nullable=False)
    location = Column(String(500), nullable=True)
    price = Column(Numeric(14, 2), nullable=True)
    description = Column(Text, nullable=True)

    # Unit Inventory (NULL units_total = no multi-unit tracking)
    units_total = Column(Integer, nullable=True)
    units_available = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="available")  # 'available', 'reserved'
    version = Column(Integer, nullable=False, default=1)  # Bumped on every inventory write

    # Relationships
    agent = relationship("Profile", foreign_keys=[agent_id], back_populates="managed_properties")
    reservations = relationship("Reservation", back_populates="property", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("units_total IS NULL OR units_total >= 0", name="check_property_units_total"),
        CheckConstraint(
            "units_available IS NULL OR (units_available >= 0 AND "
            "(units_total IS NULL OR units_available <= units_total))",
            name="check_property_units_available"
        ),
        Index('idx_properties_agent_id', 'agent_id'),
    )

    @property
    def tracks_inventory(self) -> bool:
        return self.units_total is not None

    def __repr__(self):
        return f"<Property(name='{self.name}', units='{self.units_available}/{self.units_total}', status='{self.status}')>"

class Reservation(Base):
    """Viewing request of a customer for a property"""
    __tablename__ = "reservations"

    # Foreign Keys
    customer_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    property_id = Column(UUID(as_uuid=True), ForeignKey('properties.id', ondelete='CASCADE'), nullable=False)
    agent_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True)

    # Viewing Details
    reservation_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # Relationships
    customer = relationship("Profile", foreign_keys=[customer_id], back_populates="customer_reservations")
    agent = relationship("Profile", foreign_keys=[agent_id])
    property = relationship("Property", back_populates="reservations")
    status_history = relationship(
        "ReservationStatusHistory",
        back_populates="reservation",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_reservation_status"
        ),
        Index('idx_reservations_customer_id', 'customer_id'),
        Index('idx_reservations_property_id', 'property_id'),
        Index('idx_reservations_agent_id', 'agent_id'),
        Index('idx_reservations_reservation_time', 'reservation_time'),
        # At most one active reservation per customer and property
        Index(
            ACTIVE_RESERVATION_INDEX,
            'customer_id', 'property_id',
            unique=True,
            postgresql_where=text(ACTIVE_RESERVATION_CLAUSE),
            sqlite_where=text(ACTIVE_RESERVATION_CLAUSE),
        ),
    )

    def __repr__(self):
        return f"<Reservation(property='{self.property_id}', customer='{self.customer_id}', status='{self.status}')>"

class ReservationStatusHistory(Base):
    """Status change log for a reservation"""
    __tablename__ = "reservation_status_history"

    reservation_id = Column(UUID(as_uuid=True), ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False)
    from_status = Column(String(20), nullable=True)  # NULL for the creating entry
    to_status = Column(String(20), nullable=False)
    changed_by = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True)
    changed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    notes = Column(Text, nullable=True)

    # Relationships
    reservation = relationship("Reservation", back_populates="status_history")
    changed_by_profile = relationship("Profile", foreign_keys=[changed_by])

    __table_args__ = (
        Index('idx_reservation_status_history_reservation_id', 'reservation_id'),
    )

class Conversation(Base):
    """Customer/agent chat thread about a property"""
    __tablename__ = "conversations"

    customer_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    agent_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    property_id = Column(UUID(as_uuid=True), ForeignKey('properties.id', ondelete='CASCADE'), nullable=True)
    status = Column(String(20), nullable=False, default="active")  # 'active', 'pending', 'completed'
    last_message = Column(Text, nullable=True)
    last_message_time = Column(DateTime(timezone=True), default=utcnow, nullable=True)

    # Relationships
    customer = relationship("Profile", foreign_keys=[customer_id])
    agent = relationship("Profile", foreign_keys=[agent_id])
    property = relationship("Property")
    messages = relationship(
        "ChatMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChatMessage.created_at"
    )

    __table_args__ = (
        Index('idx_conversations_customer_agent_property', 'customer_id', 'agent_id', 'property_id'),
    )

class ChatMessage(Base):
    """One message in a conversation"""
    __tablename__ = "chat_messages"

    conversation_id = Column(UUID(as_uuid=True), ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    sender_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True)
    sender_role = Column(String(20), nullable=False)  # 'customer', 'agent'
    message = Column(Text, nullable=False)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("Profile", foreign_keys=[sender_id])

    __table_args__ = (
        Index('idx_chat_messages_conversation_id_created_at', 'conversation_id', 'created_at'),
    )

class Notification(Base):
    """User-facing message about a reservation or listing"""
    __tablename__ = "notifications"

    user_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    type = Column(String(50), nullable=False)  # 'reservation_pending', 'reservation_confirmed', ...
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    related_id = Column(UUID(as_uuid=True), nullable=True)  # Reservation or property, no FK
    is_read = Column(Boolean, default=False, nullable=False)

    # Relationships
    user = relationship("Profile", back_populates="notifications")

    __table_args__ = (
        Index('idx_notifications_user_id_created_at', 'user_id', 'created_at'),
    )
