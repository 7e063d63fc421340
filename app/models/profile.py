# ================================
# PROFILE MODELS (models/profile.py)
# ================================

from sqlalchemy import Column, String, Boolean, CheckConstraint
from sqlalchemy.orm import relationship
from app.models.base import Base

class Profile(Base):
    """Admin, agent or customer account; identity is issued externally"""
    __tablename__ = "profiles"

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="customer")  # 'admin', 'agent', 'customer'
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    managed_properties = relationship("Property", foreign_keys="Property.agent_id", back_populates="agent")
    customer_reservations = relationship("Reservation", foreign_keys="Reservation.customer_id", back_populates="customer")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'agent', 'customer')", name="check_profile_role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_agent(self) -> bool:
        return self.role == "agent"

    @property
    def is_customer(self) -> bool:
        return self.role == "customer"

    def __repr__(self):
        return f"<Profile(email='{self.email}', role='{self.role}')>"
