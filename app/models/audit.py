# ================================
# AUDIT MODELS (models/audit.py)
# ================================

from sqlalchemy import Column, String, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from app.models.base import Base

class AuditLog(Base):
    """Audit Log für alle wichtigen Aktionen"""
    __tablename__ = "audit_logs"

    user_id = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True)

    # Action Information
    action = Column(String(100), nullable=False)  # 'RESERVATION_CREATED', 'PROPERTY_CREATED', ...
    resource_type = Column(String(100), nullable=True)  # 'reservation', 'property'
    resource_id = Column(UUID(as_uuid=True), nullable=True)

    # Change Details
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)

    # Relationships
    user = relationship("Profile", foreign_keys=[user_id])

    __table_args__ = (
        Index('idx_audit_logs_resource', 'resource_type', 'resource_id'),
    )

    def __repr__(self):
        return f"<AuditLog(action='{self.action}', user='{self.user_id}')>"
