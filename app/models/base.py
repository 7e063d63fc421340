# ================================
# BASE MODEL (models/base.py)
# ================================

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import as_declarative, declared_attr
from sqlalchemy.dialects.postgresql import UUID
from datetime import datetime, timezone
import uuid

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

@as_declarative()
class Base:
    """Base Model mit gemeinsamen Feldern und Funktionalität"""

    # Automatische Tabellennamen basierend auf Klassennamen
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower() + "s"

    # Gemeinsame Spalten
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)
