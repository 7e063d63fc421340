# ================================
# PROPERTY SCHEMAS (schemas/property.py)
# ================================

from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, model_validator
import uuid

from app.schemas.base import BaseSchema, BaseResponseSchema, TimestampMixin

class InventorySnapshot(BaseModel):
    """Unit inventory of one property as read from (or written to) storage"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    property_id: uuid.UUID
    units_total: Optional[int] = None
    units_available: Optional[int] = None
    status: str
    version: int = 1

    @property
    def tracks_inventory(self) -> bool:
        return self.units_total is not None

class PropertyCreate(BaseSchema):
    """Schema for creating a property"""
    name: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    description: Optional[str] = None
    agent_id: Optional[uuid.UUID] = None

    # Multi-unit inventory
    units_total: Optional[int] = Field(None, ge=0)
    units_available: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_units(self):
        if self.units_available is not None:
            if self.units_total is None:
                raise ValueError("units_available requires units_total")
            if self.units_available > self.units_total:
                raise ValueError("units_available cannot exceed units_total")
        return self

class PropertyAgentAssign(BaseSchema):
    """Schema for assigning the handling agent"""
    agent_id: uuid.UUID

class InventoryOverride(BaseSchema):
    """Administrative inventory correction"""
    units_available: int = Field(..., ge=0)
    units_total: Optional[int] = Field(None, ge=0)

class PropertyResponse(BaseResponseSchema, TimestampMixin):
    """Property with inventory fields"""
    name: str
    location: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    agent_id: Optional[uuid.UUID] = None
    units_total: Optional[int] = None
    units_available: Optional[int] = None
    status: str
