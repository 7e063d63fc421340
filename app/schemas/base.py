# ================================
# BASE SCHEMAS (schemas/base.py)
# ================================

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

class BaseSchema(BaseModel):
    """Base Schema mit gemeinsamer Konfiguration"""
    model_config = ConfigDict(
        from_attributes=True,  # Pydantic v2: ermöglicht ORM integration
        str_strip_whitespace=True,
        validate_assignment=True,
    )

class BaseResponseSchema(BaseSchema):
    """Base Schema for API responses with ID field"""
    id: UUID

class TimestampMixin(BaseModel):
    """Mixin für Timestamp-Felder"""
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

# ================================
# ERROR & SUCCESS RESPONSE SCHEMAS
# ================================

class ErrorResponse(BaseSchema):
    """Standard Error Response Schema"""
    detail: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Application-specific error code")
    request_id: Optional[str] = Field(None, description="Request correlation id")

class OkResponse(BaseSchema):
    """Plain acknowledgement"""
    ok: bool = True
