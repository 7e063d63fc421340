# ================================
# PROFILE SCHEMAS (schemas/profile.py)
# ================================

from typing import Literal, Optional
from pydantic import computed_field

from app.schemas.base import BaseSchema, BaseResponseSchema, TimestampMixin

class AgentResponse(BaseResponseSchema, TimestampMixin):
    """Agent profile as seen by admins"""
    email: str
    name: Optional[str] = None
    is_active: bool

    @computed_field
    @property
    def status(self) -> str:
        return "active" if self.is_active else "inactive"

class AgentStatusUpdate(BaseSchema):
    status: Literal["active", "inactive"]
