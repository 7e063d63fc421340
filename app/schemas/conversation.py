# ================================
# CONVERSATION SCHEMAS (schemas/conversation.py)
# ================================

from typing import Optional, Literal
from datetime import datetime
from pydantic import Field
import uuid

from app.schemas.base import BaseSchema, BaseResponseSchema

class ConversationResponse(BaseResponseSchema):
    """Conversation with the names of the other side and the property"""
    customer_id: uuid.UUID
    customer_name: Optional[str] = None
    agent_id: uuid.UUID
    agent_name: Optional[str] = None
    property_id: Optional[uuid.UUID] = None
    property_name: Optional[str] = None
    status: str
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None

class ChatMessageCreate(BaseSchema):
    message: str = Field(..., min_length=1, max_length=5000)

class ChatMessageResponse(BaseResponseSchema):
    conversation_id: uuid.UUID
    sender_id: Optional[uuid.UUID] = None
    sender_name: Optional[str] = None
    sender_role: str
    message: str
    created_at: datetime

class ConversationStatusUpdate(BaseSchema):
    status: Literal["active", "pending", "completed"]
