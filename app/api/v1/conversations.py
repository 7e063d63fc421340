# ================================
# CONVERSATION API ROUTES (api/v1/conversations.py)
# ================================

from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
import uuid

from app.dependencies import get_db, get_current_profile, get_notifier
from app.models.business import Conversation, ChatMessage
from app.models.profile import Profile
from app.services.conversation_service import ConversationService
from app.services.notification_service import Notifier
from app.schemas.conversation import (
    ConversationResponse,
    ChatMessageCreate,
    ChatMessageResponse,
    ConversationStatusUpdate
)

router = APIRouter()

def _conversation_item(conversation: Conversation) -> ConversationResponse:
    item = ConversationResponse.model_validate(conversation)
    return item.model_copy(update={
        "customer_name": conversation.customer.name if conversation.customer else None,
        "agent_name": conversation.agent.name if conversation.agent else None,
        "property_name": conversation.property.name if conversation.property else None,
    })

def _message_item(chat_message: ChatMessage) -> ChatMessageResponse:
    item = ChatMessageResponse.model_validate(chat_message)
    return item.model_copy(update={
        "sender_name": chat_message.sender.name if chat_message.sender else None
    })

@router.get("", response_model=List[ConversationResponse])
async def list_conversations(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Own conversations, most recent first"""
    conversations = ConversationService.list_conversations(db, current_profile)
    return [_conversation_item(c) for c in conversations]

@router.get("/{conversation_id}/messages", response_model=List[ChatMessageResponse])
async def list_messages(
    conversation_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Messages of a conversation, oldest first"""
    messages = ConversationService.list_messages(db, conversation_id, current_profile)
    return [_message_item(m) for m in messages]

@router.post(
    "/{conversation_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED
)
async def post_message(
    conversation_id: uuid.UUID,
    message_data: ChatMessageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
    notifier: Notifier = Depends(get_notifier)
):
    """Write a message as customer or agent of the conversation"""
    chat_message, events = ConversationService.post_message(
        db, conversation_id, current_profile, message_data.message
    )

    if events:
        background_tasks.add_task(notifier.dispatch, events)

    return _message_item(chat_message)

@router.put("/{conversation_id}/status", response_model=ConversationResponse)
async def update_conversation_status(
    conversation_id: uuid.UUID,
    status_data: ConversationStatusUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Close or reopen a conversation"""
    conversation = ConversationService.update_status(
        db, conversation_id, status_data.status, current_profile
    )
    return _conversation_item(conversation)
