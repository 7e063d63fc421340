# ================================
# CONVERSATION SERVICE (services/conversation_service.py)
# ================================

from typing import List, Tuple
from datetime import datetime, timezone
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError
import logging
import uuid

from app.models.business import Conversation, ChatMessage
from app.models.profile import Profile
from app.schemas.notification import NotificationEvent
from app.core.exceptions import AppException, NotFound, Unauthorized, StorageFailure
from app.services.notification_service import message_event

logger = logging.getLogger(__name__)

CLOSED_STATUS = "completed"

class ConversationService:
    """
    Customer/agent conversations opened by viewing requests.

    Messages are only persisted here; live delivery is up to the clients,
    which poll the message list.
    """

    @staticmethod
    def _get_conversation(db: Session, conversation_id: uuid.UUID, user: Profile) -> Conversation:
        """Conversation visible to `user`: admins see all, others only their own"""
        conversation = db.query(Conversation).filter(
            Conversation.id == conversation_id
        ).first()

        if not conversation:
            raise NotFound("Conversation not found")

        if user.is_admin:
            return conversation

        if user.id not in (conversation.customer_id, conversation.agent_id):
            raise Unauthorized("You can only access your own conversations")

        return conversation

    @staticmethod
    def list_conversations(db: Session, user: Profile) -> List[Conversation]:
        """Own conversations, most recent message first"""
        query = db.query(Conversation).options(
            selectinload(Conversation.customer),
            selectinload(Conversation.agent),
            selectinload(Conversation.property)
        )

        if user.is_customer:
            query = query.filter(Conversation.customer_id == user.id)
        elif user.is_agent:
            query = query.filter(Conversation.agent_id == user.id)

        return query.order_by(
            Conversation.last_message_time.desc(),
            Conversation.created_at.desc()
        ).all()

    @staticmethod
    def list_messages(db: Session, conversation_id: uuid.UUID, user: Profile) -> List[ChatMessage]:
        """Messages of a conversation, oldest first"""
        ConversationService._get_conversation(db, conversation_id, user)

        return db.query(ChatMessage).filter(
            ChatMessage.conversation_id == conversation_id
        ).options(
            selectinload(ChatMessage.sender)
        ).order_by(
            ChatMessage.created_at.asc()
        ).all()

    @staticmethod
    def post_message(
        db: Session,
        conversation_id: uuid.UUID,
        sender: Profile,
        message: str
    ) -> Tuple[ChatMessage, List[NotificationEvent]]:
        """
        Store a message from one of the two participants.

        Returns the message and, for agent messages, a 'message' event for
        the customer, to be dispatched after commit.
        """
        conversation = ConversationService._get_conversation(db, conversation_id, sender)

        if sender.id not in (conversation.customer_id, conversation.agent_id):
            raise Unauthorized("Only the customer and the agent can write in a conversation")

        if conversation.status == CLOSED_STATUS:
            raise AppException("Conversation has been closed", 409, "CONVERSATION_CLOSED")

        now = datetime.now(timezone.utc)
        chat_message = ChatMessage(
            id=uuid.uuid4(),
            conversation_id=conversation.id,
            sender_id=sender.id,
            sender_role=sender.role,
            message=message
        )

        try:
            db.add(chat_message)
            conversation.last_message = message
            conversation.last_message_time = now

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to store message in conversation {conversation_id}: {e}", exc_info=True)
            raise StorageFailure("Could not send message")

        db.refresh(chat_message)

        events = []
        if sender.is_agent:
            events.append(message_event(
                conversation.customer_id,
                conversation.id,
                sender.name or "your agent",
                message
            ))

        logger.info(f"Message {chat_message.id} posted to conversation {conversation_id} by {sender.id}")
        return chat_message, events

    @staticmethod
    def update_status(
        db: Session,
        conversation_id: uuid.UUID,
        status: str,
        actor: Profile
    ) -> Conversation:
        """Open or close a conversation (its agent or an admin)"""
        conversation = ConversationService._get_conversation(db, conversation_id, actor)

        if not (actor.is_admin or actor.id == conversation.agent_id):
            raise Unauthorized("Only the agent can change the conversation status")

        conversation.status = status
        db.commit()
        db.refresh(conversation)

        logger.info(f"Conversation {conversation_id} set to {status} by {actor.id}")
        return conversation
