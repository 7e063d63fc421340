# ================================
# AGENT SERVICE (services/agent_service.py)
# ================================

from typing import List
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging
import uuid

from app.models.profile import Profile
from app.core.exceptions import NotFound, Unauthorized, StorageFailure
from app.utils.audit import audit_logger

logger = logging.getLogger(__name__)

class AgentService:
    """Admin-side management of agent profiles"""

    @staticmethod
    def list_agents(db: Session, actor: Profile) -> List[Profile]:
        """All agents, active or not, ordered by name"""
        if not actor.is_admin:
            raise Unauthorized("Admin access required")

        return db.query(Profile).filter(
            Profile.role == "agent"
        ).order_by(
            Profile.name.asc(),
            Profile.email.asc()
        ).all()

    @staticmethod
    def set_agent_active(
        db: Session,
        agent_id: uuid.UUID,
        is_active: bool,
        actor: Profile
    ) -> Profile:
        """
        Activate or deactivate an agent.

        Inactive agents can no longer authenticate and cannot be assigned to
        properties; existing assignments and reservations are kept.
        """
        if not actor.is_admin:
            raise Unauthorized("Admin access required")

        agent = db.query(Profile).filter(
            Profile.id == agent_id,
            Profile.role == "agent"
        ).first()

        if not agent:
            raise NotFound("Agent not found")

        if agent.is_active == is_active:
            return agent

        old_value = agent.is_active
        agent.is_active = is_active

        try:
            audit_logger.log_business_event(
                db=db,
                action="AGENT_ACTIVATED" if is_active else "AGENT_DEACTIVATED",
                user_id=actor.id,
                resource_type="profile",
                resource_id=agent.id,
                old_values={"is_active": old_value},
                new_values={"is_active": is_active}
            )

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to change status of agent {agent_id}: {e}", exc_info=True)
            raise StorageFailure("Could not update agent status")

        db.refresh(agent)

        logger.info(f"Agent {agent_id} {'activated' if is_active else 'deactivated'} by {actor.id}")
        return agent
