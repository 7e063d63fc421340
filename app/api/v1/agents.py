# ================================
# AGENT API ROUTES (api/v1/agents.py)
# ================================

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import uuid

from app.dependencies import get_db, get_admin_profile
from app.models.profile import Profile
from app.services.agent_service import AgentService
from app.schemas.profile import AgentResponse, AgentStatusUpdate

router = APIRouter()

@router.get("", response_model=List[AgentResponse])
async def list_agents(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_admin_profile)
):
    """All agents with their status (admin only)"""
    return [AgentResponse.model_validate(a) for a in AgentService.list_agents(db, current_profile)]

@router.put("/{agent_id}/status", response_model=AgentResponse)
async def update_agent_status(
    agent_id: uuid.UUID,
    status_data: AgentStatusUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_admin_profile)
):
    """Activate or deactivate an agent (admin only)"""
    agent = AgentService.set_agent_active(
        db, agent_id, status_data.status == "active", current_profile
    )
    return AgentResponse.model_validate(agent)
