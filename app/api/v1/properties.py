# ================================
# PROPERTY API ROUTES (api/v1/properties.py)
# ================================

from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
import uuid

from app.dependencies import get_db, get_current_profile, get_admin_profile, get_notifier
from app.models.profile import Profile
from app.services.notification_service import Notifier
from app.services.property_service import PropertyService
from app.schemas.property import (
    PropertyCreate,
    PropertyResponse,
    PropertyAgentAssign,
    InventoryOverride,
    InventorySnapshot
)

router = APIRouter()

@router.get("", response_model=List[PropertyResponse])
async def list_properties(
    agent_id: Optional[uuid.UUID] = Query(None),
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """List properties, newest first"""
    properties = PropertyService.list_properties(db, agent_id=agent_id)
    return [PropertyResponse.model_validate(p) for p in properties]

@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    property_data: PropertyCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_admin_profile),
    notifier: Notifier = Depends(get_notifier)
):
    """Create a property and announce it to all customers (admin only)"""
    property, events = PropertyService.create_property(db, property_data, current_profile)

    if events:
        background_tasks.add_task(notifier.dispatch, events)

    return PropertyResponse.model_validate(property)

@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Get property details"""
    return PropertyResponse.model_validate(PropertyService.get_property(db, property_id))

@router.put("/{property_id}/agent", response_model=PropertyResponse)
async def assign_agent(
    property_id: uuid.UUID,
    assign_data: PropertyAgentAssign,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_admin_profile)
):
    """Assign the handling agent (admin only)"""
    property = PropertyService.assign_agent(db, property_id, assign_data.agent_id, current_profile)
    return PropertyResponse.model_validate(property)

@router.put("/{property_id}/inventory", response_model=InventorySnapshot)
async def override_inventory(
    property_id: uuid.UUID,
    inventory_data: InventoryOverride,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_admin_profile)
):
    """Correct the unit counts of a property (admin only)"""
    return PropertyService.override_inventory(
        db,
        property_id,
        units_available=inventory_data.units_available,
        actor=current_profile,
        units_total=inventory_data.units_total
    )
