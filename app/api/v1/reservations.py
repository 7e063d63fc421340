# ================================
# RESERVATION API ROUTES (api/v1/reservations.py)
# ================================

from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
import uuid

from app.dependencies import (
    get_db,
    get_current_profile,
    get_admin_profile,
    get_customer_profile,
    get_notifier
)
from app.models.business import Reservation
from app.models.profile import Profile
from app.services.notification_service import Notifier
from app.services.reservation_service import ReservationService
from app.schemas.base import OkResponse
from app.schemas.reservation import (
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationResponse,
    ReservationListResponse,
    ReservationCreated,
    ReservationTransitionResponse,
    ReservationStatusHistoryResponse
)

router = APIRouter()

def _list_item(reservation: Reservation) -> ReservationListResponse:
    item = ReservationListResponse.model_validate(reservation)
    return item.model_copy(update={
        "customer_name": reservation.customer.name if reservation.customer else None,
        "property_name": reservation.property.name if reservation.property else None,
    })

@router.post("", response_model=ReservationCreated, status_code=status.HTTP_201_CREATED)
async def request_reservation(
    reservation_data: ReservationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_customer_profile),
    notifier: Notifier = Depends(get_notifier)
):
    """Request a viewing; the reservation starts as pending"""
    result = ReservationService.request_reservation(
        db=db,
        customer=current_profile,
        property_id=reservation_data.property_id,
        reservation_time=reservation_data.reservation_time,
        notes=reservation_data.notes
    )

    background_tasks.add_task(notifier.dispatch, result.events)

    return ReservationCreated(
        reservation_id=result.reservation.id,
        conversation_id=result.conversation_id
    )

@router.get("", response_model=List[ReservationListResponse])
async def list_reservations(
    customer_id: Optional[uuid.UUID] = Query(None),
    agent_id: Optional[uuid.UUID] = Query(None),
    property_id: Optional[uuid.UUID] = Query(None),
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """List reservations by viewing time, earliest first"""
    reservations = ReservationService.list_reservations(
        db=db,
        user=current_profile,
        customer_id=customer_id,
        agent_id=agent_id,
        property_id=property_id
    )
    return [_list_item(r) for r in reservations]

@router.get("/report", response_model=List[ReservationListResponse])
async def reservation_report(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_admin_profile)
):
    """Confirmed and cancelled reservations, newest first (admin only)"""
    return [_list_item(r) for r in ReservationService.list_report(db)]

@router.get("/{reservation_id}", response_model=ReservationListResponse)
async def get_reservation(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Get reservation details"""
    reservation = ReservationService.get_reservation(db, reservation_id, current_profile)
    return _list_item(reservation)

@router.put("/{reservation_id}/status", response_model=ReservationTransitionResponse)
async def update_reservation_status(
    reservation_id: uuid.UUID,
    status_data: ReservationStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
    notifier: Notifier = Depends(get_notifier)
):
    """Confirm, cancel or complete a reservation and adjust the property inventory (customers may cancel their own)"""
    result = ReservationService.transition_status(
        db=db,
        reservation_id=reservation_id,
        new_status=status_data.status,
        actor=current_profile,
        rejection_reason=status_data.rejection_reason
    )

    if result.events:
        background_tasks.add_task(notifier.dispatch, result.events)

    return ReservationTransitionResponse(
        reservation=ReservationResponse.model_validate(result.reservation),
        inventory=result.inventory,
        oversold=result.oversold
    )

@router.delete("/{reservation_id}", response_model=OkResponse)
async def delete_reservation(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_customer_profile)
):
    """Delete one of your own resolved reservations"""
    ReservationService.delete_reservation(db, reservation_id, current_profile)
    return OkResponse()

@router.get("/{reservation_id}/history", response_model=List[ReservationStatusHistoryResponse])
async def get_reservation_history(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Get status change history for a reservation"""
    history = ReservationService.get_reservation_history(db, reservation_id, current_profile)
    return [ReservationStatusHistoryResponse.model_validate(h) for h in history]
