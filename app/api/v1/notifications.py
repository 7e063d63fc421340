# ================================
# NOTIFICATION API ROUTES (api/v1/notifications.py)
# ================================

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import uuid

from app.dependencies import get_db, get_current_profile
from app.models.profile import Profile
from app.services.notification_service import NotificationService
from app.schemas.base import OkResponse
from app.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    NotificationReadUpdate
)

router = APIRouter()

@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Own notifications, newest first, with unread count"""
    notifications, unread_count = NotificationService.list_notifications(db, current_profile, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread_count
    )

@router.put("/{notification_id}", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: uuid.UUID,
    update_data: NotificationReadUpdate,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Mark a notification as read (or unread)"""
    notification = NotificationService.mark_read(db, notification_id, current_profile, update_data.is_read)
    return NotificationResponse.model_validate(notification)

@router.delete("/{notification_id}", response_model=OkResponse)
async def delete_notification(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile)
):
    """Delete a notification"""
    NotificationService.delete_notification(db, notification_id, current_profile)
    return OkResponse()
