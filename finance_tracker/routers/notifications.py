from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from ..database import get_db
from ..identity import Identity, Policy, get_identity, get_policy
from ..schemas import (
    NotificationCreate,
    NotificationReply,
    NotificationStatusUpdate,
    NotificationResponse,
)
from ..services import notification_service

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Get the caller's notifications, newest first"""
    return notification_service.list_notifications(db, identity)


@router.post("", response_model=NotificationResponse, status_code=201)
async def create_notification(
    data: NotificationCreate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Open an approval request"""
    return notification_service.create_notification(db, identity, data.type, data.message)


@router.get("/admin", response_model=List[NotificationResponse])
async def get_all_notifications(
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Get all notifications (admin only)"""
    return notification_service.get_all_notifications(db, identity, policy)


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: int,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    return notification_service.get_notification(db, identity, notification_id, policy)


@router.post("/{notification_id}/reply", response_model=NotificationResponse)
async def add_reply(
    notification_id: int,
    data: NotificationReply,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Add a reply to a notification thread"""
    return notification_service.add_reply(db, identity, notification_id, data.message, policy)


@router.put("/{notification_id}/status", response_model=NotificationResponse)
async def update_status(
    notification_id: int,
    data: NotificationStatusUpdate,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Approve or deny a request (admin only)"""
    return notification_service.update_status(
        db, identity, notification_id, data.status, data.message, policy
    )
