"""
Notification endpoints. Clients poll; every route works on the caller's own rows.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from portal.core.deps import get_db, get_current_user
from portal.models.user import User
from portal.schemas.notification import NotificationListResponse, NotificationOut
from portal.services.notification_service import list_notifications, mark_all_read, mark_read, unread_count

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications_endpoint(
    unread_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    items = list_notifications(db, current_user.id, unread_only=unread_only, skip=skip, limit=limit)
    return NotificationListResponse(
        items=[NotificationOut.model_validate(n) for n in items],
        total=len(items),
        unread=unread_count(db, current_user.id),
    )


@router.get("/unread-count")
async def unread_count_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"unread": unread_count(db, current_user.id)}


@router.post("/read-all")
async def mark_all_read_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"updated": mark_all_read(db, current_user.id)}


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read_endpoint(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return mark_read(db, notification_id, current_user.id)
