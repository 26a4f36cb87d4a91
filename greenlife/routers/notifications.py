from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from greenlife.core.security import get_current_user
from greenlife.database import get_session
from greenlife.models.user import User
from greenlife.services.notifications import list_notifications, mark_notification_read


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/")
def my_notifications(
    unread_only: bool = False,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return list_notifications(session, current_user.id, unread_only=unread_only)


@router.patch("/{notification_id}/read")
def read_notification(
    notification_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if not mark_notification_read(session, current_user.id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"message": "Notification marked as read"}
