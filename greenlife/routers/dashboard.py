from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from greenlife.core.security import get_current_admin
from greenlife.database import get_session
from greenlife.models.user import User
from greenlife.services.admin import dashboard_stats


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary")
def dashboard_summary(
    day: Optional[date] = None,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    stats = dashboard_stats(session, today=day)
    stats["day"] = (day or date.today()).isoformat()
    return stats
