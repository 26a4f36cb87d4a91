from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from greenlife.core.security import SessionContext, get_session_context
from greenlife.database import get_session
from greenlife.models.therapist import Therapist, TherapistPublic
from greenlife.services import catalog
from greenlife.services.booking import available_slots


router = APIRouter(prefix="/therapists", tags=["therapists"])


@router.get("/", response_model=List[TherapistPublic])
def list_therapists(
    session: Session = Depends(get_session),
    context: SessionContext = Depends(get_session_context),
):
    exclude = context.user.id if context.role == "therapist" else None
    return catalog.list_active_therapists(session, exclude_user_id=exclude)


@router.get("/{therapist_id}/slots")
def therapist_slots(therapist_id: int, day: date, session: Session = Depends(get_session)):
    therapist = session.get(Therapist, therapist_id)
    if not therapist:
        raise HTTPException(status_code=404, detail="Therapist not found")

    return {
        "therapist_id": therapist_id,
        "day": day.isoformat(),
        "slots": [slot.strftime("%H:%M:%S") for slot in available_slots(session, therapist_id, day)],
    }
