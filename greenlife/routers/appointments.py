from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from greenlife.core.errors import unwrap
from greenlife.core.security import get_current_admin, get_current_staff, get_current_therapist, get_current_user
from greenlife.database import get_session
from greenlife.models.appointment import AppointmentCreate, AppointmentStatusUpdate, SessionNotesUpdate
from greenlife.models.user import User
from greenlife.services import appointments as appointment_service
from greenlife.services.booking import book_appointment, validate_booking


router = APIRouter(prefix="/appointments", tags=["appointments"])


# =========================
# AGENDAR
# =========================

@router.post("/", status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return unwrap(
        book_appointment(
            session,
            user_id=current_user.id,
            therapist_id=data.therapist_id,
            service_id=data.service_id,
            appointment_date=data.appointment_date,
            appointment_time=data.appointment_time,
            client_notes=data.client_notes,
        )
    )


@router.post("/validate")
def check_appointment(
    data: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    errors = validate_booking(
        session,
        current_user.id,
        data.therapist_id,
        data.service_id,
        data.appointment_date,
        data.appointment_time,
    )
    return {"valid": not errors, "errors": errors}


# =========================
# CONSULTA
# =========================

@router.get("/")
def list_appointments(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return appointment_service.list_appointments_for(session, current_user)


@router.get("/{appointment_id}")
def get_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return unwrap(appointment_service.get_appointment_for(session, current_user, appointment_id))


# =========================
# STATUS / NOTAS
# =========================

@router.patch("/{appointment_id}/status")
def update_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_staff),
):
    return unwrap(
        appointment_service.update_appointment_status(
            session, current_user, appointment_id, data.status, data.notes
        )
    )


@router.patch("/{appointment_id}/cancel")
def cancel_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return unwrap(appointment_service.cancel_own_appointment(session, current_user, appointment_id))


@router.patch("/{appointment_id}/notes")
def update_notes(
    appointment_id: int,
    data: SessionNotesUpdate,
    session: Session = Depends(get_session),
    current_therapist: User = Depends(get_current_therapist),
):
    return unwrap(
        appointment_service.update_session_notes(
            session, current_therapist, appointment_id, data.notes, data.mark_completed
        )
    )


@router.delete("/{appointment_id}")
def delete_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    unwrap(appointment_service.delete_appointment(session, current_admin, appointment_id))
    return {"message": "Appointment deleted successfully"}
