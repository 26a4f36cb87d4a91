import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from greenlife.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    service_operation,
)
from greenlife.models.appointment import ACTIVE_STATUSES, APPOINTMENT_STATUSES, Appointment
from greenlife.models.therapist import Therapist
from greenlife.models.user import User
from greenlife.services.admin import log_admin_action
from greenlife.services.booking import SLOT_TAKEN, is_slot_taken
from greenlife.services.notifications import create_notification

logger = logging.getLogger(__name__)


STATUS_MESSAGES = {
    "confirmed": "Your appointment has been confirmed",
    "completed": "Your appointment has been marked as completed",
    "canceled": "Your appointment has been canceled",
}

THERAPIST_STATUSES = ("confirmed", "completed", "canceled")


def get_therapist_for_user(session: Session, user_id: int) -> Optional[Therapist]:
    return session.exec(select(Therapist).where(Therapist.user_id == user_id)).first()


def list_appointments_for(session: Session, user: User) -> List[Appointment]:
    query = select(Appointment)

    if user.role == "client":
        query = query.where(Appointment.user_id == user.id)
    elif user.role == "therapist":
        therapist = get_therapist_for_user(session, user.id)
        if not therapist:
            return []
        query = query.where(Appointment.therapist_id == therapist.id)

    return session.exec(
        query.order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
    ).all()


def _can_view(session: Session, user: User, appt: Appointment) -> bool:
    if user.role == "admin":
        return True
    if user.role == "therapist":
        therapist = get_therapist_for_user(session, user.id)
        if therapist and appt.therapist_id == therapist.id:
            return True
    return appt.user_id == user.id


@service_operation("Error retrieving appointment")
def get_appointment_for(session: Session, user: User, appointment_id: int) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if not appt:
        raise NotFoundError("Appointment not found")
    if not _can_view(session, user, appt):
        raise PermissionDeniedError("Access denied")
    return appt


@service_operation("Error updating appointment status")
def update_appointment_status(
    session: Session, actor: User, appointment_id: int, new_status: str, notes: Optional[str] = None
) -> Appointment:
    if new_status not in APPOINTMENT_STATUSES:
        raise ValidationError("Invalid status")

    appt = session.get(Appointment, appointment_id)
    if not appt:
        raise NotFoundError("Appointment not found")

    if actor.role == "therapist":
        therapist = get_therapist_for_user(session, actor.id)
        if not therapist or appt.therapist_id != therapist.id:
            raise PermissionDeniedError("You can only update your own appointments")
        if new_status not in THERAPIST_STATUSES:
            raise ValidationError("Invalid status")
    elif actor.role != "admin":
        raise PermissionDeniedError("Access denied")

    previous = appt.status

    # reabrir um cancelado só se o horário continuar livre
    reopening = previous == "canceled" and new_status != "canceled"
    if reopening and is_slot_taken(session, appt.therapist_id, appt.appointment_date, appt.appointment_time):
        raise ConflictError(SLOT_TAKEN)

    appt.status = new_status
    if notes:
        if actor.role == "admin":
            appt.admin_notes = notes
        else:
            appt.therapist_notes = notes

    session.add(appt)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError(SLOT_TAKEN)
    session.refresh(appt)

    if actor.role == "admin":
        log_admin_action(
            session, actor.id, f"Updated appointment status to {new_status}", f"Appointment ID: {appt.id}"
        )

    if new_status != previous and new_status in STATUS_MESSAGES:
        create_notification(
            session, appt.user_id, "Appointment Update", STATUS_MESSAGES[new_status], "appointment"
        )

    session.refresh(appt)
    return appt


@service_operation("Error canceling appointment")
def cancel_own_appointment(session: Session, user: User, appointment_id: int) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if not appt or appt.user_id != user.id:
        raise NotFoundError("Appointment not found")

    if appt.status == "canceled":
        return appt
    if appt.status not in ACTIVE_STATUSES:
        raise ValidationError(f"Cannot cancel an appointment that is {appt.status}")

    appt.status = "canceled"
    session.add(appt)
    session.commit()
    session.refresh(appt)

    create_notification(session, user.id, "Appointment Update", STATUS_MESSAGES["canceled"], "appointment")
    session.refresh(appt)
    return appt


@service_operation("Database error occurred while saving notes")
def update_session_notes(
    session: Session, therapist_user: User, appointment_id: int, notes: str, mark_completed: bool = False
) -> Appointment:
    therapist = get_therapist_for_user(session, therapist_user.id)
    appt = session.get(Appointment, appointment_id)
    if not therapist or not appt or appt.therapist_id != therapist.id:
        raise NotFoundError("Appointment not found or access denied")

    # notas + status no mesmo commit
    appt.therapist_notes = notes
    completed_now = mark_completed and appt.status != "completed"
    if completed_now:
        appt.status = "completed"

    session.add(appt)
    session.commit()
    session.refresh(appt)

    if completed_now:
        create_notification(
            session,
            appt.user_id,
            "Session Completed",
            "Your therapy session has been completed by the therapist",
            "appointment",
        )
        session.refresh(appt)
    return appt


@service_operation("Failed to delete appointment")
def delete_appointment(session: Session, admin: User, appointment_id: int) -> None:
    appt = session.get(Appointment, appointment_id)
    if not appt:
        raise NotFoundError("Appointment not found")

    session.delete(appt)
    session.commit()
    log_admin_action(session, admin.id, f"Deleted appointment ID {appointment_id}")
    return None
