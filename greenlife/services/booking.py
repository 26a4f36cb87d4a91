"""Appointment booking rules and the hourly slot grid.

Business hours are fixed per weekday (``date.weekday()``: 0 = Monday); a time
is inside when its hour is in ``[open, close)``. Free slots are the hourly
starts 09:00 to 17:00 minus the therapist's non-canceled bookings.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from greenlife.core.errors import ERRORS_BY_KIND, ConflictError, ErrorKind, service_operation
from greenlife.models.appointment import ACTIVE_STATUSES, Appointment
from greenlife.models.service import Service
from greenlife.models.therapist import Therapist
from greenlife.services.notifications import create_notification, send_appointment_confirmation

logger = logging.getLogger(__name__)


# segunda..sexta 9-18, sábado 10-16, domingo fechado
BUSINESS_HOURS: Dict[int, Optional[Tuple[int, int]]] = {
    0: (9, 18),
    1: (9, 18),
    2: (9, 18),
    3: (9, 18),
    4: (9, 18),
    5: (10, 16),
    6: None,
}

SLOT_GRID: Tuple[time, ...] = tuple(time(hour, 0) for hour in range(9, 18))

LEAD_TIME = timedelta(hours=24)
MAX_UPCOMING_APPOINTMENTS = 3

SLOT_TAKEN = "Selected time slot is not available"


def normalize_time(value: time) -> time:
    """Appointment times are stored at second precision (HH:MM:SS)."""
    return value.replace(microsecond=0, tzinfo=None)


def is_within_business_hours(day: date, at: time) -> bool:
    hours = BUSINESS_HOURS[day.weekday()]
    if hours is None:
        return False
    open_hour, close_hour = hours
    return open_hour <= at.hour < close_hour


def is_slot_taken(session: Session, therapist_id: int, day: date, at: time) -> bool:
    count = session.exec(
        select(func.count(Appointment.id)).where(
            Appointment.therapist_id == therapist_id,
            Appointment.appointment_date == day,
            Appointment.appointment_time == at,
            Appointment.status != "canceled",
        )
    ).one()
    return count > 0


def count_upcoming_appointments(session: Session, user_id: int, today: date) -> int:
    return session.exec(
        select(func.count(Appointment.id)).where(
            Appointment.user_id == user_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.appointment_date >= today,
        )
    ).one()


def _collect_violations(
    session: Session,
    user_id: int,
    therapist_id: int,
    service_id: int,
    day: date,
    at: time,
    now: datetime,
) -> List[Tuple[ErrorKind, str]]:
    violations: List[Tuple[ErrorKind, str]] = []

    service = session.get(Service, service_id)
    if not service:
        violations.append((ErrorKind.NOT_FOUND, "Selected service does not exist"))
    elif service.status != "active":
        violations.append((ErrorKind.NOT_FOUND, "Selected service is currently unavailable"))

    therapist = session.get(Therapist, therapist_id)
    if not therapist:
        violations.append((ErrorKind.NOT_FOUND, "Selected therapist does not exist"))
    elif therapist.status != "active":
        violations.append((ErrorKind.NOT_FOUND, "Selected therapist is currently unavailable"))

    if datetime.combine(day, at) < now + LEAD_TIME:
        violations.append(
            (ErrorKind.VALIDATION, "Appointments must be booked at least 24 hours in advance")
        )

    if not is_within_business_hours(day, at):
        violations.append((ErrorKind.VALIDATION, "Selected time is outside business hours"))

    if is_slot_taken(session, therapist_id, day, at):
        violations.append((ErrorKind.CONFLICT, SLOT_TAKEN))

    if count_upcoming_appointments(session, user_id, now.date()) >= MAX_UPCOMING_APPOINTMENTS:
        violations.append(
            (ErrorKind.CONFLICT, f"You can have maximum {MAX_UPCOMING_APPOINTMENTS} upcoming appointments")
        )

    return violations


def validate_booking(
    session: Session,
    user_id: int,
    therapist_id: int,
    service_id: int,
    appointment_date: date,
    appointment_time: time,
    now: Optional[datetime] = None,
) -> List[str]:
    """Return every rule the requested booking breaks; empty means bookable.

    Read-only. All checks run, so a request can collect several messages.
    """
    now = now or datetime.now()
    violations = _collect_violations(
        session,
        user_id,
        therapist_id,
        service_id,
        appointment_date,
        normalize_time(appointment_time),
        now,
    )
    return [message for _, message in violations]


def available_slots(session: Session, therapist_id: int, day: date) -> List[time]:
    booked = session.exec(
        select(Appointment.appointment_time).where(
            Appointment.therapist_id == therapist_id,
            Appointment.appointment_date == day,
            Appointment.status != "canceled",
        )
    ).all()
    taken = {normalize_time(t) for t in booked}
    return [slot for slot in SLOT_GRID if slot not in taken]


@service_operation("Booking failed")
def book_appointment(
    session: Session,
    user_id: int,
    therapist_id: int,
    service_id: int,
    appointment_date: date,
    appointment_time: time,
    client_notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Appointment:
    now = now or datetime.now()
    appointment_time = normalize_time(appointment_time)

    # trava a linha do terapeuta: reservas concorrentes do mesmo terapeuta
    # ficam serializadas até o commit (no SQLite é ignorado)
    session.exec(select(Therapist).where(Therapist.id == therapist_id).with_for_update()).first()

    violations = _collect_violations(
        session, user_id, therapist_id, service_id, appointment_date, appointment_time, now
    )
    if violations:
        kind, message = violations[0]
        raise ERRORS_BY_KIND[kind](message, errors=[m for _, m in violations])

    appointment = Appointment(
        user_id=user_id,
        therapist_id=therapist_id,
        service_id=service_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        client_notes=client_notes or None,
        status="pending",
    )
    session.add(appointment)
    try:
        session.commit()
    except IntegrityError:
        # índice único parcial: outro pedido levou o horário
        session.rollback()
        raise ConflictError(SLOT_TAKEN, errors=[SLOT_TAKEN])
    session.refresh(appointment)
    logger.info(
        "Booked appointment %s: therapist %s on %s %s",
        appointment.id,
        therapist_id,
        appointment_date,
        appointment_time,
    )

    send_appointment_confirmation(session, appointment)
    create_notification(
        session,
        user_id,
        "Appointment Booked",
        "Your appointment has been successfully booked and is pending confirmation.",
        "appointment",
    )
    session.refresh(appointment)
    return appointment
