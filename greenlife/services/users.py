"""User administration and therapist-record maintenance."""
import logging
from typing import List, Optional

from sqlmodel import Session, select

from greenlife.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    service_operation,
)
from greenlife.models.appointment import ACTIVE_STATUSES, Appointment
from greenlife.models.inquiry import Inquiry
from greenlife.models.notification import Notification
from greenlife.models.therapist import Therapist
from greenlife.models.user import USER_STATUSES, User

logger = logging.getLogger(__name__)


def _append_note(existing: Optional[str], note: str) -> str:
    return f"{existing}\n{note}" if existing else note


def _cancel_active(session: Session, appointments: List[Appointment], note: str) -> int:
    for appt in appointments:
        appt.status = "canceled"
        appt.admin_notes = _append_note(appt.admin_notes, note)
        session.add(appt)
    return len(appointments)


def list_users(session: Session) -> List[User]:
    return session.exec(select(User).order_by(User.created_at.desc(), User.id.desc())).all()


@service_operation("Profile update failed")
def update_profile(
    session: Session, user_id: int, name: str, phone: Optional[str], address: Optional[str]
) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.name = name
    user.phone = phone
    user.address = address
    session.add(user)

    # nome do terapeuta acompanha o do usuário
    therapist = session.exec(select(Therapist).where(Therapist.user_id == user_id)).first()
    if therapist:
        therapist.name = name
        session.add(therapist)

    session.commit()
    session.refresh(user)
    return user


@service_operation("Update failed")
def update_user_and_sync_therapist(
    session: Session,
    user_id: int,
    name: str,
    email: str,
    role: str,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    specialization: Optional[str] = None,
    bio: Optional[str] = None,
    experience_years: int = 0,
) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    clash = session.exec(select(User).where(User.email == email, User.id != user_id)).first()
    if clash:
        raise ConflictError("Email already exists for another user")

    user.name = name
    user.email = email
    user.role = role
    user.phone = phone
    user.address = address
    session.add(user)

    therapist = session.exec(select(Therapist).where(Therapist.user_id == user_id)).first()
    if role == "therapist":
        if therapist is None:
            therapist = Therapist(user_id=user_id, status="active")
        # volta a ser agendável se já tinha sido desativado
        therapist.status = "active"
        therapist.name = name
        therapist.specialization = specialization
        therapist.bio = bio
        therapist.experience_years = experience_years
        session.add(therapist)
    elif therapist is not None:
        # deixou de ser terapeuta
        therapist.status = "inactive"
        session.add(therapist)

    session.flush()
    session.commit()
    session.refresh(user)
    logger.info("Updated user %s (role %s)", user_id, role)
    return user


@service_operation("Failed to update user status")
def set_user_status(session: Session, user_id: int, new_status: str) -> User:
    if new_status not in USER_STATUSES:
        raise ValidationError("Invalid status")

    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.status = new_status
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@service_operation("Error deleting user")
def delete_user(session: Session, admin_id: int, user_id: int) -> str:
    if user_id == admin_id:
        raise PermissionDeniedError("Cannot delete your own account")

    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    _cancel_active(
        session,
        session.exec(
            select(Appointment).where(
                Appointment.user_id == user_id, Appointment.status.in_(ACTIVE_STATUSES)
            )
        ).all(),
        "[Admin] User deleted - appointment canceled",
    )

    therapist = session.exec(select(Therapist).where(Therapist.user_id == user_id)).first()
    if therapist:
        _cancel_active(
            session,
            session.exec(
                select(Appointment).where(
                    Appointment.therapist_id == therapist.id, Appointment.status.in_(ACTIVE_STATUSES)
                )
            ).all(),
            "[Admin] Therapist account deleted - appointment canceled",
        )
        session.delete(therapist)

    for notification in session.exec(select(Notification).where(Notification.user_id == user_id)).all():
        session.delete(notification)
    for inquiry in session.exec(select(Inquiry).where(Inquiry.user_id == user_id)).all():
        session.delete(inquiry)

    email = user.email
    session.delete(user)
    session.commit()
    logger.info("Deleted user %s (%s)", user_id, email)
    return email


# =========================
# MANUTENÇÃO
# =========================

@service_operation("Migration failed")
def migrate_existing_therapists(session: Session) -> int:
    """Create therapist rows for therapist-role users that have none."""
    users = session.exec(
        select(User)
        .outerjoin(Therapist, Therapist.user_id == User.id)
        .where(User.role == "therapist", Therapist.id == None)  # noqa: E711
    ).all()

    for user in users:
        session.add(
            Therapist(
                user_id=user.id,
                name=user.name,
                specialization="General Practice",
                experience_years=0,
                status="active",
            )
        )

    session.commit()
    logger.info("Migrated %d therapist users", len(users))
    return len(users)


@service_operation("Cleanup failed")
def cleanup_orphaned_therapists(session: Session) -> int:
    """Remove therapist rows whose user is gone or inactive.

    Their pending/confirmed appointments are canceled first.
    """
    orphans = session.exec(
        select(Therapist)
        .outerjoin(User, Therapist.user_id == User.id)
        .where((User.id == None) | (User.status != "active"))  # noqa: E711
    ).all()

    for therapist in orphans:
        _cancel_active(
            session,
            session.exec(
                select(Appointment).where(
                    Appointment.therapist_id == therapist.id, Appointment.status.in_(ACTIVE_STATUSES)
                )
            ).all(),
            "[System] Therapist account deleted - appointment canceled",
        )
        session.delete(therapist)

    session.commit()
    logger.info("Cleaned up %d orphaned therapist records", len(orphans))
    return len(orphans)
