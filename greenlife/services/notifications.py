"""Notifications and the outbound email stub.

Email delivery is disabled: :func:`send_email` only records an ``email_logs``
row and always reports success, so callers never fail because of mail.
"""
import logging
from datetime import date, timedelta
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from greenlife.core.config import SITE_URL
from greenlife.models.appointment import Appointment
from greenlife.models.logs import EmailLog
from greenlife.models.notification import Notification
from greenlife.models.service import Service
from greenlife.models.therapist import Therapist
from greenlife.models.user import User

logger = logging.getLogger(__name__)


def send_email(session: Session, to: str, subject: str, body: str) -> bool:
    logger.warning("EMAIL DISABLED - Would send to: %s | Subject: %s", to, subject)

    try:
        session.add(EmailLog(recipient_email=to, subject=subject, status="disabled"))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Email logging error")

    return True


def create_notification(
    session: Session, user_id: int, title: str, message: str, type: str = "system"
) -> None:
    try:
        session.add(Notification(user_id=user_id, title=title, message=message, type=type))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error creating notification for user %s", user_id)


def notify_admins(session: Session, title: str, message: str, type: str = "system") -> int:
    admins = session.exec(
        select(User).where(User.role == "admin", User.status == "active")
    ).all()
    for admin in admins:
        create_notification(session, admin.id, title, message, type)
    return len(admins)


def list_notifications(session: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712
    return session.exec(
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
    ).all()


def mark_notification_read(session: Session, user_id: int, notification_id: int) -> bool:
    notification = session.get(Notification, notification_id)
    if not notification or notification.user_id != user_id:
        return False

    notification.is_read = True
    session.add(notification)
    session.commit()
    return True


# =========================
# EMAILS
# =========================

def send_welcome_email(session: Session, email: str, name: str) -> bool:
    body = (
        f"Welcome to GreenLife Wellness Center, {name}!\n\n"
        "Thank you for joining our wellness community. You can now book appointments "
        "with our therapists, submit inquiries and track your wellness journey.\n\n"
        f"Visit us: {SITE_URL}"
    )
    return send_email(session, email, "Welcome to GreenLife Wellness Center", body)


def send_password_reset_email(session: Session, email: str, name: str, token: str) -> bool:
    link = f"{SITE_URL}/reset-password?token={token}"
    body = (
        f"Hi {name},\n\n"
        "You requested a password reset for your GreenLife Wellness Center account.\n"
        f"Use the link below to reset your password (expires in 1 hour):\n{link}\n\n"
        "If you didn't request this reset, please ignore this email."
    )
    return send_email(session, email, "Password Reset - GreenLife Wellness Center", body)


def _appointment_lines(session: Session, appointment: Appointment) -> str:
    service = session.get(Service, appointment.service_id)
    therapist = session.get(Therapist, appointment.therapist_id)
    return (
        f"Service: {service.name if service else '-'}\n"
        f"Therapist: {therapist.name if therapist else '-'}\n"
        f"Date: {appointment.appointment_date.strftime('%B %d, %Y')}\n"
        f"Time: {appointment.appointment_time.strftime('%I:%M %p')}\n"
    )


def send_appointment_confirmation(session: Session, appointment: Appointment) -> bool:
    user = session.get(User, appointment.user_id)
    if not user:
        return False

    body = (
        f"Hi {user.name},\n\nYour appointment has been successfully booked!\n\n"
        + _appointment_lines(session, appointment)
        + "Status: Pending Confirmation\n\nPlease arrive 10 minutes early for your appointment."
    )
    return send_email(session, user.email, "Appointment Confirmation - GreenLife Wellness Center", body)


def send_appointment_reminders(session: Session, today: date | None = None) -> int:
    """Remind clients of tomorrow's confirmed appointments, once each.

    Returns how many reminders were sent.
    """
    today = today or date.today()
    tomorrow = today + timedelta(days=1)

    appointments = session.exec(
        select(Appointment).where(
            Appointment.appointment_date == tomorrow,
            Appointment.status == "confirmed",
            Appointment.reminder_sent == False,  # noqa: E712
        )
    ).all()

    sent = 0
    for appt in appointments:
        user = session.get(User, appt.user_id)
        if not user:
            continue

        body = (
            f"Hi {user.name},\n\nThis is a friendly reminder about your appointment tomorrow:\n\n"
            + _appointment_lines(session, appt)
            + "\nPlease arrive 10 minutes early. If you need to reschedule or cancel, "
            "please contact us at least 4 hours in advance."
        )
        if send_email(session, user.email, "Appointment Reminder - GreenLife Wellness Center", body):
            appt.reminder_sent = True
            session.add(appt)
            session.commit()
            sent += 1

    logger.info("Sent %d appointment reminders for %s", sent, tomorrow)
    return sent
