from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from greenlife.core.errors import NotFoundError, ValidationError, service_operation
from greenlife.models.inquiry import Inquiry
from greenlife.models.user import User
from greenlife.services.admin import log_admin_action
from greenlife.services.notifications import create_notification, notify_admins


def _save_inquiry(
    session: Session, user_id: Optional[int], subject: str, message: str, priority: str
) -> Inquiry:
    inquiry = Inquiry(user_id=user_id, subject=subject, message=message, priority=priority)
    session.add(inquiry)
    session.commit()
    session.refresh(inquiry)

    notify_admins(session, "New Inquiry", "A new inquiry has been submitted and requires attention.", "inquiry")
    session.refresh(inquiry)
    return inquiry


@service_operation("Inquiry submission failed")
def submit_inquiry(session: Session, user_id: int, subject: str, message: str, priority: str = "medium") -> Inquiry:
    return _save_inquiry(session, user_id, subject, message, priority)


@service_operation("Inquiry submission failed")
def submit_guest_inquiry(
    session: Session,
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    subject: str,
    message: str,
    priority: str = "medium",
) -> Inquiry:
    """Contact-form inquiry from a visitor without an account.

    The contact details go at the top of the message, since there is no user
    row to reply to.
    """
    if not name or not name.strip():
        raise ValidationError("Please enter your name")
    if not email:
        raise ValidationError("Please enter a valid email address")

    message = (
        f"Contact Details:\nName: {name.strip()}\nEmail: {email}\nPhone: {phone or ''}\n\n"
        f"Message:\n{message}"
    )
    return _save_inquiry(session, None, subject, message, priority)


def list_inquiries_for(session: Session, user: User) -> List[Inquiry]:
    query = select(Inquiry)
    if user.role != "admin":
        query = query.where(Inquiry.user_id == user.id)
    return session.exec(query.order_by(Inquiry.created_at.desc(), Inquiry.id.desc())).all()


@service_operation("Failed to send response")
def respond_to_inquiry(session: Session, admin: User, inquiry_id: int, response: str) -> Inquiry:
    inquiry = session.get(Inquiry, inquiry_id)
    if not inquiry:
        raise NotFoundError("Inquiry not found")

    inquiry.admin_response = response
    inquiry.responded_at = datetime.utcnow()
    inquiry.responded_by = admin.id
    inquiry.status = "responded"
    session.add(inquiry)
    session.commit()
    session.refresh(inquiry)

    log_admin_action(session, admin.id, f"Responded to inquiry ID: {inquiry_id}")
    # visitante não tem conta para notificar
    if inquiry.user_id is not None:
        create_notification(
            session,
            inquiry.user_id,
            "Inquiry Answered",
            f"Your inquiry '{inquiry.subject}' has received a response.",
            "inquiry",
        )
    session.refresh(inquiry)
    return inquiry


@service_operation("Failed to delete inquiry")
def delete_inquiry(session: Session, admin: User, inquiry_id: int) -> None:
    inquiry = session.get(Inquiry, inquiry_id)
    if not inquiry:
        raise NotFoundError("Inquiry not found")

    session.delete(inquiry)
    session.commit()
    log_admin_action(session, admin.id, f"Deleted inquiry ID: {inquiry_id}")
    return None
