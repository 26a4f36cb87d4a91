from datetime import date

from sqlmodel import select

from conftest import auth_headers, make_appointment, make_service, make_therapist, make_user
from greenlife.models.inquiry import Inquiry
from greenlife.models.logs import EmailLog
from greenlife.models.notification import Notification
from greenlife.models.user import User
from greenlife.services import catalog
from greenlife.services import inquiries as inquiry_service
from greenlife.services.notifications import create_notification, mark_notification_read, send_email


# =========================
# CONSULTAS (INQUIRIES)
# =========================

def test_submit_inquiry_notifies_admins(session, client_user, admin_user):
    result = inquiry_service.submit_inquiry(session, client_user.id, "Opening hours", "Are you open on holidays?")

    assert result.ok
    assert result.value.status == "open"
    titles = [n.title for n in session.exec(select(Notification).where(Notification.user_id == admin_user.id)).all()]
    assert titles == ["New Inquiry"]


def test_respond_to_inquiry(session, client_user, admin_user):
    inquiry = inquiry_service.submit_inquiry(session, client_user.id, "Parking", "Is there parking nearby?").value

    result = inquiry_service.respond_to_inquiry(session, admin_user, inquiry.id, "Yes, behind the building.")

    assert result.value.status == "responded"
    assert result.value.responded_by == admin_user.id
    notes = session.exec(select(Notification).where(Notification.user_id == client_user.id)).all()
    assert [n.title for n in notes] == ["Inquiry Answered"]


def test_clients_only_see_their_inquiries(session, client_user, admin_user):
    other = make_user(session, email="other@example.com")
    inquiry_service.submit_inquiry(session, client_user.id, "Mine", "This one is my question")
    inquiry_service.submit_inquiry(session, other.id, "Theirs", "This one belongs to someone else")

    assert [i.subject for i in inquiry_service.list_inquiries_for(session, client_user)] == ["Mine"]
    assert len(inquiry_service.list_inquiries_for(session, admin_user)) == 2


def test_api_inquiry_validation(client, client_user):
    response = client.post(
        "/inquiries/", json={"subject": "Hi", "message": "short"}, headers=auth_headers(client_user)
    )
    assert response.status_code == 422


def test_api_inquiry_flow(client, client_user, admin_user):
    created = client.post(
        "/inquiries/",
        json={"subject": "Yoga classes", "message": "Do you offer group yoga?", "priority": "low"},
        headers=auth_headers(client_user),
    )
    assert created.status_code == 201
    inquiry_id = created.json()["id"]

    denied = client.post(f"/inquiries/{inquiry_id}/respond", json={"response": "Yes"}, headers=auth_headers(client_user))
    assert denied.status_code == 403

    answered = client.post(f"/inquiries/{inquiry_id}/respond", json={"response": "Yes"}, headers=auth_headers(admin_user))
    assert answered.json()["admin_response"] == "Yes"


# =========================
# NOTIFICAÇÕES / EMAIL
# =========================

def test_email_stub_logs_and_succeeds(session):
    assert send_email(session, "someone@example.com", "Subject", "Body") is True
    log = session.exec(select(EmailLog)).one()
    assert log.recipient_email == "someone@example.com"
    assert log.status == "disabled"


def test_mark_notification_read_only_for_owner(session, client_user):
    other = make_user(session, email="other@example.com")
    create_notification(session, client_user.id, "Hello", "World")
    notification = session.exec(select(Notification)).one()

    assert not mark_notification_read(session, other.id, notification.id)
    assert mark_notification_read(session, client_user.id, notification.id)
    session.refresh(notification)
    assert notification.is_read


def test_api_notifications(client, session, client_user):
    create_notification(session, client_user.id, "One", "First")
    create_notification(session, client_user.id, "Two", "Second")
    headers = auth_headers(client_user)

    listed = client.get("/notifications/", headers=headers).json()
    assert len(listed) == 2

    assert client.patch(f"/notifications/{listed[0]['id']}/read", headers=headers).status_code == 200
    assert len(client.get("/notifications/", params={"unread_only": True}, headers=headers).json()) == 1
    assert client.patch("/notifications/999/read", headers=headers).status_code == 404


# =========================
# CATÁLOGO
# =========================

def test_active_therapists_exclude_inactive_users_and_self(session):
    active = make_therapist(session, email="a@example.com", name="Dr. A")
    hidden = make_therapist(session, email="b@example.com", name="Dr. B")
    hidden_user = session.get(User, hidden.user_id)
    hidden_user.status = "inactive"
    session.add(hidden_user)
    session.commit()

    assert [t.id for t in catalog.list_active_therapists(session)] == [active.id]
    assert catalog.list_active_therapists(session, exclude_user_id=active.user_id) == []


def test_delete_service_in_use_is_deactivated(session, admin_user, client_user, therapist):
    used = make_service(session, name="Used")
    unused = make_service(session, name="Unused")
    make_appointment(session, client_user, therapist, used, date(2030, 1, 8))

    assert catalog.delete_service(session, admin_user, used.id).value == "deactivated"
    assert catalog.delete_service(session, admin_user, unused.id).value == "deleted"
    assert [s.name for s in catalog.list_active_services(session)] == []


def test_api_services_public_list_and_admin_create(client, admin_user, client_user):
    payload = {"name": "Reflexology", "description": "Foot therapy", "duration": 45, "price": 3000}

    assert client.post("/services/", json=payload, headers=auth_headers(client_user)).status_code == 403
    created = client.post("/services/", json=payload, headers=auth_headers(admin_user))
    assert created.status_code == 201

    listed = client.get("/services/").json()
    assert [s["name"] for s in listed] == ["Reflexology"]


# =========================
# FORMULÁRIO DE CONTATO (VISITANTES)
# =========================

def test_guest_inquiry_prepends_contact_details(session, admin_user):
    result = inquiry_service.submit_guest_inquiry(
        session, "Ana Perera", "ana@example.com", "0771234567", "Gift vouchers", "Do you sell gift vouchers?"
    )

    assert result.ok
    inquiry = result.value
    assert inquiry.user_id is None
    assert inquiry.message == (
        "Contact Details:\nName: Ana Perera\nEmail: ana@example.com\nPhone: 0771234567\n\n"
        "Message:\nDo you sell gift vouchers?"
    )
    titles = [n.title for n in session.exec(select(Notification).where(Notification.user_id == admin_user.id)).all()]
    assert titles == ["New Inquiry"]


def test_guest_inquiry_requires_name_and_email(session):
    no_name = inquiry_service.submit_guest_inquiry(session, " ", "ana@example.com", None, "Hello", "A question for you")
    no_email = inquiry_service.submit_guest_inquiry(session, "Ana", None, None, "Hello", "A question for you")

    assert no_name.message == "Please enter your name"
    assert no_email.message == "Please enter a valid email address"
    assert session.exec(select(Inquiry)).all() == []


def test_responding_to_guest_inquiry_skips_notification(session, admin_user):
    inquiry = inquiry_service.submit_guest_inquiry(
        session, "Ana", "ana@example.com", None, "Hours", "When do you open on Saturday?"
    ).value

    result = inquiry_service.respond_to_inquiry(session, admin_user, inquiry.id, "At 10:00.")

    assert result.value.status == "responded"
    assert session.exec(select(Notification).where(Notification.title == "Inquiry Answered")).all() == []


def test_api_guest_contact_form(client, admin_user):
    response = client.post(
        "/inquiries/",
        json={
            "subject": "Parking",
            "message": "Is there parking near the center?",
            "name": "Ana",
            "email": "ana@example.com",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] is None
    assert body["message"].startswith("Contact Details:\nName: Ana\nEmail: ana@example.com\nPhone: \n\n")


def test_api_guest_contact_form_validation(client):
    missing_name = client.post(
        "/inquiries/", json={"subject": "Parking", "message": "Is there parking nearby?", "email": "ana@example.com"}
    )
    bad_email = client.post(
        "/inquiries/", json={"subject": "Parking", "message": "Is there parking nearby?", "name": "Ana", "email": "nope"}
    )

    assert missing_name.status_code == 400
    assert missing_name.json()["detail"] == "Please enter your name"
    assert bad_email.status_code == 422


def test_api_member_inquiry_keeps_message(client, client_user):
    response = client.post(
        "/inquiries/",
        json={"subject": "Yoga classes", "message": "Do you offer group yoga?"},
        headers=auth_headers(client_user),
    )
    assert response.json()["user_id"] == client_user.id
    assert response.json()["message"] == "Do you offer group yoga?"
