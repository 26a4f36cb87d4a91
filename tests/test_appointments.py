from datetime import date, time

from sqlmodel import select

from conftest import auth_headers, make_appointment, make_therapist, make_user, next_weekday
from greenlife.core.errors import ErrorKind
from greenlife.models.appointment import Appointment
from greenlife.models.logs import AdminLog
from greenlife.models.notification import Notification
from greenlife.models.user import User
from greenlife.services import appointments as appointment_service

DAY = date(2030, 1, 8)


def _titles(session, user_id):
    return [n.title for n in session.exec(select(Notification).where(Notification.user_id == user_id)).all()]


# =========================
# LISTAGEM POR PAPEL
# =========================

def test_listing_is_scoped_by_role(session, admin_user, client_user, therapist, service):
    other_client = make_user(session, email="other@example.com")
    other_therapist = make_therapist(session, email="t2@example.com", name="Dr. Two")
    mine = make_appointment(session, client_user, therapist, service, DAY, time(9, 0))
    make_appointment(session, other_client, other_therapist, service, DAY, time(10, 0))

    therapist_user = session.get(User, therapist.user_id)

    assert [a.id for a in appointment_service.list_appointments_for(session, client_user)] == [mine.id]
    assert [a.id for a in appointment_service.list_appointments_for(session, therapist_user)] == [mine.id]
    assert len(appointment_service.list_appointments_for(session, admin_user)) == 2


def test_client_cannot_view_someone_elses_appointment(session, client_user, therapist, service):
    stranger = make_user(session, email="stranger@example.com")
    appt = make_appointment(session, client_user, therapist, service, DAY)

    result = appointment_service.get_appointment_for(session, stranger, appt.id)
    assert result.kind == ErrorKind.FORBIDDEN


# =========================
# STATUS
# =========================

def test_therapist_confirms_own_appointment_and_client_is_notified(session, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY)
    therapist_user = session.get(User, therapist.user_id)

    result = appointment_service.update_appointment_status(
        session, therapist_user, appt.id, "confirmed", notes="See you then"
    )

    assert result.ok
    assert result.value.status == "confirmed"
    assert result.value.therapist_notes == "See you then"
    assert _titles(session, client_user.id) == ["Appointment Update"]


def test_therapist_cannot_touch_other_therapists_appointment(session, client_user, therapist, service):
    other = make_therapist(session, email="t2@example.com", name="Dr. Two")
    appt = make_appointment(session, client_user, other, service, DAY)
    therapist_user = session.get(User, therapist.user_id)

    result = appointment_service.update_appointment_status(session, therapist_user, appt.id, "confirmed")
    assert result.kind == ErrorKind.FORBIDDEN


def test_therapist_cannot_set_pending(session, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY, status="confirmed")
    therapist_user = session.get(User, therapist.user_id)

    result = appointment_service.update_appointment_status(session, therapist_user, appt.id, "pending")
    assert result.kind == ErrorKind.VALIDATION


def test_admin_status_change_is_audited(session, admin_user, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY)

    result = appointment_service.update_appointment_status(session, admin_user, appt.id, "canceled", notes="Clinic closed")

    assert result.value.admin_notes == "Clinic closed"
    log = session.exec(select(AdminLog)).one()
    assert log.action == "Updated appointment status to canceled"


def test_unchanged_status_sends_no_notification(session, admin_user, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY, status="confirmed")
    appointment_service.update_appointment_status(session, admin_user, appt.id, "confirmed")
    assert _titles(session, client_user.id) == []


def test_client_cancel_own_appointment(session, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY)
    assert appointment_service.cancel_own_appointment(session, client_user, appt.id).value.status == "canceled"

    done = make_appointment(session, client_user, therapist, service, DAY, time(11, 0), status="completed")
    result = appointment_service.cancel_own_appointment(session, client_user, done.id)
    assert result.kind == ErrorKind.VALIDATION


def test_session_notes_can_complete_appointment(session, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY, status="confirmed")
    therapist_user = session.get(User, therapist.user_id)

    result = appointment_service.update_session_notes(
        session, therapist_user, appt.id, "Session went well", mark_completed=True
    )

    assert result.value.status == "completed"
    assert result.value.therapist_notes == "Session went well"
    assert _titles(session, client_user.id) == ["Session Completed"]


def test_session_notes_denied_for_other_therapist(session, client_user, therapist, service):
    other = make_therapist(session, email="t2@example.com", name="Dr. Two")
    appt = make_appointment(session, client_user, other, service, DAY)
    therapist_user = session.get(User, therapist.user_id)

    result = appointment_service.update_session_notes(session, therapist_user, appt.id, "notes")
    assert result.message == "Appointment not found or access denied"


# =========================
# API
# =========================

def test_api_book_and_list(client, client_user, therapist, service):
    day = next_weekday(1)
    headers = auth_headers(client_user)
    payload = {
        "therapist_id": therapist.id,
        "service_id": service.id,
        "appointment_date": day.isoformat(),
        "appointment_time": "10:00:00",
    }

    check = client.post("/appointments/validate", json=payload, headers=headers)
    assert check.json() == {"valid": True, "errors": []}

    response = client.post("/appointments/", json=payload, headers=headers)
    assert response.status_code == 201
    assert response.json()["appointment_time"] == "10:00:00"
    assert response.json()["status"] == "pending"

    again = client.post("/appointments/", json=payload, headers=headers)
    assert again.status_code == 409
    assert again.json()["detail"] == ["Selected time slot is not available"]

    listed = client.get("/appointments/", headers=headers).json()
    assert len(listed) == 1


def test_api_booking_on_sunday_is_400(client, client_user, therapist, service):
    response = client.post(
        "/appointments/",
        json={
            "therapist_id": therapist.id,
            "service_id": service.id,
            "appointment_date": next_weekday(6).isoformat(),
            "appointment_time": "10:00:00",
        },
        headers=auth_headers(client_user),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == ["Selected time is outside business hours"]


def test_api_slots_endpoint(client, session, client_user, therapist, service):
    make_appointment(session, client_user, therapist, service, DAY, time(9, 0))

    response = client.get(f"/therapists/{therapist.id}/slots", params={"day": DAY.isoformat()})

    assert response.status_code == 200
    slots = response.json()["slots"]
    assert slots[0] == "10:00:00"
    assert "09:00:00" not in slots
    assert len(slots) == 8


def test_api_client_cannot_change_status(client, session, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY)
    response = client.patch(
        f"/appointments/{appt.id}/status", json={"status": "confirmed"}, headers=auth_headers(client_user)
    )
    assert response.status_code == 403


def test_api_admin_deletes_appointment(client, session, admin_user, client_user, therapist, service):
    appt = make_appointment(session, client_user, therapist, service, DAY)
    headers = auth_headers(admin_user)

    assert client.delete(f"/appointments/{appt.id}", headers=headers).status_code == 200
    assert client.get(f"/appointments/{appt.id}", headers=headers).status_code == 404
    assert session.exec(select(Appointment)).all() == []


def test_reopening_canceled_appointment_into_taken_slot_conflicts(session, admin_user, client_user, therapist, service):
    other = make_user(session, email="other@example.com")
    canceled = make_appointment(session, client_user, therapist, service, DAY, time(10, 0), status="canceled")
    make_appointment(session, other, therapist, service, DAY, time(10, 0), status="pending")

    result = appointment_service.update_appointment_status(session, admin_user, canceled.id, "confirmed")

    assert not result.ok
    assert result.kind == ErrorKind.CONFLICT
    assert result.message == "Selected time slot is not available"
    session.refresh(canceled)
    assert canceled.status == "canceled"


def test_reopening_canceled_appointment_into_free_slot(session, admin_user, client_user, therapist, service):
    canceled = make_appointment(session, client_user, therapist, service, DAY, time(10, 0), status="canceled")

    result = appointment_service.update_appointment_status(session, admin_user, canceled.id, "pending")

    assert result.ok
    assert result.value.status == "pending"


def test_api_reopening_into_taken_slot_is_409(client, session, client_user, therapist, service):
    other = make_user(session, email="other@example.com")
    canceled = make_appointment(session, client_user, therapist, service, DAY, time(15, 0), status="canceled")
    make_appointment(session, other, therapist, service, DAY, time(15, 0), status="confirmed")
    therapist_user = session.get(User, therapist.user_id)

    response = client.patch(
        f"/appointments/{canceled.id}/status", json={"status": "confirmed"}, headers=auth_headers(therapist_user)
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "Selected time slot is not available"
