from datetime import date, datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from greenlife.core.security import create_session_token, get_password_hash
from greenlife.database import get_session
from greenlife.main import app
from greenlife.models import appointment, inquiry, logs, notification, setting  # noqa: F401
from greenlife.models.appointment import Appointment
from greenlife.models.service import Service
from greenlife.models.therapist import Therapist
from greenlife.models.user import User


PASSWORD = "Secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)

# segunda-feira; terça 10:00 fica exatamente 24h depois
NOW = datetime(2030, 1, 7, 10, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


# =========================
# FÁBRICAS
# =========================

def make_user(session, email="client@example.com", role="client", name="Test User", status="active"):
    user = User(name=name, email=email, password_hash=PASSWORD_HASH, role=role, status=status)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_therapist(session, email="therapist@example.com", name="Dr. Silva", status="active"):
    user = make_user(session, email=email, role="therapist", name=name)
    therapist = Therapist(user_id=user.id, name=name, specialization="Ayurveda", experience_years=5, status=status)
    session.add(therapist)
    session.commit()
    session.refresh(therapist)
    return therapist


def make_service(session, name="Massage Therapy", price=5000.0, status="active"):
    service = Service(name=name, price=price, duration=60, status=status)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


def make_appointment(session, user, therapist, service, day, at=time(10, 0), status="pending"):
    appt = Appointment(
        user_id=user.id,
        therapist_id=therapist.id,
        service_id=service.id,
        appointment_date=day,
        appointment_time=at,
        status=status,
    )
    session.add(appt)
    session.commit()
    session.refresh(appt)
    return appt


def auth_headers(user):
    return {"Authorization": f"Bearer {create_session_token(user)}"}


def next_weekday(weekday, min_days=2):
    """First date at least ``min_days`` ahead falling on ``weekday``."""
    day = date.today() + timedelta(days=min_days)
    while day.weekday() != weekday:
        day += timedelta(days=1)
    return day


@pytest.fixture
def client_user(session):
    return make_user(session)


@pytest.fixture
def admin_user(session):
    return make_user(session, email="admin@example.com", role="admin", name="Admin")


@pytest.fixture
def therapist(session):
    return make_therapist(session)


@pytest.fixture
def service(session):
    return make_service(session)
