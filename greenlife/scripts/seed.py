import os

from sqlmodel import Session, select

from greenlife.core.logging import configure_logging
from greenlife.database import create_db_and_tables, engine
from greenlife.models.service import Service
from greenlife.models.user import User
from greenlife.services.auth import register_user


ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@greenlife.lk")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "Admin1234")

THERAPIST_EMAIL = "therapist@greenlife.lk"
THERAPIST_PASSWORD = "Therapist1234"

SERVICES = [
    dict(name="Ayurvedic Therapy", description="Traditional Ayurvedic treatment", duration=60, price=5000.0),
    dict(name="Yoga Session", description="Guided yoga and breathing", duration=60, price=2500.0),
    dict(name="Nutrition Consultation", description="Personal diet planning", duration=45, price=3500.0),
    dict(name="Massage Therapy", description="Full body relaxation massage", duration=90, price=6000.0),
]


def _ensure_user(session: Session, **kwargs) -> User:
    user = session.exec(select(User).where(User.email == kwargs["email"])).first()
    if user:
        return user

    result = register_user(session, **kwargs)
    if not result.ok:
        raise RuntimeError(f"Não foi possível criar {kwargs['email']}: {result.message}")
    return result.value


def main():
    configure_logging()
    create_db_and_tables()

    with Session(engine) as session:
        # 1) admin
        admin = _ensure_user(
            session, name="System Admin", email=ADMIN_EMAIL, password=ADMIN_PASSWORD, role="admin"
        )

        # 2) terapeuta de exemplo (user + therapist na mesma transação)
        therapist = _ensure_user(
            session,
            name="Dr. Nimal Perera",
            email=THERAPIST_EMAIL,
            password=THERAPIST_PASSWORD,
            role="therapist",
            specialization="Ayurveda",
            bio="Ayurvedic practitioner",
            experience_years=10,
        )

        # 3) serviços (se não existirem)
        existing = {s.name for s in session.exec(select(Service)).all()}
        session.add_all([Service(**cfg) for cfg in SERVICES if cfg["name"] not in existing])
        session.commit()

        print("Seed concluído!")
        print(f"Admin: {admin.id} ({admin.email})")
        print(f"Terapeuta: {therapist.id} ({therapist.email})")
        print(f"Serviços: {', '.join(cfg['name'] for cfg in SERVICES)}")


if __name__ == "__main__":
    main()
