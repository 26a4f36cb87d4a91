from sqlmodel import SQLModel, Session, create_engine

from greenlife.core.config import DATABASE_URL, SQL_ECHO


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args, pool_pre_ping=True)


def create_db_and_tables():
    # importa os modelos para registrar as tabelas no metadata
    from greenlife.models import appointment, inquiry, logs, notification, service, setting, therapist, user  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
