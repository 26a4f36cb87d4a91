from typing import Literal, Optional
from datetime import date, datetime, time

from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field


APPOINTMENT_STATUSES = ("pending", "confirmed", "canceled", "completed")
ACTIVE_STATUSES = ("pending", "confirmed")


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        # um único agendamento não cancelado por (terapeuta, dia, horário)
        Index(
            "uq_appointments_live_slot",
            "therapist_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            sqlite_where=text("status != 'canceled'"),
            postgresql_where=text("status != 'canceled'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True)
    therapist_id: int = Field(foreign_key="therapists.id", index=True)
    service_id: int = Field(foreign_key="services.id", index=True)

    appointment_date: date = Field(index=True)
    appointment_time: time  # HH:MM:SS

    # STATUS DO AGENDAMENTO
    status: str = Field(default="pending", index=True)
    # pending | confirmed | canceled | completed

    reminder_sent: bool = False

    client_notes: Optional[str] = None
    therapist_notes: Optional[str] = None
    admin_notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column_kwargs={"onupdate": datetime.utcnow},
    )


class AppointmentCreate(SQLModel):
    therapist_id: int
    service_id: int
    appointment_date: date
    appointment_time: time
    client_notes: Optional[str] = None


class AppointmentStatusUpdate(SQLModel):
    status: Literal["pending", "confirmed", "canceled", "completed"]
    notes: Optional[str] = None


class SessionNotesUpdate(SQLModel):
    notes: str
    mark_completed: bool = False
