from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field


class Therapist(SQLModel, table=True):
    __tablename__ = "therapists"
    __table_args__ = (
        CheckConstraint("experience_years >= 0", name="ck_therapists_experience_years"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    # 1:1 com users quando role = therapist
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    name: str
    specialization: Optional[str] = None
    bio: Optional[str] = None
    experience_years: int = 0

    status: str = Field(default="active", index=True)  # active | inactive


class TherapistPublic(SQLModel):
    id: int
    name: str
    specialization: Optional[str] = None
    bio: Optional[str] = None
    experience_years: int
