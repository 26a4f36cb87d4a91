from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel, Field


class EmailLog(SQLModel, table=True):
    __tablename__ = "email_logs"

    id: Optional[int] = Field(default=None, primary_key=True)

    recipient_email: str = Field(index=True)
    subject: str
    status: str = "disabled"  # envio de email desativado: só registra

    created_at: datetime = Field(default_factory=datetime.utcnow)


class AdminLog(SQLModel, table=True):
    __tablename__ = "admin_logs"

    id: Optional[int] = Field(default=None, primary_key=True)

    admin_id: int = Field(foreign_key="users.id", index=True)
    action: str
    details: str = ""

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
