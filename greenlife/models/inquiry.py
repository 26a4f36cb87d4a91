from typing import Literal, Optional
from datetime import datetime

from pydantic import EmailStr
from sqlmodel import SQLModel, Field


class Inquiry(SQLModel, table=True):
    __tablename__ = "inquiries"

    id: Optional[int] = Field(default=None, primary_key=True)

    # nulo para visitantes (formulário de contato)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    subject: str
    message: str
    priority: str = Field(default="medium")  # low | medium | high

    status: str = Field(default="open", index=True)  # open | responded

    admin_response: Optional[str] = None
    responded_at: Optional[datetime] = None
    responded_by: Optional[int] = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class InquiryCreate(SQLModel):
    subject: str = Field(min_length=3, max_length=200)
    message: str = Field(min_length=10)
    priority: Literal["low", "medium", "high"] = "medium"

    # só exigidos quando quem envia não está logado
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class InquiryResponse(SQLModel):
    response: str = Field(min_length=1)
