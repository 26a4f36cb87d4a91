import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, field_validator
from sqlmodel import SQLModel, Field


ROLES = ("client", "therapist", "admin")
USER_STATUSES = ("active", "inactive")

PHONE_PATTERNS = (
    re.compile(r"^0\d{9}$"),      # 0771234567
    re.compile(r"^\+94\d{9}$"),   # +94771234567
    re.compile(r"^94\d{9}$"),     # 94771234567
)


def normalize_phone(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    clean = re.sub(r"[^\d+]", "", value)
    if not any(p.match(clean) for p in PHONE_PATTERNS):
        raise ValueError("Please enter a valid phone number")
    return clean


class UserBase(SQLModel):
    name: str
    email: str = Field(index=True, unique=True)
    role: str = Field(default="client")  # client | therapist | admin
    phone: Optional[str] = None
    address: Optional[str] = None


class User(UserBase, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str

    status: str = Field(default="active", index=True)  # active | inactive

    # "lembrar de mim": guarda apenas o sha256 do token
    remember_token: Optional[str] = Field(default=None, index=True)
    remember_expires: Optional[datetime] = None

    reset_token: Optional[str] = Field(default=None, index=True)
    reset_expires: Optional[datetime] = None

    # incrementado no logout; invalida access tokens emitidos antes
    session_version: int = 0

    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserRegister(SQLModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v)


class AdminUserCreate(UserRegister):
    password: Optional[str] = None
    role: Literal["client", "therapist", "admin"] = "client"
    specialization: Optional[str] = "General Practice"
    bio: Optional[str] = None
    experience_years: int = Field(default=0, ge=0)


class AdminUserUpdate(SQLModel):
    name: str = Field(min_length=2)
    email: EmailStr
    role: Literal["client", "therapist", "admin"]
    phone: Optional[str] = None
    address: Optional[str] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    experience_years: int = Field(default=0, ge=0)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v)


class ProfileUpdate(SQLModel):
    name: str = Field(min_length=2)
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v)


class UserStatusUpdate(SQLModel):
    status: Literal["active", "inactive"]


class UserPublic(SQLModel):
    id: int
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    address: Optional[str] = None
    status: str
    last_login: Optional[datetime] = None
    created_at: datetime
