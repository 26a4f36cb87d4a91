from datetime import datetime
from typing import Literal, Optional

from sqlmodel import SQLModel, Field


class ServiceBase(SQLModel):
    name: str = Field(min_length=2)
    description: Optional[str] = None
    duration: int = Field(default=60, gt=0)  # minutos
    price: float = Field(ge=0)


class Service(ServiceBase, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)

    status: str = Field(default="active", index=True)  # active | inactive
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(ServiceBase):
    status: Literal["active", "inactive"] = "active"
