from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel, Field


class SystemSetting(SQLModel, table=True):
    __tablename__ = "system_settings"

    key: str = Field(primary_key=True)
    value: Optional[str] = None

    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SettingValue(SQLModel):
    value: Optional[str] = None
