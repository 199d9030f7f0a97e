"""Application-level settings stored in the database."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppSetting(SQLModel, table=True):
    """Key-value slot for user preferences such as the display currency."""

    __tablename__: ClassVar[str] = "app_setting"

    key: str = Field(primary_key=True, max_length=64)
    value: str = Field(nullable=False, max_length=255)
    description: Optional[str] = Field(default=None, max_length=255)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
