#src.registry.models.admin.py

from sqlmodel import SQLModel, Field
from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Admin(SQLModel, table=True):
    __tablename__ = "admins"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True)
    password_hash: str = Field(nullable=False)
    must_change_password: bool = Field(default=True)
    created_at: datetime = Field(default_factory=_utcnow)
