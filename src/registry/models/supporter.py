#src.registry.models.supporter.py

from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Supporter(SQLModel, table=True):
    """One registration. Written once, never updated."""

    __tablename__ = "supporters"
    __table_args__ = (
        UniqueConstraint("name", "dob", "contact", name="uq_supporters_name_dob_contact"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    dob: str = Field(nullable=False)  # ISO YYYY-MM-DD
    sex: str = Field(nullable=False, index=True)
    location: str = Field(nullable=False)
    community: str = Field(nullable=False)
    clan: str = Field(nullable=False)
    district: str = Field(nullable=False, index=True)
    contact: str = Field(nullable=False)
    email: Optional[str] = Field(default=None)
    current_age: int = Field(nullable=False)
    age_2029: int = Field(nullable=False)
