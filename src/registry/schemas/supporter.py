#src.registry.schemas.supporter.py

from datetime import date
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class Sex(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class SupporterCreate(BaseModel):
    """Submission payload. Derived ages sent by the form are ignored."""

    model_config = ConfigDict(extra="ignore")

    name: RequiredText
    dob: date
    sex: Sex
    location: RequiredText
    community: RequiredText
    clan: RequiredText
    district: RequiredText
    contact: RequiredText
    email: Optional[EmailStr] = None

    @field_validator("dob", mode="before")
    @classmethod
    def parse_dob(cls, v: Any) -> date:
        if isinstance(v, date):
            return v
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Date of birth must be a YYYY-MM-DD string")
        try:
            return date.fromisoformat(v.strip())
        except ValueError:
            raise ValueError("Date of birth must be a valid YYYY-MM-DD date")

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class SupporterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    dob: str
    sex: str
    location: str
    community: str
    clan: str
    district: str
    contact: str
    email: Optional[str] = None
    current_age: int = Field(alias="currentAge")
    age_2029: int = Field(alias="age2029")


# CSV header, same order as the stored columns
EXPORT_COLUMNS = [
    field.alias or name for name, field in SupporterRead.model_fields.items()
]


class SupporterFilter(BaseModel):
    """Conjunctive list filters. Empty values mean no constraint."""

    district: Optional[str] = None
    sex: Optional[str] = None
    q: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)

    @field_validator("district", "sex", "q", mode="before")
    @classmethod
    def empty_is_absent(cls, v: Any) -> Any:
        if v == "":
            return None
        return v
