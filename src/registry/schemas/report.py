#src.registry.schemas.report.py

from pydantic import BaseModel, ConfigDict, Field


class SexCount(BaseModel):
    sex: str
    count: int


class DistrictCount(BaseModel):
    district: str
    count: int


class StatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_supporters: int = Field(alias="totalSupporters")
    gender_breakdown: list[SexCount] = Field(alias="genderBreakdown")
    district_breakdown: list[DistrictCount] = Field(alias="districtBreakdown")
