"""Internship 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional, Literal
from datetime import date, datetime

LocationType = Literal["remote", "onsite", "hybrid"]
InternshipStatus = Literal["draft", "published", "closed", "cancelled"]


class InternshipBase(BaseModel):
    title: str
    description: str
    skills_required: Optional[str] = None
    field: Optional[str] = None
    location: Optional[str] = None
    location_type: LocationType = "onsite"
    duration: Optional[str] = None
    stipend: Optional[int] = None
    application_deadline: Optional[datetime] = None
    start_date: Optional[date] = None
    positions_available: int = 1


class InternshipCreate(InternshipBase):
    status: InternshipStatus = "draft"


class InternshipUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    skills_required: Optional[str] = None
    field: Optional[str] = None
    location: Optional[str] = None
    location_type: Optional[LocationType] = None
    duration: Optional[str] = None
    stipend: Optional[int] = None
    application_deadline: Optional[datetime] = None
    start_date: Optional[date] = None
    status: Optional[InternshipStatus] = None
    positions_available: Optional[int] = None


class InternshipOut(InternshipBase):
    internship_id: int
    company_id: int
    company_name: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
