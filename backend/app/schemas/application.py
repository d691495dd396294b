"""Application 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

ReviewStatus = Literal["pending", "reviewed", "shortlisted", "interview_scheduled", "accepted", "rejected"]


class ApplicationCreate(BaseModel):
    internship_id: int
    cover_letter: str = Field(min_length=50)
    resume_url: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ReviewStatus
    response_message: Optional[str] = None


class ApplicationOut(BaseModel):
    application_id: int
    internship_id: int
    internship_title: Optional[str] = None
    student_id: int
    student_name: Optional[str] = None
    cover_letter: str
    resume_url: Optional[str] = None
    status: str
    response_message: Optional[str] = None
    applied_at: datetime
    reviewed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
