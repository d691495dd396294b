"""Course 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CourseCreate(BaseModel):
    title: str
    description: Optional[str] = None
    instructor: Optional[str] = None
    category: Optional[str] = None


class CourseOut(CourseCreate):
    course_id: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class EnrollmentOut(BaseModel):
    enrollment_id: int
    course_id: int
    user_id: int
    enrolled_at: datetime

    model_config = {"from_attributes": True}
