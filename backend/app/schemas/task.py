"""Task 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

TaskStatus = Literal["pending", "in_progress", "submitted", "completed", "rejected"]


class TaskBase(BaseModel):
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: str = "medium"


class TaskCreate(TaskBase):
    assigned_to: int


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[str] = None
    status: Optional[TaskStatus] = None


class TaskSubmit(BaseModel):
    submission_url: str = Field(min_length=1)
    submission_notes: Optional[str] = None


class TaskReject(BaseModel):
    feedback: str = Field(min_length=1)


class TaskOut(TaskBase):
    task_id: int
    assigned_to: int
    assignee_name: Optional[str] = None
    assigned_by: int
    status: str
    submission_url: Optional[str] = None
    submission_notes: Optional[str] = None
    submitted_at: Optional[datetime] = None
    feedback: Optional[str] = None
    feedback_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
