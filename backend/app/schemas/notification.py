"""Notification 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime

NotificationType = Literal["info", "success", "warning", "error"]


class NotificationOut(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    action_url: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class NotificationListOut(BaseModel):
    notifications: List[NotificationOut]
    pagination: Pagination


class NotificationReadOut(BaseModel):
    message: str
    notification: NotificationOut


class NotificationBulkResult(BaseModel):
    message: str
    count: int


class UnreadCountOut(BaseModel):
    unread_count: int


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    target_role: Optional[Literal["student", "company", "admin"]] = None
    action_url: Optional[str] = None


class AnnouncementResult(BaseModel):
    message: str
    recipients: int
