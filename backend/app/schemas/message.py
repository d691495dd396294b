"""Message 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class MessageSend(BaseModel):
    recipient_id: int
    content: str = Field(min_length=1)
    subject: Optional[str] = Field(default=None, max_length=255)


class MessageOut(BaseModel):
    message_id: int
    sender_id: int
    recipient_id: int
    subject: Optional[str] = None
    content: str
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ConversationOut(BaseModel):
    user_id: int
    full_name: str
    role: str
    last_message: str
    last_message_at: datetime
    unread_count: int
