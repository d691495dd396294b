"""User 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime


class UserOut(BaseModel):
    user_id: int
    email: str
    full_name: str
    role: str
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    university: Optional[str] = None
    major: Optional[str] = None
    skills: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    university: Optional[str] = None
    major: Optional[str] = None
    skills: Optional[str] = None


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1, max_length=100)
    role: Literal["student", "company"] = "student"


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
