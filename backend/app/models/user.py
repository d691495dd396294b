"""User 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.helpers import utcnow


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False)  # student/company/admin
    phone = Column(String(30))
    location = Column(String(200))
    bio = Column(Text)
    university = Column(String(200))
    major = Column(String(100))
    skills = Column(Text)  # 콤마 구분 문자열
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    company = relationship("Company", back_populates="owner", uselist=False)
    applications = relationship("Application", back_populates="student")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    tasks_assigned = relationship("Task", foreign_keys="Task.assigned_to", back_populates="assignee")
    tasks_created = relationship("Task", foreign_keys="Task.assigned_by", back_populates="creator")
