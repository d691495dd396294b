"""Task 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.helpers import utcnow


class Task(Base):
    __tablename__ = "tasks"

    task_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    assigned_to = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    assigned_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    due_date = Column(DateTime)
    priority = Column(String(10), default="medium")  # high/medium/low
    status = Column(String(20), default="pending")  # pending/in_progress/submitted/completed/rejected
    submission_url = Column(String(500))
    submission_notes = Column(Text)
    submitted_at = Column(DateTime)
    feedback = Column(Text)
    feedback_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    assignee = relationship("User", foreign_keys=[assigned_to], back_populates="tasks_assigned")
    creator = relationship("User", foreign_keys=[assigned_by], back_populates="tasks_created")

    @property
    def assignee_name(self):
        return self.assignee.full_name if self.assignee else None

    __table_args__ = (
        Index("idx_task_assigned", "assigned_to"),
        Index("idx_task_due_date", "status", "due_date"),
    )
