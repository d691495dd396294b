"""Notification 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.helpers import utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="info")  # info/success/warning/error
    action_url = Column(String(500))
    read_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index("idx_notifications_user_unread", "user_id", "read_at"),
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )


class ReminderLog(Base):
    __tablename__ = "reminder_log"

    reminder_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    reminder_kind = Column(String(40), nullable=False)
    # task_deadline/internship_deadline/pending_application/low_application_count
    entity_id = Column(Integer, nullable=False)
    period_key = Column(Integer, nullable=False)
    sent_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "reminder_kind", "entity_id", "period_key", name="uq_reminder_period"),
        Index("idx_reminder_lookup", "user_id", "reminder_kind", "entity_id", "sent_at"),
    )
