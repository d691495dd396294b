"""Application 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.helpers import utcnow


class Application(Base):
    __tablename__ = "applications"

    application_id = Column(Integer, primary_key=True, autoincrement=True)
    internship_id = Column(Integer, ForeignKey("internships.internship_id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    cover_letter = Column(Text, nullable=False)
    resume_url = Column(String(500))
    status = Column(String(30), default="pending")
    # pending/reviewed/shortlisted/interview_scheduled/accepted/rejected/withdrawn
    response_message = Column(Text)
    applied_at = Column(DateTime, default=utcnow)
    reviewed_at = Column(DateTime)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    internship = relationship("Internship", back_populates="applications")
    student = relationship("User", back_populates="applications")

    @property
    def internship_title(self):
        return self.internship.title if self.internship else None

    @property
    def student_name(self):
        return self.student.full_name if self.student else None

    __table_args__ = (
        UniqueConstraint("internship_id", "student_id", name="uq_application_internship_student"),
        Index("idx_application_status", "status", "applied_at"),
    )
