"""Internship 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.helpers import utcnow


class Internship(Base):
    __tablename__ = "internships"

    internship_id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.company_id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    skills_required = Column(Text)  # 콤마 구분 문자열
    field = Column(String(100))
    location = Column(String(200))
    location_type = Column(String(20), default="onsite")  # remote/onsite/hybrid
    duration = Column(String(50))
    stipend = Column(Integer)
    application_deadline = Column(DateTime)
    start_date = Column(Date)
    status = Column(String(20), default="draft")  # draft/published/closed/cancelled
    positions_available = Column(Integer, default=1)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    company = relationship("Company", back_populates="internships")
    applications = relationship("Application", back_populates="internship", cascade="all, delete-orphan")

    @property
    def company_name(self):
        return self.company.name if self.company else None

    __table_args__ = (
        Index("idx_internship_status_deadline", "status", "application_deadline"),
        Index("idx_internship_company", "company_id"),
    )
