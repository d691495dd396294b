"""Course Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.course import Course, CourseEnrollment
from app.models.user import User
from app.schemas.course import CourseCreate
from app.services import notification_events
from app.services.connection_registry import ConnectionRegistry


def list_courses(db: Session, category: Optional[str] = None) -> List[Course]:
    q = db.query(Course).filter(Course.is_active == True)  # noqa: E712
    if category:
        q = q.filter(Course.category == category)
    return q.order_by(Course.created_at.desc()).all()


def create_course(db: Session, data: CourseCreate, current_user: User) -> Course:
    course = Course(created_by=current_user.user_id, **data.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def enroll(
    db: Session, course_id: int, current_user: User, registry: Optional[ConnectionRegistry] = None
) -> CourseEnrollment:
    course = db.query(Course).filter(Course.course_id == course_id, Course.is_active == True).first()  # noqa: E712
    if not course:
        raise HTTPException(status_code=404, detail="강좌를 찾을 수 없습니다.")
    exists = db.query(CourseEnrollment).filter(
        CourseEnrollment.course_id == course_id,
        CourseEnrollment.user_id == current_user.user_id,
    ).first()
    if exists:
        raise HTTPException(status_code=409, detail="이미 수강 신청한 강좌입니다.")
    enrollment = CourseEnrollment(course_id=course_id, user_id=current_user.user_id)
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    notification_events.notify_course_enrollment(db, registry, current_user.user_id, course.title)
    return enrollment
