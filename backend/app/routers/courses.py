"""Courses 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User
from app.schemas.course import CourseCreate, CourseOut, EnrollmentOut
from app.services import course_service
from app.services.connection_registry import ConnectionRegistry, get_connection_registry

router = APIRouter(prefix="/api/courses", tags=["courses"])


@router.get("", response_model=List[CourseOut])
def list_courses(
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return course_service.list_courses(db, category)


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    data: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    return course_service.create_course(db, data, current_user)


@router.post("/{course_id}/enroll", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll(
    course_id: int,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(get_current_user),
):
    return course_service.enroll(db, course_id, current_user, registry)
