"""Application Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.application import Application
from app.models.internship import Internship
from app.models.user import User
from app.schemas.application import ApplicationCreate, ApplicationStatusUpdate
from app.services import notification_events
from app.services.company_service import get_my_company
from app.services.connection_registry import ConnectionRegistry
from app.utils.helpers import utcnow


def submit_application(
    db: Session, data: ApplicationCreate, current_user: User, registry: Optional[ConnectionRegistry] = None
) -> Application:
    internship = db.query(Internship).filter(Internship.internship_id == data.internship_id).first()
    if not internship:
        raise HTTPException(status_code=404, detail="인턴십 공고를 찾을 수 없습니다.")
    if internship.status != "published":
        raise HTTPException(status_code=400, detail="지원을 받지 않는 공고입니다.")
    if internship.application_deadline and internship.application_deadline < utcnow():
        raise HTTPException(status_code=400, detail="지원 마감일이 지났습니다.")
    exists = db.query(Application).filter(
        Application.internship_id == data.internship_id,
        Application.student_id == current_user.user_id,
    ).first()
    if exists:
        raise HTTPException(status_code=409, detail="이미 지원한 공고입니다.")

    application = Application(
        internship_id=data.internship_id,
        student_id=current_user.user_id,
        cover_letter=data.cover_letter,
        resume_url=data.resume_url,
        status="pending",
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    notification_events.notify_new_application(db, registry, application)
    return application


def list_my_applications(db: Session, current_user: User) -> List[Application]:
    return (
        db.query(Application)
        .filter(Application.student_id == current_user.user_id)
        .order_by(Application.applied_at.desc())
        .all()
    )


def list_company_applications(db: Session, current_user: User, status: Optional[str] = None) -> List[Application]:
    company = get_my_company(db, current_user)
    q = (
        db.query(Application)
        .join(Internship, Internship.internship_id == Application.internship_id)
        .filter(Internship.company_id == company.company_id)
    )
    if status:
        q = q.filter(Application.status == status)
    return q.order_by(Application.applied_at.desc()).all()


def update_status(
    db: Session,
    application_id: int,
    data: ApplicationStatusUpdate,
    current_user: User,
    registry: Optional[ConnectionRegistry] = None,
) -> Application:
    company = get_my_company(db, current_user)
    application = (
        db.query(Application)
        .join(Internship, Internship.internship_id == Application.internship_id)
        .filter(Application.application_id == application_id, Internship.company_id == company.company_id)
        .first()
    )
    if not application:
        raise HTTPException(status_code=404, detail="지원서를 찾을 수 없거나 권한이 없습니다.")
    if application.status == "withdrawn":
        raise HTTPException(status_code=400, detail="철회된 지원서는 상태를 변경할 수 없습니다.")

    application.status = data.status
    application.response_message = data.response_message
    application.reviewed_at = utcnow()
    db.commit()
    db.refresh(application)
    notification_events.notify_application_status_change(db, registry, application)
    return application


def withdraw(db: Session, application_id: int, current_user: User) -> Application:
    application = db.query(Application).filter(
        Application.application_id == application_id,
        Application.student_id == current_user.user_id,
    ).first()
    if not application:
        raise HTTPException(status_code=404, detail="지원서를 찾을 수 없거나 권한이 없습니다.")
    if application.status in ("accepted", "rejected", "withdrawn"):
        raise HTTPException(status_code=400, detail="이미 처리가 끝난 지원서입니다.")
    application.status = "withdrawn"
    db.commit()
    db.refresh(application)
    return application
