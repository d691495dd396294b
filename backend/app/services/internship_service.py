"""Internship Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.internship import Internship
from app.models.user import User
from app.schemas.internship import InternshipCreate, InternshipUpdate
from app.services import notification_events
from app.services.company_service import get_my_company
from app.services.connection_registry import ConnectionRegistry
from app.utils.permissions import is_admin


def list_published(
    db: Session,
    search: Optional[str] = None,
    location_type: Optional[str] = None,
    company_id: Optional[int] = None,
) -> List[Internship]:
    q = db.query(Internship).filter(Internship.status == "published")
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(Internship.title.ilike(pattern) | Internship.description.ilike(pattern))
    if location_type:
        q = q.filter(Internship.location_type == location_type)
    if company_id:
        q = q.filter(Internship.company_id == company_id)
    return q.order_by(Internship.created_at.desc()).all()


def list_my_internships(db: Session, current_user: User) -> List[Internship]:
    company = get_my_company(db, current_user)
    return (
        db.query(Internship)
        .filter(Internship.company_id == company.company_id)
        .order_by(Internship.created_at.desc())
        .all()
    )


def get_internship(db: Session, internship_id: int) -> Internship:
    internship = db.query(Internship).filter(Internship.internship_id == internship_id).first()
    if not internship:
        raise HTTPException(status_code=404, detail="인턴십 공고를 찾을 수 없습니다.")
    return internship


def _get_owned_internship(db: Session, internship_id: int, current_user: User) -> Internship:
    internship = get_internship(db, internship_id)
    if is_admin(current_user):
        return internship
    company = get_my_company(db, current_user)
    if internship.company_id != company.company_id:
        raise HTTPException(status_code=404, detail="인턴십 공고를 찾을 수 없거나 권한이 없습니다.")
    return internship


def _announce_publication(db: Session, registry: Optional[ConnectionRegistry], internship: Internship):
    notification_events.notify_new_internship_posting(db, registry, internship)
    notification_events.notify_internship_published(db, registry, internship)


def create_internship(
    db: Session, data: InternshipCreate, current_user: User, registry: Optional[ConnectionRegistry] = None
) -> Internship:
    company = get_my_company(db, current_user)
    internship = Internship(company_id=company.company_id, **data.model_dump())
    db.add(internship)
    db.commit()
    db.refresh(internship)
    if internship.status == "published":
        _announce_publication(db, registry, internship)
    return internship


def update_internship(
    db: Session,
    internship_id: int,
    data: InternshipUpdate,
    current_user: User,
    registry: Optional[ConnectionRegistry] = None,
) -> Internship:
    internship = _get_owned_internship(db, internship_id, current_user)
    updates = data.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="변경할 항목이 없습니다.")
    was_published = internship.status == "published"
    for k, v in updates.items():
        setattr(internship, k, v)
    db.commit()
    db.refresh(internship)
    if internship.status == "published" and not was_published:
        _announce_publication(db, registry, internship)
    return internship


def delete_internship(db: Session, internship_id: int, current_user: User):
    internship = _get_owned_internship(db, internship_id, current_user)
    db.delete(internship)
    db.commit()
