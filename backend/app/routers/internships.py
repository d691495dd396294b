"""Internships 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.middleware.auth_middleware import require_roles
from app.models.user import User
from app.schemas.internship import InternshipCreate, InternshipOut, InternshipUpdate
from app.services import internship_service
from app.services.connection_registry import ConnectionRegistry, get_connection_registry

router = APIRouter(prefix="/api/internships", tags=["internships"])


@router.get("", response_model=List[InternshipOut])
def list_internships(
    search: Optional[str] = None,
    location_type: Optional[str] = None,
    company_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return internship_service.list_published(db, search, location_type, company_id)


@router.get("/mine", response_model=List[InternshipOut])
def list_my_internships(db: Session = Depends(get_db), current_user: User = Depends(require_roles("company"))):
    return internship_service.list_my_internships(db, current_user)


@router.get("/{internship_id}", response_model=InternshipOut)
def get_internship(internship_id: int, db: Session = Depends(get_db)):
    return internship_service.get_internship(db, internship_id)


@router.post("", response_model=InternshipOut, status_code=status.HTTP_201_CREATED)
def create_internship(
    data: InternshipCreate,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(require_roles("company")),
):
    return internship_service.create_internship(db, data, current_user, registry)


@router.put("/{internship_id}", response_model=InternshipOut)
def update_internship(
    internship_id: int,
    data: InternshipUpdate,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(require_roles("company", "admin")),
):
    return internship_service.update_internship(db, internship_id, data, current_user, registry)


@router.delete("/{internship_id}")
def delete_internship(
    internship_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("company", "admin")),
):
    internship_service.delete_internship(db, internship_id, current_user)
    return {"message": "삭제되었습니다."}
