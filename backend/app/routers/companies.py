"""Companies 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.middleware.auth_middleware import require_roles
from app.models.user import User
from app.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate
from app.services import company_service

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("", response_model=List[CompanyOut])
def list_companies(search: Optional[str] = None, db: Session = Depends(get_db)):
    return company_service.list_companies(db, search)


@router.get("/profile/me", response_model=CompanyOut)
def get_my_company(db: Session = Depends(get_db), current_user: User = Depends(require_roles("company"))):
    return company_service.get_my_company(db, current_user)


@router.post("/profile", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company(
    data: CompanyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("company")),
):
    return company_service.create_company(db, data, current_user)


@router.put("/profile", response_model=CompanyOut)
def update_company(
    data: CompanyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("company")),
):
    return company_service.update_company(db, data, current_user)


@router.get("/{company_id}", response_model=CompanyOut)
def get_company(company_id: int, db: Session = Depends(get_db)):
    return company_service.get_company(db, company_id)
