"""Company Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.company import Company
from app.models.user import User
from app.schemas.company import CompanyCreate, CompanyUpdate


def list_companies(db: Session, search: Optional[str] = None) -> List[Company]:
    q = db.query(Company)
    if search:
        q = q.filter(Company.name.ilike(f"%{search.strip()}%"))
    return q.order_by(Company.name).all()


def get_company(db: Session, company_id: int) -> Company:
    company = db.query(Company).filter(Company.company_id == company_id).first()
    if not company:
        raise HTTPException(status_code=404, detail="기업을 찾을 수 없습니다.")
    return company


def get_my_company(db: Session, current_user: User) -> Company:
    company = db.query(Company).filter(Company.user_id == current_user.user_id).first()
    if not company:
        raise HTTPException(status_code=404, detail="기업 프로필이 등록되지 않았습니다.")
    return company


def create_company(db: Session, data: CompanyCreate, current_user: User) -> Company:
    if db.query(Company).filter(Company.user_id == current_user.user_id).first():
        raise HTTPException(status_code=409, detail="이미 기업 프로필이 등록되어 있습니다.")
    company = Company(user_id=current_user.user_id, **data.model_dump())
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def update_company(db: Session, data: CompanyUpdate, current_user: User) -> Company:
    company = get_my_company(db, current_user)
    for k, v in data.model_dump(exclude_unset=True).items():
        setattr(company, k, v)
    db.commit()
    db.refresh(company)
    return company
