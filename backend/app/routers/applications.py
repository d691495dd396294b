"""Applications 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.middleware.auth_middleware import require_roles
from app.models.user import User
from app.schemas.application import ApplicationCreate, ApplicationOut, ApplicationStatusUpdate
from app.services import application_service
from app.services.connection_registry import ConnectionRegistry, get_connection_registry

router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.post("", response_model=ApplicationOut, status_code=status.HTTP_201_CREATED)
def submit_application(
    data: ApplicationCreate,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(require_roles("student")),
):
    return application_service.submit_application(db, data, current_user, registry)


@router.get("/my", response_model=List[ApplicationOut])
def my_applications(db: Session = Depends(get_db), current_user: User = Depends(require_roles("student"))):
    return application_service.list_my_applications(db, current_user)


@router.get("/company", response_model=List[ApplicationOut])
def company_applications(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("company")),
):
    return application_service.list_company_applications(db, current_user, status)


@router.put("/{application_id}/status", response_model=ApplicationOut)
def update_status(
    application_id: int,
    data: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(require_roles("company")),
):
    return application_service.update_status(db, application_id, data, current_user, registry)


@router.put("/{application_id}/withdraw", response_model=ApplicationOut)
def withdraw(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("student")),
):
    return application_service.withdraw(db, application_id, current_user)
