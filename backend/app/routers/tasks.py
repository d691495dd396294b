from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.schemas.task import TaskCreate, TaskOut, TaskReject, TaskSubmit, TaskUpdate
from app.services import task_service
from app.services.connection_registry import ConnectionRegistry, get_connection_registry
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskOut])
def list_tasks(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return task_service.get_tasks(db, current_user, status)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(require_roles("admin")),
):
    return task_service.create_task(db, data, current_user, registry)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.get_task(db, task_id, current_user)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return task_service.update_task(db, task_id, data, current_user)


@router.post("/{task_id}/submit", response_model=TaskOut)
def submit_task(
    task_id: int,
    data: TaskSubmit,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(require_roles("student")),
):
    return task_service.submit_task(db, task_id, data, current_user, registry)


@router.post("/{task_id}/reject", response_model=TaskOut)
def reject_task(
    task_id: int,
    data: TaskReject,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    current_user: User = Depends(require_roles("admin")),
):
    return task_service.reject_task(db, task_id, data, current_user, registry)


@router.delete("/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_roles("admin"))):
    task_service.delete_task(db, task_id)
    return {"message": "삭제되었습니다."}
