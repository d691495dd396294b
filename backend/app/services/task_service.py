"""Task Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate, TaskReject, TaskSubmit, TaskUpdate
from app.services import notification_events
from app.services.connection_registry import ConnectionRegistry
from app.utils.helpers import utcnow
from app.utils.permissions import STUDENT, is_admin


def get_tasks(db: Session, current_user: User, status: Optional[str] = None) -> List[Task]:
    q = db.query(Task)
    if not is_admin(current_user):
        q = q.filter(Task.assigned_to == current_user.user_id)
    if status:
        q = q.filter(Task.status == status)
    return q.order_by(Task.due_date.is_(None), Task.due_date, Task.created_at).all()


def get_task(db: Session, task_id: int, current_user: User) -> Task:
    task = db.query(Task).filter(Task.task_id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="과제를 찾을 수 없습니다.")
    if not is_admin(current_user) and task.assigned_to != current_user.user_id:
        raise HTTPException(status_code=404, detail="과제를 찾을 수 없습니다.")
    return task


def create_task(
    db: Session, data: TaskCreate, current_user: User, registry: Optional[ConnectionRegistry] = None
) -> Task:
    assignee = db.query(User).filter(User.user_id == data.assigned_to, User.is_active == True).first()  # noqa: E712
    if not assignee or assignee.role != STUDENT:
        raise HTTPException(status_code=400, detail="과제는 학생에게만 배정할 수 있습니다.")
    task = Task(assigned_by=current_user.user_id, status="pending", **data.model_dump())
    db.add(task)
    db.commit()
    db.refresh(task)
    notification_events.notify_task_assigned(db, registry, task)
    return task


def update_task(db: Session, task_id: int, data: TaskUpdate, current_user: User) -> Task:
    task = get_task(db, task_id, current_user)
    updates = data.model_dump(exclude_unset=True)
    if not is_admin(current_user):
        # 학생은 진행 상태만 바꿀 수 있다.
        if set(updates) - {"status"} or updates.get("status") not in (None, "pending", "in_progress"):
            raise HTTPException(status_code=403, detail="과제 내용은 관리자만 수정할 수 있습니다.")
    for k, v in updates.items():
        setattr(task, k, v)
    db.commit()
    db.refresh(task)
    return task


def submit_task(
    db: Session, task_id: int, data: TaskSubmit, current_user: User, registry: Optional[ConnectionRegistry] = None
) -> Task:
    task = db.query(Task).filter(Task.task_id == task_id, Task.assigned_to == current_user.user_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="본인에게 배정된 과제를 찾을 수 없습니다.")
    if task.status == "completed":
        raise HTTPException(status_code=400, detail="이미 완료된 과제입니다.")
    task.submission_url = data.submission_url
    task.submission_notes = data.submission_notes
    task.submitted_at = utcnow()
    task.status = "submitted"
    db.commit()
    db.refresh(task)
    notification_events.notify_task_completion(db, registry, current_user.user_id, task.title)
    return task


def reject_task(
    db: Session, task_id: int, data: TaskReject, current_user: User, registry: Optional[ConnectionRegistry] = None
) -> Task:
    task = db.query(Task).filter(Task.task_id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="과제를 찾을 수 없습니다.")
    task.status = "rejected"
    task.feedback = data.feedback
    task.feedback_at = utcnow()
    db.commit()
    db.refresh(task)
    notification_events.notify_task_rejection(db, registry, task)
    return task


def delete_task(db: Session, task_id: int):
    task = db.query(Task).filter(Task.task_id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="과제를 찾을 수 없습니다.")
    db.delete(task)
    db.commit()
