"""Reminder Service 도메인 서비스 레이어입니다. 주기적 sweep으로 마감/대기/저조 알림을 발송합니다.

sweep마다 "리마인더가 필요한" 대상을 조회하고, reminder_log로 같은 대상에 대한
중복 발송을 막은 뒤 알림을 보냅니다. 중복 판정은 (user, kind, entity)의 마지막
발송 시각이 억제 기간 안에 있는지로 하고, 동시 실행에 대비해 기간 버킷 단위의
unique 제약을 함께 둡니다.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal
from app.models.application import Application
from app.models.company import Company
from app.models.internship import Internship
from app.models.notification import ReminderLog
from app.models.task import Task
from app.models.user import User
from app.services import notification_events
from app.services.connection_registry import ConnectionRegistry
from app.services.notification_service import send_notification
from app.utils.helpers import days_between, utcnow

logger = logging.getLogger(__name__)

TASK_DEADLINE = "task_deadline"
INTERNSHIP_DEADLINE = "internship_deadline"
PENDING_APPLICATION = "pending_application"
LOW_APPLICATION_COUNT = "low_application_count"

_EPOCH = datetime(1970, 1, 1)


def period_key(now: datetime, window: timedelta) -> int:
    return int((now - _EPOCH).total_seconds() // window.total_seconds())


def already_reminded(db: Session, user_id: int, kind: str, entity_id: int, window: timedelta, now: datetime) -> bool:
    return (
        db.query(ReminderLog.reminder_id)
        .filter(
            ReminderLog.user_id == user_id,
            ReminderLog.reminder_kind == kind,
            ReminderLog.entity_id == entity_id,
            ReminderLog.sent_at > now - window,
        )
        .first()
        is not None
    )


def send_reminder(
    db: Session,
    registry: Optional[ConnectionRegistry],
    *,
    user_id: int,
    kind: str,
    entity_id: int,
    window: timedelta,
    now: datetime,
    title: str,
    message: str,
    noti_type: str,
    action_url: Optional[str] = None,
) -> bool:
    if already_reminded(db, user_id, kind, entity_id, window, now):
        return False
    db.add(ReminderLog(
        user_id=user_id,
        reminder_kind=kind,
        entity_id=entity_id,
        period_key=period_key(now, window),
        sent_at=now,
    ))
    try:
        db.flush()
    except IntegrityError:
        # 같은 기간 버킷에 다른 실행이 먼저 기록함
        db.rollback()
        return False
    # 로그와 알림은 send_notification의 commit으로 함께 확정된다.
    send_notification(db, registry, user_id, title, message, noti_type, action_url)
    return True


def sweep_task_deadlines(db: Session, registry: Optional[ConnectionRegistry], now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    window = timedelta(days=settings.TASK_DEADLINE_DEDUP_DAYS)
    rows = (
        db.query(Task.task_id, Task.title, Task.due_date, Task.assigned_to)
        .filter(
            Task.status.notin_(("completed", "submitted")),
            Task.due_date.isnot(None),
            Task.due_date > now,
            Task.due_date <= now + timedelta(days=settings.TASK_DEADLINE_LOOKAHEAD_DAYS),
        )
        .all()
    )
    sent = 0
    for task_id, title, due_date, user_id in rows:
        noti_title, message, noti_type = notification_events.task_deadline_text(title, days_between(now, due_date))
        if send_reminder(
            db, registry,
            user_id=user_id, kind=TASK_DEADLINE, entity_id=task_id, window=window, now=now,
            title=noti_title, message=message, noti_type=noti_type, action_url="/tasks",
        ):
            sent += 1
    logger.info("[reminders] task deadline sweep: candidates=%s sent=%s", len(rows), sent)
    return sent


def sweep_internship_deadlines(db: Session, registry: Optional[ConnectionRegistry], now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    window = timedelta(days=settings.INTERNSHIP_DEADLINE_DEDUP_DAYS)
    rows = (
        db.query(Internship.internship_id, Internship.title, Internship.application_deadline, Company.user_id)
        .join(Company, Company.company_id == Internship.company_id)
        .filter(
            Internship.status == "published",
            Internship.application_deadline.isnot(None),
            Internship.application_deadline > now,
            Internship.application_deadline <= now + timedelta(days=settings.INTERNSHIP_DEADLINE_LOOKAHEAD_DAYS),
        )
        .all()
    )
    sent = 0
    for internship_id, title, deadline, owner_id in rows:
        noti_title, message, noti_type = notification_events.internship_deadline_text(title, days_between(now, deadline))
        if send_reminder(
            db, registry,
            user_id=owner_id, kind=INTERNSHIP_DEADLINE, entity_id=internship_id, window=window, now=now,
            title=noti_title, message=message, noti_type=noti_type,
            action_url=f"/my-internships?highlight={internship_id}",
        ):
            sent += 1
    logger.info("[reminders] internship deadline sweep: candidates=%s sent=%s", len(rows), sent)
    return sent


def sweep_pending_applications(db: Session, registry: Optional[ConnectionRegistry], now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    window = timedelta(days=settings.PENDING_APPLICATION_DEDUP_DAYS)
    rows = (
        db.query(
            Application.application_id,
            Application.applied_at,
            User.full_name,
            Internship.title,
            Company.user_id,
        )
        .join(User, User.user_id == Application.student_id)
        .join(Internship, Internship.internship_id == Application.internship_id)
        .join(Company, Company.company_id == Internship.company_id)
        .filter(
            Application.status == "pending",
            Application.applied_at <= now - timedelta(days=settings.PENDING_APPLICATION_MIN_DAYS),
        )
        .all()
    )
    sent = 0
    for application_id, applied_at, student_name, internship_title, owner_id in rows:
        noti_title, message, noti_type = notification_events.pending_application_text(
            student_name, internship_title, days_between(applied_at, now)
        )
        if send_reminder(
            db, registry,
            user_id=owner_id, kind=PENDING_APPLICATION, entity_id=application_id, window=window, now=now,
            title=noti_title, message=message, noti_type=noti_type,
            action_url=f"/applications?highlight={application_id}",
        ):
            sent += 1
    logger.info("[reminders] pending application sweep: candidates=%s sent=%s", len(rows), sent)
    return sent


def sweep_low_application_counts(db: Session, registry: Optional[ConnectionRegistry], now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    window = timedelta(days=settings.LOW_APPLICATION_DEDUP_DAYS)
    application_count = (
        db.query(func.count(Application.application_id))
        .filter(Application.internship_id == Internship.internship_id)
        .correlate(Internship)
        .scalar_subquery()
    )
    rows = (
        db.query(
            Internship.internship_id,
            Internship.title,
            Internship.created_at,
            Company.user_id,
            application_count.label("application_count"),
        )
        .join(Company, Company.company_id == Internship.company_id)
        .filter(
            Internship.status == "published",
            Internship.created_at <= now - timedelta(days=settings.LOW_APPLICATION_MIN_DAYS_ACTIVE),
            application_count < settings.LOW_APPLICATION_THRESHOLD,
        )
        .all()
    )
    sent = 0
    for internship_id, title, created_at, owner_id, count in rows:
        noti_title, message, noti_type = notification_events.low_application_text(
            title, int(count or 0), days_between(created_at, now)
        )
        if send_reminder(
            db, registry,
            user_id=owner_id, kind=LOW_APPLICATION_COUNT, entity_id=internship_id, window=window, now=now,
            title=noti_title, message=message, noti_type=noti_type,
            action_url=f"/my-internships?highlight={internship_id}",
        ):
            sent += 1
    logger.info("[reminders] low application sweep: candidates=%s sent=%s", len(rows), sent)
    return sent


def run_sweep(name: str, sweep: Callable[..., int], registry: Optional[ConnectionRegistry]) -> Optional[int]:
    """스케줄러 job 진입점. sweep 하나의 실패가 다른 sweep이나 타이머를 멈추지 않도록 여기서 처리합니다."""
    db = SessionLocal()
    try:
        return sweep(db, registry)
    except Exception:
        db.rollback()
        logger.exception("[reminders] %s sweep failed", name)
        return None
    finally:
        db.close()
