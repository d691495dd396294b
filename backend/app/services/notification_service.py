"""Notification Service 도메인 서비스 레이어입니다. 알림 저장, 실시간 푸시, 목록/읽음 처리를 담당합니다."""

import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.notification import Notification
from app.models.user import User
from app.schemas.notification import NotificationOut
from app.services.connection_registry import ConnectionRegistry, EVENT_NOTIFICATION
from app.utils.helpers import paginate, utcnow

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = {"info", "success", "warning", "error"}


def serialize_notification(noti: Notification) -> dict:
    payload = NotificationOut.model_validate(noti).model_dump(mode="json")
    payload["timestamp"] = payload["created_at"]
    return payload


def send_notification(
    db: Session,
    registry: Optional[ConnectionRegistry],
    user_id: int,
    title: str,
    message: str,
    noti_type: str = "info",
    action_url: Optional[str] = None,
) -> Notification:
    """알림을 저장하고, 사용자가 스트림에 연결되어 있으면 즉시 푸시합니다.

    저장 실패는 호출자에게 그대로 전파합니다. 푸시 실패는 레지스트리에서 연결을
    정리하는 것으로 끝나며 저장된 알림은 유지됩니다.
    """
    if noti_type not in NOTIFICATION_TYPES:
        raise ValueError(f"unsupported notification type: {noti_type}")

    now = utcnow()
    noti = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=noti_type,
        action_url=action_url,
        read_at=None,
        created_at=now,
        updated_at=now,
    )
    db.add(noti)
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("[notifications] failed to persist notification for user %s", user_id)
        raise
    db.refresh(noti)

    if registry is not None:
        registry.push(user_id, {"type": EVENT_NOTIFICATION, "notification": serialize_notification(noti)})
    return noti


def broadcast_to_role(
    db: Session,
    registry: Optional[ConnectionRegistry],
    role: str,
    title: str,
    message: str,
    noti_type: str = "info",
    action_url: Optional[str] = None,
) -> List[Notification]:
    user_ids = [
        row[0]
        for row in db.query(User.user_id)
        .filter(User.role == role, User.is_active == True)  # noqa: E712
        .order_by(User.user_id)
        .all()
    ]
    sent: List[Notification] = []
    for user_id in user_ids:
        # 수신자 한 명의 실패가 나머지 발송을 막지 않도록 개별 처리한다.
        try:
            sent.append(send_notification(db, registry, user_id, title, message, noti_type, action_url))
        except Exception as exc:
            logger.warning("[notifications] broadcast to user %s (role=%s) failed: %s", user_id, role, exc)
    logger.info("[notifications] broadcast role=%s sent=%s/%s", role, len(sent), len(user_ids))
    return sent


def notify_safely(
    db: Session,
    registry: Optional[ConnectionRegistry],
    user_id: int,
    title: str,
    message: str,
    noti_type: str = "info",
    action_url: Optional[str] = None,
) -> Optional[Notification]:
    # 업무 처리(지원 상태 변경 등)는 알림 실패와 무관하게 성공해야 한다.
    try:
        return send_notification(db, registry, user_id, title, message, noti_type, action_url)
    except Exception as exc:
        logger.warning("[notifications] notification to user %s skipped: %s", user_id, exc)
        return None


def get_notifications(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
) -> Tuple[List[Notification], int]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.read_at.is_(None))
    total = q.count()
    items = (
        q.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(paginate(page, limit))
        .limit(limit)
        .all()
    )
    return items, total


def mark_read(db: Session, noti_id: int, user_id: int) -> Notification:
    now = utcnow()
    updated = (
        db.query(Notification)
        .filter(
            Notification.id == noti_id,
            Notification.user_id == user_id,
            Notification.read_at.is_(None),
        )
        .update({"read_at": now, "updated_at": now}, synchronize_session=False)
    )
    db.commit()
    if not updated:
        raise HTTPException(status_code=404, detail="알림을 찾을 수 없거나 이미 읽음 처리되었습니다.")
    return db.query(Notification).filter(Notification.id == noti_id).first()


def mark_all_read(db: Session, user_id: int) -> int:
    now = utcnow()
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
        .update({"read_at": now, "updated_at": now}, synchronize_session=False)
    )
    db.commit()
    return updated


def delete_notification(db: Session, noti_id: int, user_id: int) -> None:
    deleted = (
        db.query(Notification)
        .filter(Notification.id == noti_id, Notification.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="알림을 찾을 수 없습니다.")


def clear_all(db: Session, user_id: int) -> int:
    deleted = db.query(Notification).filter(Notification.user_id == user_id).delete(synchronize_session=False)
    db.commit()
    return deleted


def get_unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
        .count()
    )
