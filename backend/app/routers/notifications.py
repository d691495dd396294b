"""Notifications 기능 API 라우터입니다. 알림 목록/읽음/삭제와 실시간 스트림(SSE)을 제공합니다."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.schemas.notification import (
    AnnouncementCreate,
    AnnouncementResult,
    NotificationBulkResult,
    NotificationListOut,
    NotificationReadOut,
    UnreadCountOut,
)
from app.services import notification_events, notification_service
from app.services.connection_registry import (
    ConnectionRegistry,
    StreamConnection,
    get_connection_registry,
    stream_events,
)
from app.middleware.auth_middleware import StreamUser, get_current_user, get_stream_user, require_roles
from app.models.user import User
from app.utils.helpers import total_pages

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("/stream")
async def notification_stream(
    current_user: StreamUser = Depends(get_stream_user),
    registry: ConnectionRegistry = Depends(get_connection_registry),
):
    connection = StreamConnection()
    connection_id = registry.register(current_user.user_id, current_user.role, connection)
    return StreamingResponse(
        stream_events(registry, connection_id, connection),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("", response_model=NotificationListOut)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.NOTIFICATION_PAGE_LIMIT_DEFAULT, ge=1, le=settings.NOTIFICATION_PAGE_LIMIT_MAX),
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = notification_service.get_notifications(db, current_user.user_id, page, limit, unread_only)
    return {
        "notifications": items,
        "pagination": {"page": page, "limit": limit, "total": total, "total_pages": total_pages(total, limit)},
    }


@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"unread_count": notification_service.get_unread_count(db, current_user.user_id)}


@router.put("/read-all", response_model=NotificationBulkResult)
def mark_all_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    count = notification_service.mark_all_read(db, current_user.user_id)
    return {"message": "모든 알림을 읽음 처리했습니다.", "count": count}


@router.put("/{noti_id}/read", response_model=NotificationReadOut)
def mark_read(noti_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    noti = notification_service.mark_read(db, noti_id, current_user.user_id)
    return {"message": "알림을 읽음 처리했습니다.", "notification": noti}


@router.delete("/clear-all", response_model=NotificationBulkResult)
def clear_all(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    count = notification_service.clear_all(db, current_user.user_id)
    return {"message": "모든 알림을 삭제했습니다.", "count": count}


@router.delete("/{noti_id}")
def delete_notification(noti_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    notification_service.delete_notification(db, noti_id, current_user.user_id)
    return {"message": "알림을 삭제했습니다."}


@router.post("/announcements", response_model=AnnouncementResult)
def create_announcement(
    data: AnnouncementCreate,
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    _current_user: User = Depends(require_roles("admin")),
):
    sent = notification_events.send_system_announcement(
        db, registry, data.title, data.message, data.target_role, data.action_url
    )
    return {"message": "공지 알림을 발송했습니다.", "recipients": len(sent)}
