"""알림 저장/푸시/브로드캐스트 서비스 동작을 검증하는 테스트입니다."""

import pytest

from app.models.notification import Notification
from app.services import notification_service
from app.services.connection_registry import ConnectionRegistry
from app.services.notification_service import broadcast_to_role, notify_safely, send_notification
from tests.conftest import RecordingConnection


def test_send_persists_and_pushes(db, seed_users):
    registry = ConnectionRegistry()
    live = RecordingConnection()
    student = seed_users["student"]
    registry.register(student.user_id, "student", live)

    noti = send_notification(db, registry, student.user_id, "제목", "본문", "success", "/tasks")

    assert noti.id is not None
    assert noti.read_at is None
    assert noti.created_at == noti.updated_at
    (event,) = live.of_type("notification")
    payload = event["notification"]
    assert payload["id"] == noti.id
    assert payload["type"] == "success"
    assert payload["action_url"] == "/tasks"
    assert payload["timestamp"] == payload["created_at"]


def test_send_without_live_connection(db, seed_users):
    noti = send_notification(db, ConnectionRegistry(), seed_users["student"].user_id, "제목", "본문")
    assert db.query(Notification).filter(Notification.id == noti.id).count() == 1


def test_send_rejects_unknown_type(db, seed_users):
    with pytest.raises(ValueError):
        send_notification(db, None, seed_users["student"].user_id, "제목", "본문", "urgent")
    assert db.query(Notification).count() == 0


def test_failed_push_keeps_notification_and_evicts(db, seed_users):
    registry = ConnectionRegistry()
    student = seed_users["student"]
    broken = RecordingConnection(fail=True)
    registry.register(student.user_id, "student", broken)

    noti = send_notification(db, registry, student.user_id, "제목", "본문")

    assert db.query(Notification).filter(Notification.id == noti.id).count() == 1
    assert not registry.is_connected(student.user_id)
    assert broken.closed


def test_broadcast_isolates_push_failures(db, seed_users):
    registry = ConnectionRegistry()
    broken = RecordingConnection(fail=True)
    live = RecordingConnection()
    registry.register(seed_users["student"].user_id, "student", broken)
    registry.register(seed_users["student2"].user_id, "student", live)

    sent = broadcast_to_role(db, registry, "student", "공지", "내용")

    assert len(sent) == 2
    assert len(live.of_type("notification")) == 1
    assert db.query(Notification).count() == 2


def test_broadcast_isolates_persist_failures(db, seed_users, monkeypatch):
    failing_user = seed_users["student"].user_id
    real_send = notification_service.send_notification

    def flaky(db_, registry_, user_id, *args, **kwargs):
        if user_id == failing_user:
            raise RuntimeError("db down")
        return real_send(db_, registry_, user_id, *args, **kwargs)

    monkeypatch.setattr(notification_service, "send_notification", flaky)
    sent = broadcast_to_role(db, None, "student", "공지", "내용")

    assert [n.user_id for n in sent] == [seed_users["student2"].user_id]


def test_broadcast_skips_inactive_users(db, seed_users):
    seed_users["student2"].is_active = False
    db.commit()
    sent = broadcast_to_role(db, None, "student", "공지", "내용")
    assert [n.user_id for n in sent] == [seed_users["student"].user_id]


def test_notify_safely_swallows_errors(db, seed_users):
    assert notify_safely(db, None, seed_users["student"].user_id, "제목", "본문", "bogus") is None
