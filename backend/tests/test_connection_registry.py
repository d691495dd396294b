"""실시간 연결 레지스트리와 SSE 스트림 생성기 동작을 검증하는 테스트입니다."""

import asyncio
import json
import threading

import pytest

from app.middleware.auth_middleware import get_stream_user
from app.services.auth_service import create_access_token
from app.services.connection_registry import (
    ConnectionClosedError,
    ConnectionRegistry,
    StreamConnection,
    encode_event,
    stream_events,
)
from app.main import app
from tests.conftest import RecordingConnection, TestingSession, engine


def _decode(frame: str) -> dict:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: "):].strip())


def test_encode_event_frame():
    frame = encode_event({"type": "heartbeat", "message": "안녕"})
    assert frame == 'data: {"type": "heartbeat", "message": "안녕"}\n\n'


def test_one_connection_per_user():
    registry = ConnectionRegistry()
    first = RecordingConnection()
    second = RecordingConnection()

    first_id = registry.register(1, "student", first)
    second_id = registry.register(1, "student", second)

    assert first_id != second_id
    assert len(registry) == 1
    assert registry.get(1).connection is second
    assert [e["type"] for e in first.events] == ["reconnected"]
    assert first.closed
    assert not second.closed


def test_unregister_old_connection_keeps_new_one():
    registry = ConnectionRegistry()
    old_id = registry.register(1, "student", RecordingConnection())
    registry.register(1, "student", RecordingConnection())

    assert registry.unregister(old_id) is False
    assert registry.is_connected(1)


def test_push_to_unknown_user():
    assert ConnectionRegistry().push(42, {"type": "notification"}) is False


def test_push_failure_evicts_connection():
    registry = ConnectionRegistry()
    broken = RecordingConnection(fail=True)
    registry.register(7, "company", broken)

    assert registry.push(7, {"type": "notification"}) is False
    assert not registry.is_connected(7)
    assert broken.closed


def test_heartbeat_prunes_dead_connections():
    registry = ConnectionRegistry()
    alive = RecordingConnection()
    registry.register(1, "student", alive)
    registry.register(2, "student", RecordingConnection(fail=True))

    assert registry.heartbeat() == 1
    assert registry.connected_user_ids() == [1]
    (beat,) = alive.of_type("heartbeat")
    assert isinstance(beat["timestamp"], int)


def test_close_all():
    registry = ConnectionRegistry()
    conns = [RecordingConnection(), RecordingConnection()]
    registry.register(1, "student", conns[0])
    registry.register(2, "admin", conns[1])

    registry.close_all()
    assert len(registry) == 0
    assert all(c.closed for c in conns)


def test_stream_yields_connected_then_pushed_events():
    registry = ConnectionRegistry()

    async def scenario():
        connection = StreamConnection()
        connection_id = registry.register(5, "student", connection)
        stream = stream_events(registry, connection_id, connection)

        first = _decode(await stream.__anext__())
        assert first["type"] == "connected"
        assert first["connection_id"] == connection_id

        # 스케줄러 스레드에서 푸시하는 경우
        pusher = threading.Thread(target=registry.push, args=(5, {"type": "notification", "notification": {"id": 1}}))
        pusher.start()
        pusher.join()

        second = _decode(await asyncio.wait_for(stream.__anext__(), timeout=2))
        assert second == {"type": "notification", "notification": {"id": 1}}

        await stream.aclose()
        assert not registry.is_connected(5)

    asyncio.run(scenario())


def test_superseded_stream_receives_reconnected_and_ends():
    registry = ConnectionRegistry()

    async def scenario():
        old = StreamConnection()
        old_id = registry.register(9, "student", old)
        old_stream = stream_events(registry, old_id, old)
        await old_stream.__anext__()

        new = StreamConnection()
        new_id = registry.register(9, "student", new)

        frames = [frame async for frame in old_stream]
        assert [_decode(f)["type"] for f in frames] == ["reconnected"]
        assert registry.get(9).connection_id == new_id

    asyncio.run(scenario())


def test_stream_connection_rejects_send_after_close():
    async def scenario():
        connection = StreamConnection()
        connection.close()
        with pytest.raises(ConnectionClosedError):
            connection.send({"type": "heartbeat"})

    asyncio.run(scenario())


def test_stream_user_accepts_query_token(seed_users):
    student = seed_users["student"]
    user = get_stream_user(
        token=create_access_token(student.user_id), credentials=None, session_factory=TestingSession
    )
    assert user.user_id == student.user_id
    assert user.role == "student"


def _stream_scope(token: str) -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/api/notifications/stream",
        "raw_path": b"/api/notifications/stream",
        "root_path": "",
        "query_string": f"token={token}".encode(),
        "headers": [(b"host", b"testserver")],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }


def test_open_stream_does_not_hold_db_connection(db, seed_users, registry):
    student = seed_users["student"]
    token = create_access_token(student.user_id)
    db.close()
    baseline = engine.pool.checkedout()

    async def scenario():
        frames = []
        first_frame = asyncio.Event()
        disconnected = asyncio.Event()

        async def receive():
            await disconnected.wait()
            return {"type": "http.disconnect"}

        async def send(message):
            if message["type"] == "http.response.start":
                frames.append(message["status"])
            elif message["type"] == "http.response.body" and message.get("body"):
                frames.append(_decode(message["body"].decode()))
                first_frame.set()

        request = asyncio.create_task(app(_stream_scope(token), receive, send))
        await asyncio.wait_for(first_frame.wait(), timeout=5)
        during = engine.pool.checkedout()
        connected = registry.is_connected(student.user_id)

        disconnected.set()
        await asyncio.wait_for(request, timeout=5)
        return frames, during, connected

    frames, during, connected = asyncio.run(scenario())

    assert frames[0] == 200
    assert frames[1]["type"] == "connected"
    assert connected
    assert during == baseline
    assert not registry.is_connected(student.user_id)
