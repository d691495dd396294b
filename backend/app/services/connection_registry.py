"""실시간 알림 스트림 연결을 관리하는 프로세스 단위 레지스트리입니다.

- 사용자당 활성 연결은 최대 1개입니다. 같은 사용자가 새로 연결하면 기존 연결에
  ``reconnected`` 이벤트를 보낸 뒤 닫고 새 연결로 교체합니다.
- 동기 라우터와 스케줄러 스레드에서 동시에 호출되므로 내부 맵은 lock으로 보호합니다.
- 전송(write)에 실패한 연결은 끊긴 것으로 보고 즉시 제거합니다. 알림 레코드 자체는
  DB에 남아 있으므로 푸시 실패가 데이터 유실로 이어지지는 않습니다.
- 단일 프로세스 메모리에만 존재합니다. 여러 인스턴스로 확장하면 다른 인스턴스에
  연결된 사용자에게는 푸시가 전달되지 않습니다.
"""

import asyncio
import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol

from fastapi import Request

logger = logging.getLogger(__name__)

EVENT_CONNECTED = "connected"
EVENT_NOTIFICATION = "notification"
EVENT_HEARTBEAT = "heartbeat"
EVENT_RECONNECTED = "reconnected"
EVENT_ERROR = "error"

_CLOSE = object()


class ConnectionClosedError(Exception):
    """이미 닫힌 스트림에 쓰려고 할 때 발생합니다."""


class PushConnection(Protocol):
    def send(self, event: Dict[str, Any]) -> None: ...

    def close(self) -> None: ...


def encode_event(event: Dict[str, Any]) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False, default=str)}\n\n"


class StreamConnection:
    """이벤트 루프에 묶인 SSE 출력 핸들입니다. send()는 어느 스레드에서 호출해도 됩니다."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: Dict[str, Any]) -> None:
        if self._closed:
            raise ConnectionClosedError("stream already closed")
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, dict(event))
        except RuntimeError as exc:
            # 이벤트 루프가 이미 종료된 경우
            self._closed = True
            raise ConnectionClosedError(str(exc)) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, _CLOSE)
        except RuntimeError:
            pass

    async def events(self) -> AsyncIterator[Dict[str, Any]]:
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                return
            yield item


@dataclass
class LiveConnection:
    connection_id: str
    user_id: int
    role: str
    connection: PushConnection
    connected_at: float


class ConnectionRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._connections: Dict[str, LiveConnection] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def register(self, user_id: int, role: str, connection: PushConnection) -> str:
        connection_id = uuid.uuid4().hex
        entry = LiveConnection(
            connection_id=connection_id,
            user_id=int(user_id),
            role=role or "",
            connection=connection,
            connected_at=time.time(),
        )
        with self._lock:
            superseded = [c for c in self._connections.values() if c.user_id == entry.user_id]
            for old in superseded:
                del self._connections[old.connection_id]
            self._connections[connection_id] = entry

        for old in superseded:
            try:
                old.connection.send({
                    "type": EVENT_RECONNECTED,
                    "message": "다른 세션에서 알림 스트림에 연결되었습니다.",
                })
            except Exception as exc:
                logger.warning("[notifications] failed to notify superseded connection %s: %s", old.connection_id, exc)
            finally:
                old.connection.close()
            logger.info("[notifications] closed previous connection %s for user %s", old.connection_id, old.user_id)

        logger.info("[notifications] connection %s opened for user %s", connection_id, entry.user_id)
        return connection_id

    def unregister(self, connection_id: str) -> bool:
        with self._lock:
            entry = self._connections.pop(connection_id, None)
        if entry is None:
            return False
        entry.connection.close()
        logger.info("[notifications] connection %s closed for user %s", connection_id, entry.user_id)
        return True

    def get(self, user_id: int) -> Optional[LiveConnection]:
        with self._lock:
            for entry in self._connections.values():
                if entry.user_id == int(user_id):
                    return entry
        return None

    def is_connected(self, user_id: int) -> bool:
        return self.get(user_id) is not None

    def connected_user_ids(self) -> List[int]:
        with self._lock:
            return sorted(entry.user_id for entry in self._connections.values())

    def _evict(self, entry: LiveConnection, reason: str) -> None:
        with self._lock:
            current = self._connections.get(entry.connection_id)
            if current is entry:
                del self._connections[entry.connection_id]
        try:
            entry.connection.close()
        except Exception:
            logger.debug("[notifications] close after %s failed for %s", reason, entry.connection_id)
        logger.warning("[notifications] evicted connection %s for user %s (%s)", entry.connection_id, entry.user_id, reason)

    def _deliver(self, entry: LiveConnection, event: Dict[str, Any], reason: str) -> bool:
        try:
            entry.connection.send(event)
            return True
        except Exception as exc:
            logger.warning("[notifications] %s write to %s failed: %s", reason, entry.connection_id, exc)
            self._evict(entry, reason)
            return False

    def push(self, user_id: int, event: Dict[str, Any]) -> bool:
        """사용자의 활성 연결로 이벤트를 보냅니다. 연결이 없거나 전송에 실패하면 False."""
        entry = self.get(user_id)
        if entry is None:
            return False
        return self._deliver(entry, event, "push")

    def heartbeat(self) -> int:
        with self._lock:
            entries = list(self._connections.values())
        alive = 0
        for entry in entries:
            event = {"type": EVENT_HEARTBEAT, "timestamp": int(time.time() * 1000)}
            if self._deliver(entry, event, "heartbeat"):
                alive += 1
        return alive

    def close_all(self) -> None:
        with self._lock:
            entries = list(self._connections.values())
            self._connections.clear()
        for entry in entries:
            try:
                entry.connection.close()
            except Exception:
                logger.debug("[notifications] close failed for %s", entry.connection_id)


async def stream_events(registry: ConnectionRegistry, connection_id: str, connection: StreamConnection):
    """연결 하나의 SSE 프레임을 생성합니다. 클라이언트가 끊기면 레지스트리에서 제거됩니다."""
    try:
        yield encode_event({
            "type": EVENT_CONNECTED,
            "message": "알림 스트림에 연결되었습니다.",
            "connection_id": connection_id,
        })
        async for event in connection.events():
            yield encode_event(event)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[notifications] stream %s failed", connection_id)
        yield encode_event({"type": EVENT_ERROR, "message": str(exc)})
    finally:
        registry.unregister(connection_id)


def get_connection_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.connection_registry
