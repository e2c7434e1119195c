"""NotificationHub — owned registry of live connections and tournament rooms.

One hub is created per process in the FastAPI lifespan and stored on
``app.state.hub``. All registry mutations are synchronous (no await between
read and write), so they are atomic on the event loop without a lock.

Delivery is best-effort and concurrent: each send is bounded by
``send_timeout``, and a send that raises or times out drops that connection
from every room. Nothing is persisted or replayed; clients re-fetch on reconnect.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class LiveConnection(Protocol):
    async def send_json(self, data: Any) -> None: ...


class Notifier(Protocol):
    """What workflows need from the hub — lets unit tests pass an AsyncMock."""

    async def broadcast_to_tournament(self, tournament_id: int, event: dict[str, Any]) -> int: ...

    async def notify_user(self, user_id: int, event: dict[str, Any]) -> int: ...


class NotificationHub:
    def __init__(self, send_timeout: float = 2.0) -> None:
        self._send_timeout = send_timeout
        # connection -> authenticated user id (None until the client authenticates)
        self._connections: dict[LiveConnection, int | None] = {}
        self._rooms: dict[int, set[LiveConnection]] = defaultdict(set)

    # -- lifecycle ----------------------------------------------------------

    def register(self, conn: LiveConnection) -> None:
        self._connections[conn] = None

    def bind_user(self, conn: LiveConnection, user_id: int) -> None:
        if conn not in self._connections:
            raise KeyError("connection is not registered")
        self._connections[conn] = user_id

    def remove(self, conn: LiveConnection) -> None:
        """Drop the connection from every room and from the registry."""
        self._connections.pop(conn, None)
        for tournament_id in list(self._rooms):
            room = self._rooms[tournament_id]
            room.discard(conn)
            if not room:
                del self._rooms[tournament_id]

    # -- subscriptions ------------------------------------------------------

    def subscribe(self, conn: LiveConnection, tournament_id: int) -> None:
        if conn not in self._connections:
            raise KeyError("connection is not registered")
        self._rooms[tournament_id].add(conn)

    def unsubscribe(self, conn: LiveConnection, tournament_id: int) -> None:
        room = self._rooms.get(tournament_id)
        if room is None:
            return
        room.discard(conn)
        if not room:
            del self._rooms[tournament_id]

    # -- fan-out ------------------------------------------------------------

    async def broadcast_to_tournament(self, tournament_id: int, event: dict[str, Any]) -> int:
        targets = list(self._rooms.get(tournament_id, ()))
        return await self._deliver(targets, event)

    async def notify_user(self, user_id: int, event: dict[str, Any]) -> int:
        targets = [conn for conn, uid in self._connections.items() if uid == user_id]
        return await self._deliver(targets, event)

    async def _deliver(self, targets: list[LiveConnection], event: dict[str, Any]) -> int:
        if not targets:
            return 0
        results = await asyncio.gather(
            *(asyncio.wait_for(conn.send_json(event), self._send_timeout) for conn in targets),
            return_exceptions=True,
        )
        delivered = 0
        for conn, outcome in zip(targets, results):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Dropping live connection after failed send of %s: %r",
                    event.get("type"), outcome,
                )
                self.remove(conn)
            else:
                delivered += 1
        return delivered

    # -- introspection ------------------------------------------------------

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def subscriber_count(self, tournament_id: int) -> int:
        return len(self._rooms.get(tournament_id, ()))

    def user_of(self, conn: LiveConnection) -> int | None:
        return self._connections.get(conn)
