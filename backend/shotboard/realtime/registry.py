# shotboard/realtime/registry.py

import logging
import random
from dataclasses import replace
from typing import Any, Dict, List, Optional, Protocol, Sequence

from shotboard.realtime.presence import InMemoryPresenceStore, PresenceEntry, PresenceStore

logger = logging.getLogger(__name__)

PRESENCE_EVENT = "room-users-update"

PALETTE = (
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#14b8a6",
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
)


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...


def envelope(event: str, data: Any) -> Dict[str, Any]:
    return {"event": event, "data": data}


class RoomRegistry:
    """
    Rooms keyed by project id, and who is in them.

    join, leave and broadcast are the only operations that touch connection
    bookkeeping. Socket handles stay in this process; presence lives in the
    injected store, which may be shared.
    """

    def __init__(
        self,
        store: Optional[PresenceStore] = None,
        palette: Sequence[str] = PALETTE,
        rng: Optional[random.Random] = None,
    ):
        self.store = store or InMemoryPresenceStore()
        self.palette = tuple(palette)
        self.rng = rng or random.Random()
        self._connections: Dict[str, Connection] = {}

    def is_member(self, room: str, connection_id: str) -> bool:
        return self.store.get(room, connection_id) is not None

    def presence(self, room: str) -> List[dict]:
        return [entry.to_wire() for entry in self.store.members(room)]

    def refresh(self) -> int:
        """Re-stamp this process's members so a shared store does not expire them."""
        touched = 0
        for room in self.store.rooms():
            for connection_id in list(self._connections):
                if self.is_member(room, connection_id):
                    self.store.touch(room, connection_id)
                    touched += 1
        return touched

    async def join(
        self, room: str, connection_id: str, connection: Connection, email: str
    ) -> PresenceEntry:
        self._connections[connection_id] = connection

        previous = self.store.get(room, connection_id)
        if previous:
            # a re-join keeps its color and its place in the list
            entry = replace(previous, email=email)
        else:
            # colors may collide between members
            entry = PresenceEntry(
                connection_id=connection_id,
                email=email,
                color=self.rng.choice(self.palette),
            )
        self.store.add(room, entry)

        logger.info("%s joined room %s as %s", connection_id, room, email)
        await self.broadcast(room, PRESENCE_EVENT, self.presence(room))
        return entry

    async def leave(self, connection_id: str) -> List[str]:
        """Drop a connection from every room it is in; unknown ids are a no-op."""
        self._connections.pop(connection_id, None)

        left = []
        for room in self.store.rooms():
            if self.store.remove(room, connection_id):
                left.append(room)

        for room in left:
            logger.info("%s left room %s", connection_id, room)
            if self.store.members(room):
                await self.broadcast(room, PRESENCE_EVENT, self.presence(room))
        return left

    async def broadcast(
        self, room: str, event: str, data: Any, exclude: Optional[str] = None
    ) -> int:
        """Fire-and-forget fan-out; returns how many local sends succeeded."""
        message = envelope(event, data)
        delivered = 0

        for entry in self.store.members(room):
            if entry.connection_id == exclude:
                continue
            connection = self._connections.get(entry.connection_id)
            if connection is None:
                # TODO: bridge rooms over Redis pub/sub so members held by other instances receive this
                continue
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("Dropped %s for %s: %s", event, entry.connection_id, e)

        return delivered
