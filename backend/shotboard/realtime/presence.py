"""
Presence backends for the room registry.

A store maps room (project id) -> connection id -> presence entry. The
in-memory store serves a single process; the Redis store shares presence
between several API instances.
"""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from redis import Redis


@dataclass(frozen=True)
class PresenceEntry:
    connection_id: str
    email: str
    color: str
    joined_at: float = field(default_factory=time.time)

    def to_wire(self) -> dict:
        return {"email": self.email, "color": self.color}


class PresenceStore(ABC):

    @abstractmethod
    def add(self, room: str, entry: PresenceEntry) -> None:
        pass

    @abstractmethod
    def remove(self, room: str, connection_id: str) -> bool:
        """Returns True when an entry was removed."""

    @abstractmethod
    def get(self, room: str, connection_id: str) -> Optional[PresenceEntry]:
        pass

    @abstractmethod
    def members(self, room: str) -> List[PresenceEntry]:
        """Entries in join order."""

    @abstractmethod
    def rooms(self) -> List[str]:
        pass

    def touch(self, room: str, connection_id: str) -> None:
        """Mark a member as still connected; only shared stores expire members."""


class InMemoryPresenceStore(PresenceStore):

    def __init__(self):
        self._rooms: Dict[str, Dict[str, PresenceEntry]] = {}

    def add(self, room: str, entry: PresenceEntry) -> None:
        self._rooms.setdefault(room, {})[entry.connection_id] = entry

    def remove(self, room: str, connection_id: str) -> bool:
        members = self._rooms.get(room)
        if not members or connection_id not in members:
            return False

        del members[connection_id]
        if not members:
            del self._rooms[room]
        return True

    def get(self, room: str, connection_id: str) -> Optional[PresenceEntry]:
        return self._rooms.get(room, {}).get(connection_id)

    def members(self, room: str) -> List[PresenceEntry]:
        return list(self._rooms.get(room, {}).values())

    def rooms(self) -> List[str]:
        return list(self._rooms)


class RedisPresenceStore(PresenceStore):
    """
    One hash per room plus a set of live room names.

    Each entry carries a seen_at stamp that its instance refreshes with
    touch(). Entries older than ttl belong to an instance that died without
    cleaning up; they are pruned whenever a room is read.
    """

    def __init__(
        self,
        client: Redis,
        prefix: str = "shotboard:presence",
        ttl: float = 90.0,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.prefix = prefix
        self.ttl = ttl
        self.clock = clock

    def _rooms_key(self) -> str:
        return f"{self.prefix}:rooms"

    def _room_key(self, room: str) -> str:
        return f"{self.prefix}:room:{room}"

    def _write(self, room: str, entry: PresenceEntry) -> None:
        value = json.dumps({
            "email": entry.email,
            "color": entry.color,
            "joined_at": entry.joined_at,
            "seen_at": self.clock(),
        })
        pipe = self.client.pipeline()
        pipe.hset(self._room_key(room), entry.connection_id, value)
        pipe.sadd(self._rooms_key(), room)
        pipe.execute()

    def add(self, room: str, entry: PresenceEntry) -> None:
        self._write(room, entry)

    def touch(self, room: str, connection_id: str) -> None:
        entry = self.get(room, connection_id)
        if entry:
            self._write(room, entry)

    def remove(self, room: str, connection_id: str) -> bool:
        removed = self.client.hdel(self._room_key(room), connection_id)
        self._forget_if_empty(room)
        return bool(removed)

    def get(self, room: str, connection_id: str) -> Optional[PresenceEntry]:
        raw = self.client.hget(self._room_key(room), connection_id)
        if not raw:
            return None
        data = json.loads(raw)
        if self._is_stale(data):
            self.remove(room, connection_id)
            return None
        return self._decode(connection_id, data)

    def members(self, room: str) -> List[PresenceEntry]:
        entries = []
        for connection_id, raw in self.client.hgetall(self._room_key(room)).items():
            data = json.loads(raw)
            if self._is_stale(data):
                self.client.hdel(self._room_key(room), connection_id)
                continue
            entries.append(self._decode(connection_id, data))

        if not entries:
            self._forget_if_empty(room)
        return sorted(entries, key=lambda e: e.joined_at)

    def rooms(self) -> List[str]:
        rooms = sorted(self.client.smembers(self._rooms_key()))
        return [room for room in rooms if self.members(room)]

    def _is_stale(self, data: dict) -> bool:
        return self.clock() - data.get("seen_at", 0.0) > self.ttl

    def _forget_if_empty(self, room: str) -> None:
        if not self.client.hlen(self._room_key(room)):
            self.client.srem(self._rooms_key(), room)

    @staticmethod
    def _decode(connection_id, data: dict) -> PresenceEntry:
        if isinstance(connection_id, bytes):
            connection_id = connection_id.decode()
        return PresenceEntry(
            connection_id=connection_id,
            email=data["email"],
            color=data["color"],
            joined_at=data.get("joined_at", 0.0),
        )
