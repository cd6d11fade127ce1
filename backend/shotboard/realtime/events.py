"""
Relay event catalogue.

Each inbound client event maps to the name peers receive and to its fan-out
scope. Payload models only gate delivery; the relayed payload is what the
client sent, minus projectId.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, field_validator

JOIN_EVENT = "join-project"
JOIN_DENIED_EVENT = "join-denied"
PROJECT_UPDATED_EVENT = "project-updated"


class Scope(str, enum.Enum):
    peers = "peers"  # everyone in the room except the sender
    room = "room"  # everyone in the room, sender included


class RoomEvent(BaseModel):
    projectId: str

    class Config:
        extra = "allow"

    @field_validator("projectId", mode="before")
    @classmethod
    def project_id_as_str(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("projectId must be a string or an integer")
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            # 1.5 must not land in room "1"
            if not value.is_integer():
                raise ValueError("projectId must be a whole number")
            return str(int(value))
        return value


class JoinProject(RoomEvent):
    userEmail: Optional[str] = None
    token: Optional[str] = None


class ScriptChange(RoomEvent):
    html: str


class ShotDataChange(RoomEvent):
    shotId: Any
    field: str
    value: Any = None


class ShotUpdate(RoomEvent):
    shotId: Any
    changes: Dict[str, Any]


class ShotDelete(RoomEvent):
    shotId: Any


class ScheduleUpdate(RoomEvent):
    schedule: List[Any]


class NewComment(RoomEvent):
    shotId: Any
    text: str
    user: Optional[str] = None


@dataclass(frozen=True)
class Route:
    outbound: str
    scope: Scope
    model: Type[RoomEvent] = RoomEvent


ROUTES: Dict[str, Route] = {
    "script-change": Route("script-changed", Scope.peers, ScriptChange),
    "shot-data-change": Route("shot-data-changed", Scope.peers, ShotDataChange),
    "shot-update": Route("shot-updated", Scope.peers, ShotUpdate),
    "new-shot": Route("shot-created", Scope.peers),
    "delete-shot": Route("shot-deleted", Scope.peers, ShotDelete),
    "new-setup": Route("setup-created", Scope.peers),
    "delete-setup": Route("setup-deleted", Scope.peers),
    "schedule-update": Route("schedule-updated", Scope.peers, ScheduleUpdate),
    "new-comment": Route("comment-received", Scope.room, NewComment),
}
