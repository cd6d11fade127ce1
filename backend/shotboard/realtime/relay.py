# shotboard/realtime/relay.py

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from shotboard.realtime.events import (
    JOIN_DENIED_EVENT,
    JOIN_EVENT,
    PROJECT_UPDATED_EVENT,
    ROUTES,
    JoinProject,
    Scope,
)
from shotboard.realtime.registry import Connection, RoomRegistry, envelope

logger = logging.getLogger(__name__)

Authenticate = Callable[[str], Optional[str]]
AuthorizeJoin = Callable[[str, str], bool]


@dataclass
class RelayClient:
    id: str
    connection: Connection
    # verified session identity, None for anonymous sockets
    user: Optional[str] = None


class Relay:
    """
    Last-write-wins edit relay.

    Events are fanned out as they arrive: no ack, no retry, no ordering and no
    replay for clients that reconnect. Anything malformed or not allowed is
    dropped without telling the sender.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        require_auth: bool = True,
        authenticate: Optional[Authenticate] = None,
        authorize_join: Optional[AuthorizeJoin] = None,
    ):
        self.registry = registry
        self.require_auth = require_auth
        self.authenticate = authenticate
        self.authorize_join = authorize_join

    async def handle(self, client: RelayClient, message: Any) -> None:
        if not isinstance(message, Mapping):
            logger.debug("Dropped non-object frame from %s", client.id)
            return

        event = message.get("event")
        data = message.get("data")

        if event == JOIN_EVENT:
            await self.join(client, data)
            return

        route = ROUTES.get(event) if isinstance(event, str) else None
        if route is None:
            logger.debug("Dropped unknown event %r from %s", event, client.id)
            return

        try:
            payload = route.model.model_validate(data)
        except ValidationError:
            logger.debug("Dropped malformed %s from %s", event, client.id)
            return

        room = payload.projectId
        if self.require_auth and not self.registry.is_member(room, client.id):
            logger.debug("Dropped %s from %s: not in room %s", event, client.id, room)
            return

        outbound = {key: value for key, value in data.items() if key != "projectId"}
        exclude = client.id if route.scope is Scope.peers else None
        await self.registry.broadcast(room, route.outbound, outbound, exclude=exclude)

    async def join(self, client: RelayClient, data: Any) -> bool:
        try:
            payload = JoinProject.model_validate(data)
        except ValidationError:
            logger.debug("Dropped malformed join from %s", client.id)
            return False

        if payload.token and self.authenticate:
            try:
                client.user = await run_in_threadpool(self.authenticate, payload.token) or client.user
            except SQLAlchemyError as e:
                logger.warning("Could not check join token for %s: %s", client.id, e)

        if self.require_auth:
            reason = await self._deny_reason(client, payload.projectId)
            if reason:
                logger.info("Denied %s joining %s: %s", client.id, payload.projectId, reason)
                await self._notify(client, JOIN_DENIED_EVENT, {
                    "projectId": payload.projectId,
                    "reason": reason,
                })
                return False
            identity = client.user
        else:
            identity = client.user or payload.userEmail or "Anonymous"

        await self.registry.join(payload.projectId, client.id, client.connection, identity)
        return True

    async def disconnect(self, client: RelayClient) -> None:
        await self.registry.leave(client.id)

    async def notify_project_saved(self, project_id: str, document: Dict[str, Any]) -> int:
        """Push the saved document to the whole room, sender included."""
        return await self.registry.broadcast(str(project_id), PROJECT_UPDATED_EVENT, document)

    async def _deny_reason(self, client: RelayClient, project_id: str) -> Optional[str]:
        if not client.user:
            return "not authenticated"
        if self.authorize_join is None:
            return None
        try:
            allowed = await run_in_threadpool(self.authorize_join, project_id, client.user)
        except SQLAlchemyError as e:
            logger.warning("Could not authorize %s for %s: %s", client.id, project_id, e)
            return "authorization unavailable"
        return None if allowed else "no access to project"

    async def _notify(self, client: RelayClient, event: str, data: Any) -> None:
        try:
            await client.connection.send_json(envelope(event, data))
        except Exception as e:
            logger.warning("Could not notify %s: %s", client.id, e)
