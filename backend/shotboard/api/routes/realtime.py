import json
import logging
import uuid

from fastapi import APIRouter, Depends, WebSocket
from starlette.concurrency import run_in_threadpool

from shotboard.api.dependencies import authenticate_token, get_relay
from shotboard.core.config import settings
from shotboard.realtime import Relay, RelayClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def relay_endpoint(websocket: WebSocket, relay: Relay = Depends(get_relay)):
    await websocket.accept()

    token = websocket.query_params.get("token") or websocket.cookies.get(settings.SESSION_COOKIE_NAME)
    client = RelayClient(
        id=uuid.uuid4().hex,
        connection=websocket,
        user=await run_in_threadpool(authenticate_token, token) if token else None,
    )
    logger.info("Relay connection %s opened (user=%s)", client.id, client.user)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            text = frame.get("text")
            if text is None:
                # binary frames carry nothing the relay understands
                logger.debug("Dropped binary frame from %s", client.id)
                continue
            try:
                message = json.loads(text)
            except ValueError:
                logger.debug("Dropped undecodable frame from %s", client.id)
                continue

            await relay.handle(client, message)
    finally:
        await relay.disconnect(client)
        logger.info("Relay connection %s closed", client.id)
