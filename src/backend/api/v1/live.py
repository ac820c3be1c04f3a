"""
Live event notifications over WebSocket.

Viewers connect per event and receive small JSON notices (vote_cast,
event_updated, event_deleted) telling them to re-fetch results. Clients may
send {"type": "ping"} to keep the connection alive.
"""

import asyncio
import json
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from services.notifier import ChangeNotifier, Subscription, get_notifier

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        message = await subscription.get()
        await websocket.send_json(message.model_dump())
        if message.type == "event_deleted":
            await websocket.close()
            return


async def _receive(websocket: WebSocket) -> None:
    while True:
        data = await websocket.receive_text()
        try:
            message = json.loads(data)
        except json.JSONDecodeError:
            continue
        if isinstance(message, dict) and message.get("type") == "ping":
            await websocket.send_json({"type": "pong", "timestamp": message.get("timestamp")})


@router.websocket("/events/{event_id}")
async def live_event_updates(
    websocket: WebSocket,
    event_id: str,
    notifier: Annotated[ChangeNotifier, Depends(get_notifier)],
) -> None:
    """Stream notices for one event until the client disconnects."""
    await websocket.accept()
    subscription = notifier.subscribe(event_id)
    await websocket.send_json({"type": "connected", "event_id": event_id})

    tasks = [
        asyncio.create_task(_forward(websocket, subscription)),
        asyncio.create_task(_receive(websocket)),
    ]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("live_connection_error", event_id=event_id, error=str(exc))
    finally:
        for task in tasks:
            task.cancel()
        notifier.unsubscribe(subscription)
        logger.debug("live_disconnected", event_id=event_id)
