"""
WebSocket endpoint for real-time updates.

Clients connect to ``/ws?token=<jwt>`` and receive every task and category
event of their own user. Events published while a client is disconnected
are not replayed; clients re-fetch after reconnecting. The channel is
server-to-client only: frames sent by the client are ignored.
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect

from taskboard.middleware.auth import decode_token
from taskboard.routers.deps import get_broadcaster
from taskboard.services.broadcaster import EventBroadcaster, Subscription

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])

# Application-defined close code for a rejected token
WS_UNAUTHENTICATED = 4401


async def _receive_until_disconnect(websocket: WebSocket):
    """Consume and ignore client frames, text or binary; returns when the client goes away."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _forward_events(websocket: WebSocket, subscription: Subscription):
    while True:
        message = await subscription.get()
        await websocket.send_json(message)


@router.websocket("/ws")
async def event_stream(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    event_broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    try:
        current_user = decode_token(token)
    except HTTPException as e:
        logger.info(f"Rejected WebSocket connection: {e.detail}")
        await websocket.close(code=WS_UNAUTHENTICATED)
        return

    await websocket.accept()
    subscription = event_broadcaster.subscribe(current_user.user_id)
    try:
        await websocket.send_json({
            "event": "connected",
            "data": {"userId": current_user.user_id},
            "timestamp": datetime.utcnow().isoformat()
        })

        receiver = asyncio.create_task(_receive_until_disconnect(websocket))
        sender = asyncio.create_task(_forward_events(websocket, subscription))
        done, pending = await asyncio.wait({receiver, sender}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.info(f"WebSocket for user {current_user.user_id} closed: {task.exception()}")
    except WebSocketDisconnect:
        pass
    finally:
        event_broadcaster.unsubscribe(subscription)
