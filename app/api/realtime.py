"""WebSocket stream of entity change events"""

import asyncio

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
import structlog

from app.booking.feed import ChangeEvent, ChangeFeed, Entity
from app.dependencies import get_change_feed

router = APIRouter()
logger = structlog.get_logger()


@router.websocket("/{entity}")
async def stream_changes(
    websocket: WebSocket,
    entity: str,
    feed: ChangeFeed = Depends(get_change_feed),
):
    """
    Push change events for one entity so clients can re-fetch their lists.

    Messages: {"entity", "action", "record_id", "occurred_at"}
    """
    try:
        topic = Entity(entity)
    except ValueError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    queue: asyncio.Queue = asyncio.Queue()
    # Subscribed before accepting so no event after the handshake is missed
    subscription = feed.subscribe(topic, queue.put_nowait)
    sender = None
    try:
        await websocket.accept()
        logger.info("Realtime subscriber connected", entity=topic.value)

        async def forward():
            while True:
                event: ChangeEvent = await queue.get()
                await websocket.send_json(event.to_dict())

        sender = asyncio.create_task(forward())

        # Client messages are ignored; receiving detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Realtime subscriber disconnected", entity=topic.value)
    finally:
        if sender is not None:
            sender.cancel()
        subscription.unsubscribe()
