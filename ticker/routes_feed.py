"""
Live feed endpoints for the login page ticker card.
Read-only: snapshot, health, and a push stream of view updates.
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

from ticker.protocols.feed import LiveFeed
from ticker.schemas.feed import ConnectionState, FeedView
from ticker.services.presenter import build_feed_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feed", tags=["feed"])

STREAM_QUEUE_SIZE = 16


def get_feed(request: Request) -> LiveFeed:
    """The feed owned by the running app."""
    return request.app.state.feed_manager


@router.get("/snapshot", response_model=FeedView)
async def feed_snapshot(request: Request) -> FeedView:
    """Current display snapshot of the live feed."""
    return build_feed_view(get_feed(request).snapshot)


@router.get("/health")
async def feed_health(request: Request) -> Dict[str, Any]:
    """Connection health of the live feed."""
    return get_feed(request).get_health_metrics()


@router.websocket("/stream")
async def feed_stream(websocket: WebSocket) -> None:
    """Push the current view on connect, then one view per state change."""
    feed: LiveFeed = websocket.app.state.feed_manager
    await websocket.accept()

    queue: asyncio.Queue = asyncio.Queue(maxsize=STREAM_QUEUE_SIZE)

    def on_change(state: ConnectionState) -> None:
        # Slow clients only need the newest state
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(state)

    unsubscribe = feed.subscribe(on_change)
    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        await websocket.send_json(build_feed_view(feed.snapshot).model_dump(mode="json"))
        while True:
            next_state = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({next_state, disconnected}, return_when=asyncio.FIRST_COMPLETED)
            if disconnected in done:
                next_state.cancel()
                break
            await websocket.send_json(build_feed_view(next_state.result()).model_dump(mode="json"))
    except WebSocketDisconnect:
        pass
    finally:
        disconnected.cancel()
        unsubscribe()
        logger.info("[feed_stream] Client disconnected")


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Inbound client frames carry no meaning; only the disconnect matters
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
