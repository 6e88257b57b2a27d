"""Pseudo-real-time data points for the dashboard chart."""
from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from starlette.websockets import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


def next_data_point(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    moment = now or datetime.now(timezone.utc)
    source = rng or random
    return {
        "id": int(moment.timestamp() * 1000),
        "value": source.random() * 100,
        "timestamp": moment.isoformat(),
    }


async def wait_for_tick(websocket: WebSocket, interval: float) -> bool:
    """Sleep until ``interval`` has elapsed, returning True early if the client disconnects.

    Messages the client sends meanwhile are drained without shortening the wait.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + interval
    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            return False
        try:
            message = await asyncio.wait_for(websocket.receive(), timeout=remaining)
        except asyncio.TimeoutError:
            return False
        if message.get("type") == "websocket.disconnect":
            return True


async def stream_feed(websocket: WebSocket, interval: float) -> None:
    """Push a data point every ``interval`` seconds until the client goes away."""
    await websocket.accept()
    logger.info("feed_connected: client=%s", websocket.client)
    try:
        while True:
            await websocket.send_json(next_data_point())
            if await wait_for_tick(websocket, interval):
                break
    except WebSocketDisconnect:
        pass
    logger.info("feed_disconnected: client=%s", websocket.client)
