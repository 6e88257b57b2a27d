"""Live data endpoints: one-shot latest point and the websocket feed."""
from fastapi import APIRouter, WebSocket

from scanboard.services.feed import next_data_point, stream_feed

router = APIRouter(tags=["feed"])


@router.get("/api/latest-data")
def latest_data():
    return next_data_point()


@router.websocket("/ws/feed")
async def feed(websocket: WebSocket):
    await stream_feed(websocket, websocket.app.state.settings.feed_interval_seconds)
