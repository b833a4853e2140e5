"""
Live traffic feed.
WS /ws/traffic — sends a welcome message on connect, then every generated
traffic event in generation order until the client disconnects.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from store_traffic.schemas.traffic import WelcomeMessage
from store_traffic.utils.clock import as_utc, utc_now
from store_traffic.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.websocket("/ws/traffic")
async def traffic_feed(websocket: WebSocket):
    broadcaster = websocket.app.state.broadcaster
    await websocket.accept()
    client = websocket.client.host if websocket.client else "unknown"
    logger.info(f"New client connected: {client}")

    welcome = WelcomeMessage(message="Connected to Store Traffic Server", timestamp=as_utc(utc_now()))
    await websocket.send_json(welcome.model_dump(mode="json"))

    token = broadcaster.subscribe(websocket.send_json)
    try:
        # Inbound messages are ignored; receiving is how a disconnect is noticed
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Client disconnected: {client}")
    finally:
        broadcaster.unsubscribe(token)
