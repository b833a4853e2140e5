# store_traffic/client/feed.py
"""
Live feed subscriber.

Keeps one websocket open to the server's /ws/traffic endpoint and hands each
customer-traffic event to the subscribed handler. Reconnects automatically,
backing off from 3s up to 60s. A FeedClient carries at most one subscription.
"""

import asyncio
import json
import uuid
from enum import Enum
from typing import Awaitable, Callable, Optional
import websockets
from websockets.exceptions import WebSocketException
from store_traffic.config import settings
from store_traffic.schemas.traffic import TrafficEventOut
from store_traffic.utils.logger import get_logger

logger = get_logger(__name__)

# Reconnect delay in seconds (doubles on each failure, max 60s)
_MIN_BACKOFF = 3
_MAX_BACKOFF = 60

EventHandler = Callable[[TrafficEventOut], Awaitable[None]]
StatusHandler = Callable[["FeedStatus"], None]


class FeedStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class FeedSubscriptionError(RuntimeError):
    """Raised when subscribing a FeedClient that already has an active subscription."""


class FeedClient:
    def __init__(self, url: str = None):
        self.url = url or settings.FEED_URL
        self.status = FeedStatus.DISCONNECTED
        self._token: Optional[str] = None
        self._handler: Optional[EventHandler] = None
        self._on_status: Optional[StatusHandler] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_subscribed(self) -> bool:
        return self._token is not None

    def subscribe(self, handler: EventHandler, on_status: StatusHandler = None) -> str:
        """Start listening. Must be called from a running event loop."""
        if self.is_subscribed:
            raise FeedSubscriptionError("Feed already has an active subscription")
        self._token = uuid.uuid4().hex
        self._handler = handler
        self._on_status = on_status
        self._task = asyncio.create_task(self._listen(), name="traffic-feed")
        return self._token

    async def unsubscribe(self, token: str) -> bool:
        if token is None or token != self._token:
            return False
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        self._token = None
        self._handler = None
        self._set_status(FeedStatus.DISCONNECTED)
        self._on_status = None
        return True

    def _set_status(self, status: FeedStatus):
        if status is self.status:
            return
        self.status = status
        if self._on_status:
            self._on_status(status)

    async def _listen(self):
        backoff = _MIN_BACKOFF

        while True:
            self._set_status(FeedStatus.CONNECTING)
            logger.info(f"📡 Connecting to live feed at {self.url}")
            try:
                async with websockets.connect(self.url) as ws:
                    self._set_status(FeedStatus.CONNECTED)
                    logger.info("✅ Live feed connected")
                    backoff = _MIN_BACKOFF  # reset on success
                    async for raw in ws:
                        await self._dispatch(raw)
                logger.info("Live feed closed by server")
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                logger.warning(f"❌ Live feed connection error: {e}. Retry in {backoff}s")

            self._set_status(FeedStatus.DISCONNECTED)
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, _MAX_BACKOFF)

    async def _dispatch(self, raw):
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring non-JSON feed message: {raw!r:.100}")
            return

        kind = message.get("type") if isinstance(message, dict) else None
        if kind == "welcome":
            logger.info(f"Received welcome message: {message.get('message')}")
        elif kind == "customer-traffic":
            try:
                event = TrafficEventOut.model_validate(message.get("data"))
            except ValueError as e:
                logger.warning(f"Ignoring malformed traffic event: {e}")
                return
            logger.debug(f"Received customer traffic event: {event}")
            await self._handler(event)
        else:
            logger.debug(f"Ignoring feed message of type {kind!r}")
