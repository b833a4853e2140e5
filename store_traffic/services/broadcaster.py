# store_traffic/services/broadcaster.py
"""
Fan-out of generated traffic events to live feed subscribers.
Each websocket connection registers one async handler and gets a token back.
"""

import uuid
from typing import Awaitable, Callable
from store_traffic.schemas.traffic import TrafficEventOut, TrafficFeedMessage
from store_traffic.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[dict], Awaitable[None]]


class EventBroadcaster:
    def __init__(self):
        self._subscribers: dict[str, Handler] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: Handler) -> str:
        token = uuid.uuid4().hex
        self._subscribers[token] = handler
        logger.info(f"Live feed subscriber added ({self.subscriber_count} connected)")
        return token

    def unsubscribe(self, token: str) -> bool:
        removed = self._subscribers.pop(token, None) is not None
        if removed:
            logger.info(f"Live feed subscriber removed ({self.subscriber_count} connected)")
        return removed

    async def emit(self, event):
        """Send one event to every subscriber, in subscription order."""
        message = TrafficFeedMessage(data=TrafficEventOut.model_validate(event)).model_dump(mode="json")
        for token, handler in list(self._subscribers.items()):
            try:
                await handler(message)
            except Exception as e:
                # A closed socket can fail mid-send before its disconnect is seen
                logger.warning(f"Dropping live feed subscriber {token[:8]}: {e}")
                self.unsubscribe(token)
        logger.info(f"Emitted event: {message['data']}")
