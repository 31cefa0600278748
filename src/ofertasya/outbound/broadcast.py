"""Real-time fan-out of offer events to connected dashboard clients."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import structlog
from starlette.websockets import WebSocket

logger = structlog.get_logger()

NEW_OFFER_EVENT = "new_offer"


class Broadcaster(Protocol):
    async def publish(self, event: str, payload: dict[str, Any]) -> int:
        """Push an event to every current subscriber; return how many received it."""


class WebSocketBroadcaster:
    """Publishes JSON events to every connected WebSocket.

    No replay: a client that connects after an event fired must re-fetch the
    recent offers list. A subscriber whose send fails is dropped.
    """

    def __init__(self) -> None:
        self._subscribers: set[WebSocket] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._subscribers.add(websocket)
        logger.info("Client connected", subscribers=len(self._subscribers))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._subscribers:
            self._subscribers.discard(websocket)
            logger.info("Client disconnected", subscribers=len(self._subscribers))

    async def publish(self, event: str, payload: dict[str, Any]) -> int:
        if not self._subscribers:
            logger.info("No subscribers connected, skipping broadcast", event_name=event)
            return 0

        message = {"event": event, "data": payload}
        subscribers = list(self._subscribers)
        results = await asyncio.gather(
            *(subscriber.send_json(message) for subscriber in subscribers),
            return_exceptions=True,
        )

        delivered = 0
        for subscriber, result in zip(subscribers, results):
            if isinstance(result, Exception):
                logger.warning("Dropping subscriber after failed send", event_name=event, error=str(result))
                self.disconnect(subscriber)
            else:
                delivered += 1
        return delivered
