from __future__ import annotations

import logging
from typing import Any, Callable

from pawfessional.application.ports.realtime_channel import EventHandler, RealtimeChannelPort


class MemoryRealtimeChannel(RealtimeChannelPort):
    """In-process channel; `publish` delivers straight to subscribers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._running = False
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        self._handlers.setdefault(event_name, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event_name, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        self._running = False

    async def publish(self, event_name: str, data: dict[str, Any] | None = None) -> int:
        """Deliver an event to every subscriber. Returns the number of handlers run."""
        handlers = list(self._handlers.get(event_name, []))
        self._logger.info("Mock realtime event", extra={"event": event_name})
        for handler in handlers:
            await handler(dict(data or {}))
        return len(handlers)
