from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

EventHandler = Callable[[dict[str, Any]], Awaitable[None]]


class RealtimeChannelPort(ABC):
    @abstractmethod
    def subscribe(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for a named event. Returns an unsubscribe callable."""
        raise NotImplementedError

    @abstractmethod
    async def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def stop(self) -> None:
        raise NotImplementedError
