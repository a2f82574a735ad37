from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Callable

import httpx

from pawfessional.application.exceptions import PawfessionalError
from pawfessional.application.ports.realtime_channel import EventHandler, RealtimeChannelPort
from pawfessional.core.config import settings


async def parse_event_stream(lines: AsyncIterator[str]) -> AsyncIterator[tuple[str, dict[str, Any]]]:
    """Turn text/event-stream lines into (event_name, data) pairs."""
    event_name = "message"
    data_lines: list[str] = []
    async for line in lines:
        if line == "":
            if data_lines:
                yield event_name, _decode_data("\n".join(data_lines))
            event_name = "message"
            data_lines = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        value = value[1:] if value.startswith(" ") else value
        if field == "event":
            event_name = value
        elif field == "data":
            data_lines.append(value)
    if data_lines:
        yield event_name, _decode_data("\n".join(data_lines))


def _decode_data(raw: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except ValueError:
        return {"raw": raw}
    return payload if isinstance(payload, dict) else {"value": payload}


class EventStreamChannel(RealtimeChannelPort):
    """
    Subscribes to the server's push channel over a long-lived HTTP
    event stream and dispatches named events to registered handlers.
    """

    def __init__(
        self,
        url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url or settings.EVENTS_URL
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS, read=None),
            headers={"Accept": "text/event-stream"},
            transport=transport,
        )
        self._handlers: dict[str, list[EventHandler]] = {}
        self._task: asyncio.Task | None = None
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        self._handlers.setdefault(event_name, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event_name, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.listen())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self._client.aclose()

    async def listen(self) -> None:
        """Consume the stream until the server closes it or the connection drops."""
        try:
            async with self._client.stream("GET", self._url) as response:
                if response.is_error:
                    self._logger.error("Event stream refused", extra={"status": response.status_code})
                    return
                self._logger.info("Event stream connected", extra={"reason": self._url})
                async for event_name, data in parse_event_stream(response.aiter_lines()):
                    await self._dispatch(event_name, data)
        except httpx.HTTPError as e:
            self._logger.error("Event stream disconnected", extra={"error": str(e) or type(e).__name__})
            return
        self._logger.warning("Event stream closed by server")

    async def _dispatch(self, event_name: str, data: dict[str, Any]) -> None:
        for handler in list(self._handlers.get(event_name, [])):
            try:
                await handler(data)
            except PawfessionalError as e:
                # A failed refresh must not tear down the stream for other views.
                self._logger.warning("Event handler failed", extra={"event": event_name, "error": str(e)})
            except Exception as e:
                self._logger.error(
                    "Event handler crashed",
                    extra={"event": event_name, "error": str(e) or type(e).__name__},
                    exc_info=True,
                )
