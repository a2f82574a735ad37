from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from pawfessional.application.exceptions import FetchError, PawfessionalError
from pawfessional.application.ports.appointment_api import AppointmentApiPort
from pawfessional.application.ports.realtime_channel import RealtimeChannelPort
from pawfessional.core.config import settings
from pawfessional.domain.entities.appointment import (
    INACTIVE_STATUSES,
    UPCOMING_STATUSES,
    Appointment,
)
from pawfessional.domain.entities.public_event import PublicEvent
from pawfessional.domain.entities.user import User

HISTORY_FILTERS = ("All", "Pending", "Approved", "Cancelled")


def _as_fetch_error(error: PawfessionalError, fallback: str) -> FetchError:
    if isinstance(error, FetchError):
        return error
    return FetchError(str(error) or fallback)


class _RefreshingView(ABC):
    """Shared plumbing: loading flag and re-fetch on the real-time refresh event."""

    def __init__(self, api: AppointmentApiPort, owner_id: int | None) -> None:
        self._api = api
        self._owner_id = owner_id
        self._loading = False
        self._unsubscribe: Callable[[], None] | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def loading(self) -> bool:
        return self._loading

    def attach(self, channel: RealtimeChannelPort, event_name: str | None = None) -> None:
        self.detach()
        self._unsubscribe = channel.subscribe(event_name or settings.REFRESH_EVENT_NAME, self._on_refresh_event)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _on_refresh_event(self, data: dict[str, Any]) -> None:
        self._logger.info(
            "Refresh event received",
            extra={"event": type(self).__name__, "owner_id": self._owner_id},
        )
        await self.refresh()

    @abstractmethod
    async def refresh(self) -> None:
        raise NotImplementedError


class DashboardView(_RefreshingView):
    def __init__(self, api: AppointmentApiPort, user: User | None) -> None:
        super().__init__(api, user.id if user else None)
        self._user = user
        self._upcoming: list[Appointment] = []

    @property
    def greeting(self) -> str | None:
        if self._user is None:
            return None
        return f"Welcome, {self._user.display_name}"

    @property
    def avatar_initial(self) -> str:
        return self._user.initial if self._user else "?"

    @property
    def upcoming(self) -> list[Appointment]:
        return list(self._upcoming)

    @property
    def upcoming_count(self) -> int:
        return len(self._upcoming)

    async def refresh(self) -> None:
        if self._owner_id is None:
            self._upcoming = []
            return
        self._loading = True
        try:
            appointments = await self._api.list_appointments(self._owner_id)
        except PawfessionalError as e:
            self._upcoming = []
            raise _as_fetch_error(e, "Failed to fetch appointments") from e
        finally:
            self._loading = False
        self._upcoming = sorted(
            (a for a in appointments if a.status in UPCOMING_STATUSES),
            key=lambda a: (a.date_key, a.appointment_time or ""),
        )


class HistoryView(_RefreshingView):
    def __init__(self, api: AppointmentApiPort, owner_id: int | None) -> None:
        super().__init__(api, owner_id)
        self._appointments: list[Appointment] = []
        self._filter = "All"

    @property
    def filter(self) -> str:
        return self._filter

    def set_filter(self, name: str) -> None:
        if name not in HISTORY_FILTERS:
            raise ValueError(f"Unknown filter: {name}")
        self._filter = name

    @property
    def appointments(self) -> list[Appointment]:
        if self._filter == "All":
            return list(self._appointments)
        return [a for a in self._appointments if a.has_status(self._filter)]

    @staticmethod
    def is_cancellable(appointment: Appointment) -> bool:
        return appointment.status.lower() in {"pending", "approved"}

    async def refresh(self) -> None:
        if self._owner_id is None:
            return
        self._loading = True
        try:
            self._appointments = await self._api.list_appointments(self._owner_id)
        except PawfessionalError as e:
            raise _as_fetch_error(e, "Failed to fetch appointments") from e
        finally:
            self._loading = False

    async def cancel(self, appointment_id: int) -> None:
        """Cancel server-side, then reload the list."""
        await self._api.cancel_appointment(appointment_id)
        await self.refresh()


@dataclass(frozen=True)
class CalendarEntry:
    kind: str  # "appointment", "event"
    date: str
    time: str | None
    title: str
    status: str | None = None
    source_id: int | None = None


@dataclass(frozen=True)
class DateMarking:
    marked: bool
    selected: bool


def appointment_entry(appointment: Appointment) -> CalendarEntry:
    title = ", ".join(appointment.services) or "Appointment"
    if appointment.pet_names:
        title = f"{title} ({', '.join(appointment.pet_names)})"
    return CalendarEntry(
        kind="appointment",
        date=appointment.date_key,
        time=appointment.appointment_time,
        title=title,
        status=appointment.status,
        source_id=appointment.id,
    )


def event_entry(event: PublicEvent) -> CalendarEntry:
    return CalendarEntry(
        kind="event",
        date=event.date_key,
        time=event.event_time,
        title=event.title,
        source_id=event.id,
    )


class CalendarView(_RefreshingView):
    """Personal appointments (minus cancelled/rejected) merged with public clinic events."""

    def __init__(
        self,
        api: AppointmentApiPort,
        owner_id: int | None,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(api, owner_id)
        self._entries: list[CalendarEntry] = []
        self._selected_date = today().isoformat()

    @property
    def selected_date(self) -> str:
        return self._selected_date

    def select_date(self, value: str) -> None:
        self._selected_date = date.fromisoformat(value).isoformat()

    @property
    def entries(self) -> list[CalendarEntry]:
        return list(self._entries)

    async def refresh(self) -> None:
        if self._owner_id is None:
            self._entries = []
            return
        self._loading = True
        requests = [
            asyncio.create_task(self._api.list_appointments(self._owner_id)),
            asyncio.create_task(self._api.list_public_events()),
        ]
        try:
            appointments, events = await asyncio.gather(*requests)
        except PawfessionalError as e:
            self._entries = []
            raise _as_fetch_error(e, "Failed to fetch calendar") from e
        finally:
            # Neither request may outlive the refresh.
            for task in requests:
                task.cancel()
            await asyncio.gather(*requests, return_exceptions=True)
            self._loading = False

        merged = [appointment_entry(a) for a in appointments if a.status not in INACTIVE_STATUSES]
        merged.extend(event_entry(e) for e in events)
        self._entries = merged

    def marked_dates(self) -> dict[str, DateMarking]:
        markings = {entry.date: DateMarking(marked=True, selected=False) for entry in self._entries}
        if self._selected_date:
            current = markings.get(self._selected_date)
            markings[self._selected_date] = DateMarking(marked=bool(current and current.marked), selected=True)
        return markings

    def entries_on_selected_date(self) -> list[CalendarEntry]:
        return sorted(
            (e for e in self._entries if e.date == self._selected_date),
            key=lambda e: (e.time or "", e.kind),
        )
