"""
Tests for the dashboard, history and calendar views, including refresh on
the real-time event.
"""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from pawfessional.application.exceptions import FetchError, NetworkError
from pawfessional.application.use_cases.appointment_views import (
    CalendarView,
    DashboardView,
    DateMarking,
    HistoryView,
    _RefreshingView,
)
from pawfessional.domain.entities.appointment import Appointment
from pawfessional.domain.entities.public_event import PublicEvent
from pawfessional.infrastructure.realtime.memory_channel import MemoryRealtimeChannel


def _appointment(id: int, status: str, day: str, time: str | None = "09:00") -> Appointment:
    return Appointment(
        id=id,
        owner_id=1,
        status=status,
        appointment_date=day,
        appointment_time=time,
        pet_names=("Mochi",),
        services=("Grooming",),
    )


@pytest.fixture
def booked(fake_api):
    fake_api.appointments = [
        _appointment(1, "Approved", "2025-06-03T00:00:00.000Z", "10:00"),
        _appointment(2, "Pending", "2025-06-01", "13:30"),
        _appointment(3, "Cancelled", "2025-06-02"),
        _appointment(4, "Completed", "2025-04-02"),
        _appointment(5, "Pending", "2025-06-01", "08:30"),
        _appointment(6, "Rejected", "2025-06-05"),
    ]
    fake_api.events = [PublicEvent(id=1, title="Vaccination Drive", event_date="2025-06-01", event_time="08:00")]
    return fake_api


async def test_dashboard_lists_upcoming_in_date_order(booked, demo_user):
    view = DashboardView(api=booked, user=demo_user)

    await view.refresh()

    assert [a.id for a in view.upcoming] == [5, 2, 1]
    assert view.upcoming_count == 3
    assert view.greeting == "Welcome, Ana Cruz"
    assert view.avatar_initial == "A"


async def test_dashboard_failure_clears_list(booked, demo_user):
    view = DashboardView(api=booked, user=demo_user)
    await view.refresh()
    booked.appointments_error = NetworkError()

    with pytest.raises(FetchError):
        await view.refresh()

    assert view.upcoming == []
    assert not view.loading


async def test_dashboard_without_user_shows_nothing(booked):
    view = DashboardView(api=booked, user=None)

    await view.refresh()

    assert view.greeting is None
    assert view.upcoming == []
    assert booked.call_names() == []


async def test_history_filters(booked):
    view = HistoryView(api=booked, owner_id=1)
    await view.refresh()

    assert len(view.appointments) == 6
    view.set_filter("Pending")
    assert [a.id for a in view.appointments] == [2, 5]
    view.set_filter("Cancelled")
    assert [a.id for a in view.appointments] == [3]

    with pytest.raises(ValueError):
        view.set_filter("Rejected")


async def test_history_cancel_refreshes(booked):
    view = HistoryView(api=booked, owner_id=1)
    await view.refresh()
    [pending] = [a for a in view.appointments if a.id == 2]
    assert HistoryView.is_cancellable(pending)
    assert not HistoryView.is_cancellable(_appointment(9, "Completed", "2025-01-01"))

    await view.cancel(2)

    assert booked.call_names() == ["list_appointments", "cancel_appointment", "list_appointments"]


async def test_calendar_merges_events_and_skips_inactive(booked):
    view = CalendarView(api=booked, owner_id=1, today=lambda: date(2025, 6, 1))

    await view.refresh()

    assert set(view.marked_dates()) == {"2025-06-01", "2025-06-03", "2025-04-02"}
    assert view.marked_dates()["2025-06-01"] == DateMarking(marked=True, selected=True)
    assert view.marked_dates()["2025-06-03"] == DateMarking(marked=True, selected=False)

    entries = view.entries_on_selected_date()
    assert [(e.kind, e.time) for e in entries] == [("event", "08:00"), ("appointment", "08:30"), ("appointment", "13:30")]
    assert entries[0].title == "Vaccination Drive"
    assert entries[1].title == "Grooming (Mochi)"


async def test_calendar_selecting_unmarked_date(booked):
    view = CalendarView(api=booked, owner_id=1, today=lambda: date(2025, 6, 1))
    await view.refresh()

    view.select_date("2025-06-10")

    assert view.marked_dates()["2025-06-10"] == DateMarking(marked=False, selected=True)
    assert view.entries_on_selected_date() == []
    with pytest.raises(ValueError):
        view.select_date("June 10")


async def test_refresh_event_reloads_attached_views(booked, demo_user):
    """The server's push event triggers a re-fetch without user action."""
    channel = MemoryRealtimeChannel()
    dashboard = DashboardView(api=booked, user=demo_user)
    history = HistoryView(api=booked, owner_id=1)
    dashboard.attach(channel, "appointments_updated")
    history.attach(channel, "appointments_updated")

    handled = await channel.publish("appointments_updated", {"user_id": 1})

    assert handled == 2
    assert dashboard.upcoming_count == 3
    assert len(history.appointments) == 6

    dashboard.detach()
    history.detach()
    assert await channel.publish("appointments_updated") == 0


async def test_unrelated_events_are_ignored(booked, demo_user):
    channel = MemoryRealtimeChannel()
    dashboard = DashboardView(api=booked, user=demo_user)
    dashboard.attach(channel, "appointments_updated")

    assert await channel.publish("pets_updated") == 0
    assert booked.call_names() == []


async def test_calendar_failure_leaves_no_request_running(booked):
    """When appointments fail, the still-pending events request is cancelled with the refresh."""
    booked.appointments_error = FetchError("boom")
    booked.events_gate = asyncio.Event()
    view = CalendarView(api=booked, owner_id=1, today=lambda: date(2025, 6, 1))
    before = asyncio.all_tasks()

    with pytest.raises(FetchError):
        await view.refresh()

    assert asyncio.all_tasks() - before == set()
    assert view.entries == []
    assert not view.loading


def test_refreshing_view_base_is_abstract():
    with pytest.raises(TypeError):
        _RefreshingView(api=None, owner_id=1)
