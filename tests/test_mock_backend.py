"""
End-to-end tests: the HTTP client and use cases against the mock clinic API.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

import httpx
import pytest

from pawfessional.application.exceptions import AuthenticationError, ValidationError
from pawfessional.application.use_cases.appointment_views import CalendarView, HistoryView
from pawfessional.application.use_cases.auth import PasswordResetFlow
from pawfessional.application.use_cases.booking_wizard import BookingWizard
from pawfessional.infrastructure.api.mobile_api_client import MobileApiClient
from pawfessional.infrastructure.api.mock_server import (
    DEMO_EMAIL,
    DEMO_PASSWORD,
    MockClinicBackend,
    create_mock_api,
)


@pytest.fixture
def backend() -> MockClinicBackend:
    return MockClinicBackend.with_demo_data()


@pytest.fixture
async def client(backend):
    api = MobileApiClient(
        base_url="http://testserver/api/mobile",
        transport=httpx.ASGITransport(app=create_mock_api(backend)),
    )
    yield api
    await api.aclose()


async def _book(client: MobileApiClient, day: str, slot: str = "09:00") -> BookingWizard:
    wizard = BookingWizard(api=client, owner_id=1)
    await wizard.load_pets()
    wizard.toggle_select_all_pets()
    wizard.next()
    wizard.toggle_service("Vaccination")
    wizard.next()
    wizard.select_date(day)
    wizard.select_time(slot)
    wizard.next()
    await wizard.submit()
    return wizard


def _future(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


async def test_demo_login(client):
    user = await client.login(DEMO_EMAIL, DEMO_PASSWORD)

    assert user.id == 1
    assert user.initial == "D"


async def test_wrong_password_is_rejected(client):
    with pytest.raises(AuthenticationError):
        await client.login(DEMO_EMAIL, "nope")


async def test_booking_is_stored_as_pending(client, backend):
    wizard = await _book(client, _future(3))

    assert wizard.completed
    [stored] = backend.appointments.values()
    assert stored["status"] == "Pending"
    assert stored["pet_ids"] == [1, 2]
    assert stored["services"] == ["Vaccination"]


async def test_taken_slot_reports_server_message(client):
    day = _future(3)
    await _book(client, day, "10:00")

    with pytest.raises(ValidationError) as excinfo:
        await _book(client, day, "10:00")

    assert str(excinfo.value) == "Slot unavailable"
    assert excinfo.value.status_code == 400


async def test_cancel_then_history_and_calendar(client):
    day = _future(4)
    await _book(client, day)
    history = HistoryView(api=client, owner_id=1)
    await history.refresh()
    [appointment] = history.appointments
    assert history.is_cancellable(appointment)

    await history.cancel(appointment.id)
    history.set_filter("Cancelled")
    assert [a.id for a in history.appointments] == [appointment.id]
    assert not history.is_cancellable(history.appointments[0])

    calendar = CalendarView(api=client, owner_id=1)
    await calendar.refresh()
    assert all(entry.kind == "event" for entry in calendar.entries)
    assert _future(7) in calendar.marked_dates()


async def test_password_reset_round(client, backend):
    flow = PasswordResetFlow(api=client)

    await flow.request_otp(DEMO_EMAIL)
    await flow.verify_otp(backend.otps[DEMO_EMAIL])
    await flow.reset_password("N3w-Passw0rd", "N3w-Passw0rd")

    assert flow.phase == "done"
    user = await client.login(DEMO_EMAIL, "N3w-Passw0rd")
    assert user.id == 1


async def test_wrong_otp_keeps_flow_on_pin_entry(client, backend):
    flow = PasswordResetFlow(api=client)
    await flow.request_otp(DEMO_EMAIL)
    backend.otps[DEMO_EMAIL] = "123456"

    with pytest.raises(ValidationError) as excinfo:
        await flow.verify_otp("654321")

    assert flow.phase == "enter_otp"
    assert "Invalid PIN" in str(excinfo.value)


async def test_booking_and_cancel_broadcast_refresh_event(client, backend):
    """Listeners on the event stream hear about every change to appointments."""
    queue: asyncio.Queue = asyncio.Queue()
    backend.subscribers.append(queue)

    await _book(client, _future(5))
    await client.cancel_appointment(1)

    assert queue.get_nowait() == ("appointments_updated", {"user_id": 1, "appointment_id": 1})
    assert queue.get_nowait() == ("appointments_updated", {"user_id": 1, "appointment_id": 1})
    assert queue.empty()
