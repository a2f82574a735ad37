"""
Tests for pet loading: absent owner, stale responses, failures and teardown.
"""

from __future__ import annotations

import asyncio

import pytest

from pawfessional.application.exceptions import FetchError, NetworkError
from pawfessional.application.use_cases.booking_wizard import PETS_UNAVAILABLE_MESSAGE, BookingWizard
from pawfessional.domain.entities.pet import Pet


async def test_load_pets_populates_list(fake_api):
    wizard = BookingWizard(api=fake_api, owner_id=1)

    pets = await wizard.load_pets()

    assert [p.id for p in pets] == [42, 7]
    assert [p.name for p in wizard.pets] == ["Mochi", "Tofu"]
    assert wizard.load_error is None
    assert not wizard.loading_pets


async def test_absent_owner_makes_no_request(fake_api):
    """No logged-in owner: nothing is fetched and the list stays empty."""
    wizard = BookingWizard(api=fake_api, owner_id=None)

    assert await wizard.load_pets() == []
    assert wizard.pets == []
    assert fake_api.call_names() == []


async def test_stale_response_is_discarded(fake_api):
    """Two overlapping loads: the older response resolving last must not win."""
    first_gate, second_gate = asyncio.Event(), asyncio.Event()
    fake_api.pet_gates = [first_gate, second_gate]
    fake_api.pet_responses = [[Pet(id=1, name="Old")], [Pet(id=2, name="New")]]
    wizard = BookingWizard(api=fake_api, owner_id=1)

    older = asyncio.create_task(wizard.load_pets())
    await asyncio.sleep(0)
    newer = asyncio.create_task(wizard.load_pets())
    await asyncio.sleep(0)

    second_gate.set()
    await newer
    first_gate.set()
    await older

    assert [p.name for p in wizard.pets] == ["New"]
    assert not wizard.loading_pets


async def test_fetch_failure_clears_list_and_records_error(fake_api):
    wizard = BookingWizard(api=fake_api, owner_id=1)
    await wizard.load_pets()
    fake_api.pets_error = FetchError("Failed to fetch pets from server.")

    with pytest.raises(FetchError):
        await wizard.load_pets()

    assert wizard.pets == []
    assert str(wizard.load_error) == "Failed to fetch pets from server."


async def test_network_failure_surfaces_as_fetch_error(fake_api):
    fake_api.pets_error = NetworkError()
    wizard = BookingWizard(api=fake_api, owner_id=1)

    with pytest.raises(FetchError) as excinfo:
        await wizard.load_pets()

    assert str(excinfo.value) == PETS_UNAVAILABLE_MESSAGE
    assert isinstance(wizard.load_error, FetchError)


async def test_on_focus_reloads_and_keeps_error_for_display(fake_api):
    fake_api.pets_error = FetchError("boom")
    wizard = BookingWizard(api=fake_api, owner_id=1)

    await wizard.on_focus()

    assert wizard.pets == []
    assert str(wizard.load_error) == "boom"


async def test_close_cancels_pending_load(fake_api):
    """A load still in flight at teardown never updates the wizard."""
    gate = asyncio.Event()
    fake_api.pet_gates = [gate]
    fake_api.pet_responses = [[Pet(id=3, name="Late")]]
    wizard = BookingWizard(api=fake_api, owner_id=1)

    task = wizard.on_focus()
    await asyncio.sleep(0)
    wizard.toggle_pet(42)
    await wizard.close()

    assert task.cancelled()
    assert wizard.closed
    assert wizard.pets == []
    assert wizard.draft.pet_ids == frozenset()
    with pytest.raises(RuntimeError):
        wizard.on_focus()


async def test_response_after_close_is_ignored(fake_api):
    gate = asyncio.Event()
    fake_api.pet_gates = [gate]
    fake_api.pet_responses = [[Pet(id=3, name="Late")]]
    wizard = BookingWizard(api=fake_api, owner_id=1)

    pending = asyncio.create_task(wizard.load_pets())
    await asyncio.sleep(0)
    await wizard.close()
    gate.set()
    await pending

    assert wizard.pets == []
