"""
Shared fixtures: an in-memory fake of the clinic API and a session backed by
a memory store.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from pawfessional.application.exceptions import AuthenticationError
from pawfessional.application.ports.appointment_api import AppointmentApiPort
from pawfessional.application.ports.auth_api import AuthApiPort
from pawfessional.application.use_cases.session import AppSession
from pawfessional.domain.entities.appointment import Appointment
from pawfessional.domain.entities.pet import Pet
from pawfessional.domain.entities.public_event import PublicEvent
from pawfessional.domain.entities.user import User
from pawfessional.infrastructure.store.memory_session_store import MemorySessionStore


class FakeClinicApi(AppointmentApiPort, AuthApiPort):
    def __init__(self) -> None:
        self.pets: list[Pet] = [
            Pet(id=42, name="Mochi", species="Dog", breed="Shiba Inu"),
            Pet(id=7, name="Tofu", species="Cat", breed="Persian"),
        ]
        self.appointments: list[Appointment] = []
        self.events: list[PublicEvent] = []
        self.pets_error: Exception | None = None
        self.appointments_error: Exception | None = None
        self.submit_error: Exception | None = None
        self.submit_gate: asyncio.Event | None = None
        self.events_gate: asyncio.Event | None = None
        self.pet_gates: list[asyncio.Event] = []
        self.pet_responses: list[list[Pet]] = []
        self.calls: list[tuple[str, Any]] = []
        self.users: dict[str, tuple[str, User]] = {}

    async def list_pets(self, owner_id: int) -> list[Pet]:
        index = sum(1 for name, _ in self.calls if name == "list_pets")
        self.calls.append(("list_pets", owner_id))
        if index < len(self.pet_gates):
            await self.pet_gates[index].wait()
            return list(self.pet_responses[index])
        if self.pets_error is not None:
            raise self.pets_error
        return list(self.pets)

    async def add_pet(self, payload: dict[str, Any]) -> None:
        self.calls.append(("add_pet", payload))

    async def update_pet(self, pet_id: int, payload: dict[str, Any]) -> None:
        self.calls.append(("update_pet", (pet_id, payload)))

    async def list_appointments(self, owner_id: int) -> list[Appointment]:
        self.calls.append(("list_appointments", owner_id))
        if self.appointments_error is not None:
            raise self.appointments_error
        return list(self.appointments)

    async def create_appointment(self, payload: dict[str, Any]) -> None:
        self.calls.append(("create_appointment", payload))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.submit_error is not None:
            raise self.submit_error

    async def cancel_appointment(self, appointment_id: int) -> None:
        self.calls.append(("cancel_appointment", appointment_id))

    async def list_public_events(self) -> list[PublicEvent]:
        self.calls.append(("list_public_events", None))
        if self.events_gate is not None:
            await self.events_gate.wait()
        return list(self.events)

    async def login(self, email: str, password: str) -> User:
        self.calls.append(("login", email))
        stored = self.users.get(email)
        if stored is None or stored[0] != password:
            raise AuthenticationError("Invalid credentials")
        return stored[1]

    async def register(self, payload: dict[str, Any]) -> str:
        self.calls.append(("register", payload))
        return "Account created."

    async def request_otp(self, email: str) -> str:
        self.calls.append(("request_otp", email))
        return "PIN sent."

    async def verify_otp(self, email: str, otp: str) -> None:
        self.calls.append(("verify_otp", (email, otp)))

    async def reset_password(self, email: str, password: str) -> None:
        self.calls.append(("reset_password", (email, password)))

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        self.calls.append(("change_password", (user_id, current_password, new_password)))

    async def delete_account(self, user_id: int) -> None:
        self.calls.append(("delete_account", user_id))

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def fake_api() -> FakeClinicApi:
    return FakeClinicApi()


@pytest.fixture
def demo_user() -> User:
    return User(id=1, email="owner@example.com", fullname="Ana Cruz", phone="0917")


@pytest.fixture
def session() -> AppSession:
    return AppSession(store=MemorySessionStore())
