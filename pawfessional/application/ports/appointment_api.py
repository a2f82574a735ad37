from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pawfessional.domain.entities.appointment import Appointment
from pawfessional.domain.entities.pet import Pet
from pawfessional.domain.entities.public_event import PublicEvent


class AppointmentApiPort(ABC):
    @abstractmethod
    async def list_pets(self, owner_id: int) -> list[Pet]:
        """List the owner's pets. Raises FetchError/NetworkError."""
        raise NotImplementedError

    @abstractmethod
    async def add_pet(self, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update_pet(self, pet_id: int, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def list_appointments(self, owner_id: int) -> list[Appointment]:
        raise NotImplementedError

    @abstractmethod
    async def create_appointment(self, payload: dict[str, Any]) -> None:
        """Submit a booking. Raises ValidationError, ServerError or NetworkError."""
        raise NotImplementedError

    @abstractmethod
    async def cancel_appointment(self, appointment_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    async def list_public_events(self) -> list[PublicEvent]:
        raise NotImplementedError
