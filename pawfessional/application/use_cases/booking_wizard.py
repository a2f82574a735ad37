from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterator

from pawfessional.application.exceptions import (
    FetchError,
    NetworkError,
    PawfessionalError,
    SelectionRequired,
    ServerError,
    ValidationError,
)
from pawfessional.application.ports.appointment_api import AppointmentApiPort
from pawfessional.application.utils.time_slots import generate_time_slots, is_valid_slot
from pawfessional.domain.entities.draft_appointment import DraftAppointment
from pawfessional.domain.entities.pet import Pet
from pawfessional.domain.entities.phase import Phase
from pawfessional.domain.entities.service_catalog import SERVICE_CATALOG, is_known_service

BOOKING_CONFIRMED_MESSAGE = "Booking Confirmed! Your appointment has been successfully scheduled."
PETS_UNAVAILABLE_MESSAGE = "Could not load your pets. Please try again later."


@dataclass(frozen=True)
class SummaryView:
    pets: tuple[str, ...]
    services: tuple[str, ...]
    date: str
    time: str
    notes: str | None


@dataclass(frozen=True)
class SubmissionResult:
    action: str  # "booked", "in_flight"
    message: str | None


def build_submission_payload(owner_id: int, draft: DraftAppointment) -> dict[str, Any]:
    return {
        "owner_id": owner_id,
        "pet_ids": sorted(draft.pet_ids),
        "services": [name for name in SERVICE_CATALOG if name in draft.services],
        "notes": draft.notes,
        "appointment_date": draft.date,
        "appointment_time": draft.time,
    }


class BookingWizard:
    """
    Four-phase booking flow: Select Pet -> Select Service -> Schedule -> Summary.

    The wizard owns the draft, the pet list loaded for the owner and every
    request task it starts. `close()` cancels outstanding loads; results that
    arrive afterwards, or that were superseded by a newer load, are dropped.
    """

    def __init__(
        self,
        api: AppointmentApiPort,
        owner_id: int | None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._api = api
        self._owner_id = owner_id
        self._today = today
        self._phase = Phase.SELECT_PET
        self._draft = DraftAppointment()
        self._pets: list[Pet] = []
        self._loading_pets = False
        self._load_seq = 0
        self._load_error: FetchError | None = None
        self._submitting = False
        self._completed = False
        self._closed = False
        self._tasks: set[asyncio.Task] = set()
        self._logger = logging.getLogger(__name__)

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def draft(self) -> DraftAppointment:
        return self._draft

    @property
    def pets(self) -> list[Pet]:
        return list(self._pets)

    @property
    def loading_pets(self) -> bool:
        return self._loading_pets

    @property
    def load_error(self) -> FetchError | None:
        return self._load_error

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def all_pets_selected(self) -> bool:
        return len(self._draft.pet_ids) == len(self._pets)

    # -- transitions -------------------------------------------------------

    def next(self) -> Phase:
        self._ensure_open()
        if self._phase is Phase.SELECT_PET and not self._draft.pet_ids:
            raise SelectionRequired("Please select at least one pet.")
        if self._phase is Phase.SELECT_SERVICE and not self._draft.services:
            raise SelectionRequired("Please select at least one service.")
        if self._phase is Phase.SCHEDULE and not self._draft.is_scheduled:
            raise SelectionRequired("Please select a date and time.")
        if self._phase is Phase.SUMMARY:
            return self._phase

        self._phase = Phase(self._phase + 1)
        self._logger.debug("Wizard advanced", extra={"phase": self._phase.name})
        return self._phase

    def back(self) -> Phase | None:
        """Step back one phase. Returns None when the caller should leave the wizard."""
        self._ensure_open()
        if self._phase is Phase.SELECT_PET:
            return None
        self._phase = Phase(self._phase - 1)
        return self._phase

    # -- selection handlers ------------------------------------------------

    def toggle_pet(self, pet_id: int) -> None:
        self._require_phase(Phase.SELECT_PET)
        self._draft = self._draft.toggle_pet(pet_id)

    def toggle_select_all_pets(self) -> None:
        self._require_phase(Phase.SELECT_PET)
        if self.all_pets_selected:
            self._draft = self._draft.with_pets(frozenset())
        else:
            self._draft = self._draft.with_pets(frozenset(p.id for p in self._pets))

    def toggle_service(self, name: str) -> None:
        self._require_phase(Phase.SELECT_SERVICE)
        if not is_known_service(name):
            raise ValueError(f"Unknown service: {name}")
        self._draft = self._draft.toggle_service(name)

    def select_date(self, value: str) -> None:
        self._require_phase(Phase.SCHEDULE)
        try:
            chosen = date.fromisoformat(value)
        except ValueError:
            raise SelectionRequired("Please select a valid date.") from None
        if chosen < self._today():
            raise SelectionRequired("Please select a date from today onwards.")
        self._draft = self._draft.with_schedule(date=chosen.isoformat())

    def select_time(self, slot: str) -> None:
        self._require_phase(Phase.SCHEDULE)
        if not is_valid_slot(slot):
            raise SelectionRequired("Please select one of the available time slots.")
        self._draft = self._draft.with_schedule(time=slot)

    def set_notes(self, notes: str) -> None:
        self._ensure_open()
        self._draft = self._draft.with_notes(notes)

    def time_slots(self) -> Iterator[str]:
        return generate_time_slots()

    def summary(self) -> SummaryView:
        pet_names = tuple(p.name for p in self._pets if p.id in self._draft.pet_ids)
        services = tuple(name for name in SERVICE_CATALOG if name in self._draft.services)
        return SummaryView(
            pets=pet_names,
            services=services,
            date=self._draft.date,
            time=self._draft.time,
            notes=self._draft.notes or None,
        )

    # -- data loading ------------------------------------------------------

    async def load_pets(self) -> list[Pet]:
        """
        Fetch the owner's pets. Only the most recently dispatched request may
        update the list; an older response that resolves later is discarded.
        """
        if self._owner_id is None:
            self._pets = []
            return []

        self._load_seq += 1
        seq = self._load_seq
        self._loading_pets = True
        try:
            pets = await self._api.list_pets(self._owner_id)
        except PawfessionalError as e:
            if self._is_current(seq):
                self._pets = []
                self._load_error = e if isinstance(e, FetchError) else FetchError(PETS_UNAVAILABLE_MESSAGE)
            self._logger.warning(
                "Failed to fetch pets",
                extra={"owner_id": self._owner_id, "request_seq": seq, "error": str(e)},
            )
            if isinstance(e, FetchError):
                raise
            raise FetchError(PETS_UNAVAILABLE_MESSAGE) from e
        finally:
            if seq == self._load_seq:
                self._loading_pets = False

        if not self._is_current(seq):
            self._logger.debug(
                "Discarding stale pet list",
                extra={"owner_id": self._owner_id, "request_seq": seq},
            )
            return list(self._pets)

        self._pets = pets
        self._load_error = None
        return list(pets)

    def on_focus(self) -> asyncio.Task:
        """Schedule a pet reload; call whenever the wizard becomes visible."""
        self._ensure_open()
        task = asyncio.create_task(self._load_on_focus())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _load_on_focus(self) -> None:
        try:
            await self.load_pets()
        except FetchError:
            # Kept on `load_error` for the presentation layer to acknowledge.
            pass

    def _is_current(self, seq: int) -> bool:
        return not self._closed and seq == self._load_seq

    # -- submission --------------------------------------------------------

    async def submit(self) -> SubmissionResult:
        self._ensure_open()
        self._require_phase(Phase.SUMMARY)
        if self._completed:
            raise RuntimeError("Appointment already submitted")
        if self._submitting:
            self._logger.info("Submission already in flight; ignoring")
            return SubmissionResult(action="in_flight", message=None)
        if self._owner_id is None:
            raise ValidationError("Please log in to book an appointment.")

        payload = build_submission_payload(self._owner_id, self._draft)
        self._submitting = True
        try:
            await self._api.create_appointment(payload)
        except (ValidationError, ServerError, NetworkError) as e:
            self._logger.warning(
                "Booking submission failed",
                extra={"owner_id": self._owner_id, "status": getattr(e, "status_code", None), "error": str(e)},
            )
            raise
        finally:
            self._submitting = False

        self._draft = DraftAppointment()
        self._completed = True
        self._logger.info("Appointment booked", extra={"owner_id": self._owner_id})
        return SubmissionResult(action="booked", message=BOOKING_CONFIRMED_MESSAGE)

    # -- lifetime ----------------------------------------------------------

    async def close(self) -> None:
        """Tear down: abandon in-flight loads and drop the draft."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._draft = DraftAppointment()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Wizard is closed")

    def _require_phase(self, phase: Phase) -> None:
        self._ensure_open()
        if self._phase is not phase:
            raise RuntimeError(f"{phase.title} is not the current step ({self._phase.title})")
