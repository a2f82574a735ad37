from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AppointmentStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    cancelled = "Cancelled"
    rejected = "Rejected"
    completed = "Completed"
    no_show = "No-show"


UPCOMING_STATUSES = frozenset({AppointmentStatus.pending.value, AppointmentStatus.approved.value})
INACTIVE_STATUSES = frozenset({AppointmentStatus.cancelled.value, AppointmentStatus.rejected.value})


@dataclass(frozen=True)
class Appointment:
    id: int
    owner_id: int | None
    status: str
    appointment_date: str  # server value, may carry a "T..." suffix
    appointment_time: str | None = None
    pet_ids: tuple[int, ...] = ()
    pet_names: tuple[str, ...] = ()
    services: tuple[str, ...] = ()
    notes: str | None = None

    @property
    def date_key(self) -> str:
        """YYYY-MM-DD part of the server date."""
        return self.appointment_date.split("T")[0]

    def has_status(self, status: str) -> bool:
        return self.status.lower() == status.lower()
