from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class DraftAppointment:
    pet_ids: frozenset[int] = frozenset()
    services: frozenset[str] = frozenset()
    date: str = ""  # YYYY-MM-DD
    time: str = ""  # HH:MM
    notes: str = ""

    def toggle_pet(self, pet_id: int) -> "DraftAppointment":
        return replace(self, pet_ids=_toggle(self.pet_ids, pet_id))

    def toggle_service(self, name: str) -> "DraftAppointment":
        return replace(self, services=_toggle(self.services, name))

    def with_pets(self, pet_ids: frozenset[int]) -> "DraftAppointment":
        return replace(self, pet_ids=frozenset(pet_ids))

    def with_schedule(self, date: str | None = None, time: str | None = None) -> "DraftAppointment":
        return replace(
            self,
            date=self.date if date is None else date,
            time=self.time if time is None else time,
        )

    def with_notes(self, notes: str) -> "DraftAppointment":
        return replace(self, notes=notes)

    @property
    def is_scheduled(self) -> bool:
        return bool(self.date and self.time)


def _toggle(items: frozenset, item) -> frozenset:
    if item in items:
        return items - {item}
    return items | {item}
