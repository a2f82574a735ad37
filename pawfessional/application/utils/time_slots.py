from __future__ import annotations

from typing import Iterator

FIRST_SLOT_HOUR = 8
CLOSING_HOUR = 18
SLOT_MINUTES = 30


def generate_time_slots() -> Iterator[str]:
    """Yield half-hour slots "08:00" .. "17:30" (20 in total)."""
    for hour in range(FIRST_SLOT_HOUR, CLOSING_HOUR):
        for minute in range(0, 60, SLOT_MINUTES):
            yield f"{hour:02d}:{minute:02d}"


def is_valid_slot(value: str) -> bool:
    return value in generate_time_slots()
