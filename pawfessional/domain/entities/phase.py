from __future__ import annotations

from enum import IntEnum


class Phase(IntEnum):
    SELECT_PET = 0
    SELECT_SERVICE = 1
    SCHEDULE = 2
    SUMMARY = 3

    @property
    def title(self) -> str:
        return PHASE_TITLES[self]


PHASE_TITLES = {
    Phase.SELECT_PET: "Select Pet",
    Phase.SELECT_SERVICE: "Select Service",
    Phase.SCHEDULE: "Schedule",
    Phase.SUMMARY: "Summary",
}
