from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PublicEvent:
    id: int
    title: str
    event_date: str
    event_time: str | None = None
    description: str | None = None

    @property
    def date_key(self) -> str:
        return self.event_date.split("T")[0]
