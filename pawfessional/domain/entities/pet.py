from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Pet:
    id: int
    name: str
    species: str | None = None
    breed: str | None = None
    image_url: str | None = None
    gender: str | None = None
    age: str | None = None
    weight: str | None = None
    notes: str | None = None
