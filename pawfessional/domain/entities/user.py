from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    id: int
    email: str
    fullname: str | None = None
    phone: str | None = None
    role: str = "user"

    @property
    def display_name(self) -> str:
        return self.fullname or self.email

    @property
    def initial(self) -> str:
        name = self.fullname or self.email or "?"
        return name[0].upper()
