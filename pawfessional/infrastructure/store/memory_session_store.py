from __future__ import annotations

from pawfessional.application.ports.session_store import SessionStorePort
from pawfessional.domain.entities.user import User


class MemorySessionStore(SessionStorePort):
    def __init__(self) -> None:
        self._user: User | None = None
        self._seen_onboarding = False

    def load_user(self) -> User | None:
        return self._user

    def save_user(self, user: User) -> None:
        self._user = user

    def clear_user(self) -> None:
        self._user = None

    def has_seen_onboarding(self) -> bool:
        return self._seen_onboarding

    def mark_onboarding_seen(self) -> None:
        self._seen_onboarding = True
