from __future__ import annotations

import logging
from typing import Callable

from pawfessional.application.ports.session_store import SessionStorePort
from pawfessional.domain.entities.user import User

SessionListener = Callable[[User | None], None]


class AppSession:
    """
    Application-wide login state, owned by the composition root and passed
    explicitly to every view. `login` sets and persists the user, `logout`
    clears both; listeners run after each change.
    """

    def __init__(self, store: SessionStorePort) -> None:
        self._store = store
        self._user: User | None = store.load_user()
        self._listeners: list[SessionListener] = []
        self._logger = logging.getLogger(__name__)

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def require_user(self) -> User:
        if self._user is None:
            raise RuntimeError("No user is logged in")
        return self._user

    def login(self, user: User) -> None:
        self._user = user
        self._store.save_user(user)
        self._logger.info("Session started", extra={"user_id": user.id})
        self._notify()

    def logout(self) -> None:
        previous = self._user
        self._user = None
        self._store.clear_user()
        self._logger.info("Session cleared", extra={"user_id": previous.id if previous else None})
        self._notify()

    def on_change(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    @property
    def has_seen_onboarding(self) -> bool:
        return self._store.has_seen_onboarding()

    def complete_onboarding(self) -> None:
        self._store.mark_onboarding_seen()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)
