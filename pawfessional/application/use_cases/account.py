from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from pawfessional.application.exceptions import FormError
from pawfessional.application.ports.auth_api import AuthApiPort
from pawfessional.application.use_cases.session import AppSession
from pawfessional.core.config import settings

DELETE_ACCOUNT_WARNING = (
    "Are you sure you want to delete your account? This action is irreversible "
    "and your account will be permanently deleted after 30 days."
)


class DeleteAccountCountdown:
    """
    Confirmation guard for account deletion: confirm stays disabled until the
    countdown reaches zero. It restarts each time the prompt is shown and when
    the app returns to the foreground with the prompt still open.
    """

    def __init__(self, seconds: int | None = None) -> None:
        self._seconds = seconds if seconds is not None else settings.DELETE_ACCOUNT_COUNTDOWN_SECONDS
        self._remaining = self._seconds
        self._visible = False
        self._app_state = "active"

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def confirm_enabled(self) -> bool:
        return self._visible and self._remaining == 0

    @property
    def confirm_label(self) -> str:
        return "Confirm" if self.confirm_enabled else f"Confirm ({self._remaining})"

    def show(self) -> None:
        self._visible = True
        self._remaining = self._seconds

    def hide(self) -> None:
        self._visible = False

    def tick(self) -> None:
        if self._visible and self._remaining > 0:
            self._remaining -= 1

    def on_app_state_change(self, next_state: str) -> None:
        if self._app_state in ("inactive", "background") and next_state == "active" and self._visible:
            self._remaining = self._seconds
        self._app_state = next_state

    async def run(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
        """Tick once per second until confirm is enabled or the prompt closes."""
        while self._visible and self._remaining > 0:
            await sleep(1)
            self.tick()


class AccountSettingsUseCase:
    def __init__(self, api: AuthApiPort, session: AppSession) -> None:
        self._api = api
        self._session = session
        self._logger = logging.getLogger(__name__)

    def logout(self) -> None:
        self._session.logout()

    async def delete_account(self, countdown: DeleteAccountCountdown) -> None:
        if not countdown.confirm_enabled:
            raise FormError({"confirm": f"Please wait {countdown.remaining} more second(s) to confirm."})
        user = self._session.require_user()
        await self._api.delete_account(user.id)
        self._logger.info("Account deletion confirmed", extra={"user_id": user.id})
        countdown.hide()
        self._session.logout()
