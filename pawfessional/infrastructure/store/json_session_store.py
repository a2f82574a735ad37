from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict
from pathlib import Path
from typing import Any

from pawfessional.application.ports.session_store import SessionStorePort
from pawfessional.domain.entities.user import User


class JsonSessionStore(SessionStorePort):
    """Keeps the logged-in user and onboarding flag in a single JSON file."""

    def __init__(self, path: str = "./data/session.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def load_user(self) -> User | None:
        data = self._load()
        user = data.get("user")
        if not isinstance(user, dict):
            return None
        try:
            return User(
                id=int(user["id"]),
                email=str(user["email"]),
                fullname=user.get("fullname"),
                phone=user.get("phone"),
                role=user.get("role") or "user",
            )
        except (KeyError, TypeError, ValueError):
            self._logger.warning("Ignoring malformed session user", extra={"reason": str(self._path)})
            return None

    def save_user(self, user: User) -> None:
        with self._lock:
            data = self._load()
            data["user"] = asdict(user)
            self._save(data)

    def clear_user(self) -> None:
        with self._lock:
            data = self._load()
            data["user"] = None
            self._save(data)

    def has_seen_onboarding(self) -> bool:
        return bool(self._load().get("has_seen_onboarding", False))

    def mark_onboarding_seen(self) -> None:
        with self._lock:
            data = self._load()
            data["has_seen_onboarding"] = True
            self._save(data)

    def _load(self) -> dict[str, Any]:
        """Load the session file, returning defaults if missing or corrupted."""
        if not self._path.exists():
            return {"user": None, "has_seen_onboarding": False, "version": 1}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning("Session file unreadable; starting fresh", extra={"error": str(e)})
            return {"user": None, "has_seen_onboarding": False, "version": 1}
        if not isinstance(data, dict):
            return {"user": None, "has_seen_onboarding": False, "version": 1}
        data.setdefault("version", 1)
        return data

    def _save(self, data: dict[str, Any]) -> None:
        """Write atomically via a temp file and rename."""
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise
