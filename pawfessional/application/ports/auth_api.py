from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pawfessional.domain.entities.user import User


class AuthApiPort(ABC):
    @abstractmethod
    async def login(self, email: str, password: str) -> User:
        """Returns the logged-in user. Raises AuthenticationError on bad credentials."""
        raise NotImplementedError

    @abstractmethod
    async def register(self, payload: dict[str, Any]) -> str:
        """Create an account. Returns the server's confirmation message."""
        raise NotImplementedError

    @abstractmethod
    async def request_otp(self, email: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def verify_otp(self, email: str, otp: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def reset_password(self, email: str, password: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_account(self, user_id: int) -> None:
        raise NotImplementedError
