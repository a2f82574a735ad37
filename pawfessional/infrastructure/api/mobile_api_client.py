from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError as PayloadValidationError

from pawfessional.application.exceptions import (
    AuthenticationError,
    FetchError,
    NetworkError,
    PawfessionalError,
    ServerError,
    ValidationError,
)
from pawfessional.application.ports.appointment_api import AppointmentApiPort
from pawfessional.application.ports.auth_api import AuthApiPort
from pawfessional.core.config import settings
from pawfessional.domain.entities.appointment import Appointment
from pawfessional.domain.entities.pet import Pet
from pawfessional.domain.entities.public_event import PublicEvent
from pawfessional.domain.entities.user import User
from pawfessional.infrastructure.api.wire_models import (
    AppointmentRecord,
    PetRecord,
    PublicEventRecord,
    UserRecord,
)

UNKNOWN_SERVER_ERROR = "An unknown server error occurred."


class MobileApiClient(AppointmentApiPort, AuthApiPort):
    """
    httpx-backed adapter for the clinic's mobile JSON API.

    Error contract:
    - transport failures and timeouts -> NetworkError
    - non-2xx with a JSON body -> ValidationError carrying the server's `message`
    - non-2xx with an unparseable body -> ServerError carrying the status code
    - reads (pets, appointments, events) raise FetchError instead of ValidationError
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    # -- pets --------------------------------------------------------------

    async def list_pets(self, owner_id: int) -> list[Pet]:
        rows = await self._read_list(f"/pets/{owner_id}", "Failed to fetch pets from server.")
        return [r.to_entity() for r in self._parse_rows(rows, PetRecord)]

    async def add_pet(self, payload: dict[str, Any]) -> None:
        await self._command("POST", "/pets/add", payload, "Failed to save pet.")
        self._logger.info("Pet registered", extra={"owner_id": payload.get("user_id")})

    async def update_pet(self, pet_id: int, payload: dict[str, Any]) -> None:
        await self._command("PATCH", f"/pets/{pet_id}", payload, "Failed to update pet details.")
        self._logger.info("Pet updated", extra={"pet_id": pet_id})

    # -- appointments ------------------------------------------------------

    async def list_appointments(self, owner_id: int) -> list[Appointment]:
        rows = await self._read_list(f"/appointments/{owner_id}", "Failed to fetch appointments")
        return [r.to_entity() for r in self._parse_rows(rows, AppointmentRecord)]

    async def create_appointment(self, payload: dict[str, Any]) -> None:
        # Only the status matters on success; the body is not inspected.
        response = await self._send("POST", "/appointment", json=payload)
        if response.is_error:
            raise self._error_from(response, UNKNOWN_SERVER_ERROR)

    async def cancel_appointment(self, appointment_id: int) -> None:
        await self._command("PATCH", f"/appointment/{appointment_id}/cancel", None, "Failed to cancel appointment.")
        self._logger.info("Appointment cancelled", extra={"appointment_id": appointment_id})

    async def list_public_events(self) -> list[PublicEvent]:
        rows = await self._read_list("/public-events", "Failed to fetch clinic events")
        return [r.to_entity() for r in self._parse_rows(rows, PublicEventRecord)]

    # -- auth and account --------------------------------------------------

    async def login(self, email: str, password: str) -> User:
        response = await self._send("POST", "/login", json={"email": email, "password": password})
        result = self._json_object(response)
        if result.get("success") and isinstance(result.get("user"), dict):
            try:
                return UserRecord.model_validate(result["user"]).to_entity()
            except PayloadValidationError as e:
                raise ServerError(response.status_code) from e
        raise AuthenticationError(str(result.get("message") or "Invalid credentials"))

    async def register(self, payload: dict[str, Any]) -> str:
        response = await self._send("POST", "/register", json=payload)
        result = self._json_object(response)
        if response.is_success and result.get("success"):
            return str(result.get("message") or "Account created.")
        raise ValidationError(str(result.get("message") or "Registration failed."), status_code=response.status_code)

    async def request_otp(self, email: str) -> str:
        result = await self._command("POST", "/forgot-password/request-otp", {"email": email}, "Failed to send PIN.")
        return str(result.get("message") or "PIN sent.")

    async def verify_otp(self, email: str, otp: str) -> None:
        await self._command(
            "POST", "/forgot-password/verify-otp", {"email": email, "otp": otp}, "Invalid PIN. Please try again."
        )

    async def reset_password(self, email: str, password: str) -> None:
        await self._command(
            "POST", "/forgot-password/reset-password", {"email": email, "password": password}, "Failed to reset password."
        )

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        await self._command(
            "POST",
            "/change-password",
            {"user_id": user_id, "currentPassword": current_password, "newPassword": new_password},
            "An error occurred during password update.",
        )

    async def delete_account(self, user_id: int) -> None:
        await self._command("POST", "/account/delete", {"user_id": user_id}, "Failed to delete account.")
        self._logger.info("Account deletion requested", extra={"user_id": user_id})

    # -- plumbing ----------------------------------------------------------

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error(
                "Request failed",
                extra={"reason": f"{method} {path}", "error": str(e) or type(e).__name__},
            )
            raise NetworkError() from e

    async def _command(
        self, method: str, path: str, payload: dict[str, Any] | None, default_message: str
    ) -> dict[str, Any]:
        response = await self._send(method, path, json=payload) if payload is not None else await self._send(method, path)
        if response.is_error:
            raise self._error_from(response, default_message)
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def _read_list(self, path: str, default_message: str) -> list[Any]:
        response = await self._send("GET", path)
        if response.is_error:
            error = self._error_from(response, default_message)
            raise FetchError(str(error)) from error
        try:
            data = response.json()
        except ValueError as e:
            raise FetchError("Received an invalid response from the server.") from e
        if not isinstance(data, list):
            raise FetchError("Unexpected response from server.")
        return data

    def _parse_rows(self, rows: list[Any], model: type[BaseModel]) -> list[Any]:
        try:
            return [model.model_validate(row) for row in rows]
        except PayloadValidationError as e:
            self._logger.error("Malformed record in server response", extra={"error": str(e)})
            raise FetchError("Unexpected response from server.") from e

    def _json_object(self, response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            self._logger.error(
                "Non-JSON server response",
                extra={"status": response.status_code, "error": response.text[:200]},
            )
            raise ServerError(response.status_code) from None
        if not isinstance(body, dict):
            raise ServerError(response.status_code)
        return body

    def _error_from(self, response: httpx.Response, default_message: str) -> PawfessionalError:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            error: PawfessionalError = ValidationError(
                str(body.get("message") or default_message), status_code=response.status_code
            )
        else:
            error = ServerError(response.status_code)

        self._logger.error(
            "Server returned an error",
            extra={"status": response.status_code, "error": str(error)},
        )
        return error
