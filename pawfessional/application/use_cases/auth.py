from __future__ import annotations

import logging
from dataclasses import dataclass

from pawfessional.application.exceptions import FormError
from pawfessional.application.ports.auth_api import AuthApiPort
from pawfessional.application.use_cases.session import AppSession
from pawfessional.application.utils.form_rules import (
    MIN_PASSWORD_LENGTH,
    check_password,
    compose_fullname,
    is_valid_email,
    is_valid_otp,
)
from pawfessional.domain.entities.user import User


class LoginUseCase:
    def __init__(self, api: AuthApiPort, session: AppSession) -> None:
        self._api = api
        self._session = session
        self._logger = logging.getLogger(__name__)

    async def execute(self, email: str, password: str) -> User:
        if not email or not password:
            raise FormError({"credentials": "Please enter email and password"})
        user = await self._api.login(email.strip(), password)
        self._session.login(user)
        return user


@dataclass(frozen=True)
class RegistrationForm:
    first_name: str
    last_name: str
    phone: str
    email: str
    password: str
    confirm_password: str
    middle_name: str = ""


def validate_registration(form: RegistrationForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.first_name.strip():
        errors["first_name"] = "First name is required"
    if not form.last_name.strip():
        errors["last_name"] = "Last name is required"
    if not form.phone.strip():
        errors["phone"] = "Phone is required"
    if not is_valid_email(form.email):
        errors["email"] = "A valid email is required"
    if not form.password:
        errors["password"] = "Password is required"
    elif not check_password(form.password).all_met:
        errors["password"] = "Password does not meet all requirements."
    if form.password != form.confirm_password:
        errors["confirm_password"] = "Passwords do not match"
    return errors


class RegisterUseCase:
    def __init__(self, api: AuthApiPort) -> None:
        self._api = api
        self._logger = logging.getLogger(__name__)

    async def execute(self, form: RegistrationForm) -> str:
        """Create the account. The user still has to log in afterwards."""
        errors = validate_registration(form)
        if errors:
            raise FormError(errors)
        payload = {
            "fullname": compose_fullname(form.first_name, form.middle_name, form.last_name),
            "email": form.email.strip(),
            "password": form.password,
            "phone": form.phone.strip(),
            "address": "",
            "role": "user",
        }
        message = await self._api.register(payload)
        self._logger.info("Account registered")
        return message


class PasswordResetFlow:
    """enter_email -> enter_otp -> reset_password -> done"""

    def __init__(self, api: AuthApiPort) -> None:
        self._api = api
        self._phase = "enter_email"
        self._email = ""

    @property
    def phase(self) -> str:
        return self._phase

    async def request_otp(self, email: str) -> str:
        if not email.strip():
            raise FormError({"email": "Please enter your email address."})
        message = await self._api.request_otp(email.strip())
        self._email = email.strip()
        self._phase = "enter_otp"
        return message

    async def verify_otp(self, otp: str) -> None:
        self._expect("enter_otp")
        if not is_valid_otp(otp):
            raise FormError({"otp": "Please enter the complete 6-digit PIN."})
        await self._api.verify_otp(self._email, otp)
        self._phase = "reset_password"

    async def reset_password(self, new_password: str, confirm_password: str) -> None:
        self._expect("reset_password")
        if new_password != confirm_password:
            raise FormError({"confirm_password": "Passwords do not match."})
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise FormError({"password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."})
        await self._api.reset_password(self._email, new_password)
        self._phase = "done"

    def _expect(self, phase: str) -> None:
        if self._phase != phase:
            raise RuntimeError(f"Password reset is at '{self._phase}', not '{phase}'")


class ChangePasswordUseCase:
    def __init__(self, api: AuthApiPort, session: AppSession) -> None:
        self._api = api
        self._session = session

    async def execute(self, current_password: str, new_password: str, confirm_password: str) -> None:
        if not current_password or not new_password or not confirm_password:
            raise FormError({"password": "Please fill out all fields."})
        if new_password != confirm_password:
            raise FormError({"confirm_password": "New passwords do not match."})
        user = self._session.require_user()
        await self._api.change_password(user.id, current_password, new_password)
