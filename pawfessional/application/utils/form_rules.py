from __future__ import annotations

import re
from dataclasses import dataclass

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
SPECIAL_CHARS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")
OTP_LENGTH = 6
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class PasswordStrength:
    has_length: bool
    has_uppercase: bool
    has_number: bool
    has_special_char: bool

    @property
    def all_met(self) -> bool:
        return self.has_length and self.has_uppercase and self.has_number and self.has_special_char


def check_password(password: str) -> PasswordStrength:
    return PasswordStrength(
        has_length=len(password) >= MIN_PASSWORD_LENGTH,
        has_uppercase=re.search(r"[A-Z]", password) is not None,
        has_number=re.search(r"\d", password) is not None,
        has_special_char=SPECIAL_CHARS.search(password) is not None,
    )


def is_valid_email(email: str) -> bool:
    return bool(email.strip()) and EMAIL_PATTERN.search(email) is not None


def is_valid_otp(otp: str) -> bool:
    return len(otp) == OTP_LENGTH and otp.isdigit()


def compose_fullname(first: str, middle: str, last: str) -> str:
    parts = [first.strip(), middle.strip(), last.strip()]
    return " ".join(p for p in parts if p)


def blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
