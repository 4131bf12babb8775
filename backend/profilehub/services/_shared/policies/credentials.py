"""Input rules for sign-up and sign-in, shared by services and schemas."""

from __future__ import annotations

from profilehub.models.user import EMAIL_MAX_LENGTH, EMAIL_RE, NAME_MAX_LENGTH, NAME_MIN_LENGTH
from profilehub.services._shared.errors import ValidationError

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def require_text(value: object, label: str) -> str:
    """Return ``value`` when it is a non-blank string, else raise ``ValidationError``."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value


def check_email(email: object) -> str:
    value = require_text(email, "Email")
    if len(value) > EMAIL_MAX_LENGTH or not EMAIL_RE.match(value):
        raise ValidationError("Please enter a valid email address")
    return value


def check_name(name: object) -> str:
    value = require_text(name, "Name")
    if len(value) < NAME_MIN_LENGTH:
        raise ValidationError(f"Name must be at least {NAME_MIN_LENGTH} characters long")
    if len(value) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must be less than {NAME_MAX_LENGTH} characters")
    return value


def check_new_password(password: object) -> str:
    value = require_text(password, "Password")
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if len(value) > PASSWORD_MAX_LENGTH:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_LENGTH} characters long")
    return value


def validate_sign_up(name: object, email: object, password: object) -> None:
    """Apply every registration rule, raising on the first violation."""
    check_name(name)
    check_email(email)
    check_new_password(password)


def validate_sign_in(email: object, password: object) -> None:
    check_email(email)
    require_text(password, "Password")
