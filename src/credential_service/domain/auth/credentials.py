"""Shared validation rules for credential inputs."""

from __future__ import annotations

from enum import StrEnum

USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 6


class CredentialField(StrEnum):
    """Credential input fields that can fail validation."""

    USERNAME = "username"
    PASSWORD = "password"


class ValidationReason(StrEnum):
    """Why one credential field was rejected."""

    MISSING = "missing"
    TOO_SHORT = "too_short"


class CredentialValidationError(ValueError):
    """Raised when credential input does not satisfy shape or length rules."""

    def __init__(self, *, field: CredentialField, reason: ValidationReason, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.reason = reason
        self.message = message


REGISTRATION_MISSING_FIELDS_MESSAGE = "Error: Usuario y contraseña son requeridos"
USERNAME_TOO_SHORT_MESSAGE = (
    f"Error: El usuario debe tener al menos {USERNAME_MIN_LENGTH} caracteres"
)
PASSWORD_TOO_SHORT_MESSAGE = (
    f"Error: La contraseña debe tener al menos {PASSWORD_MIN_LENGTH} caracteres"
)
LOGIN_MISSING_FIELDS_MESSAGE = "Error en la autenticación: Datos incompletos"


def text_length(value: str) -> int:
    """Return length in UTF-16 code units, as browser clients count it.

    Characters outside the Basic Multilingual Plane (most emoji) count as two.
    """

    return len(value.encode("utf-16-le", "surrogatepass")) // 2


def validate_registration(*, username: str | None, password: str | None) -> tuple[str, str]:
    """Validate registration input and return the accepted pair.

    Checks run in a fixed order (missing fields, then username length, then
    password length) so that every client replicating these rules reports the
    same first failure.
    """

    _require_present(
        username=username,
        password=password,
        message=REGISTRATION_MISSING_FIELDS_MESSAGE,
    )
    assert username is not None and password is not None

    if text_length(username) < USERNAME_MIN_LENGTH:
        raise CredentialValidationError(
            field=CredentialField.USERNAME,
            reason=ValidationReason.TOO_SHORT,
            message=USERNAME_TOO_SHORT_MESSAGE,
        )
    if text_length(password) < PASSWORD_MIN_LENGTH:
        raise CredentialValidationError(
            field=CredentialField.PASSWORD,
            reason=ValidationReason.TOO_SHORT,
            message=PASSWORD_TOO_SHORT_MESSAGE,
        )
    return username, password


def validate_login(*, username: str | None, password: str | None) -> tuple[str, str]:
    """Validate login input presence and return the accepted pair."""

    _require_present(
        username=username,
        password=password,
        message=LOGIN_MISSING_FIELDS_MESSAGE,
    )
    assert username is not None and password is not None
    return username, password


def _require_present(*, username: str | None, password: str | None, message: str) -> None:
    if not username:
        raise CredentialValidationError(
            field=CredentialField.USERNAME,
            reason=ValidationReason.MISSING,
            message=message,
        )
    if not password:
        raise CredentialValidationError(
            field=CredentialField.PASSWORD,
            reason=ValidationReason.MISSING,
            message=message,
        )
