"""Application authentication service for registration and credential verification."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from credential_service.application.ports.credential_store_port import (
    CredentialStorePort,
    UserAlreadyExistsError,
    UserRecord,
    UserSummary,
)
from credential_service.application.ports.password_hasher_port import PasswordHasherPort
from credential_service.domain.auth.credentials import validate_login, validate_registration

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Error en la autenticación: Usuario o contraseña incorrectos"
DUPLICATE_USER_MESSAGE = "Error: El usuario ya existe"


class DuplicateUserError(Exception):
    """Raised when registration targets a username that is already taken."""

    def __init__(self, *, username: str) -> None:
        super().__init__(DUPLICATE_USER_MESSAGE)
        self.username = username


class InvalidCredentialsError(Exception):
    """Raised for any login failure, without revealing which part was wrong."""

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS_MESSAGE)


@dataclass(frozen=True)
class RegistrationResult:
    """Successful registration outcome."""

    username: str


@dataclass(frozen=True)
class AuthenticationResult:
    """Successful login outcome."""

    username: str
    logged_in_at: datetime


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class AuthService:
    """Register accounts and authenticate credentials against the credential store."""

    def __init__(
        self,
        *,
        credentials: CredentialStorePort,
        password_hasher: PasswordHasherPort,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._credentials = credentials
        self._password_hasher = password_hasher
        self._clock = clock

    async def register(self, *, username: str | None, password: str | None) -> RegistrationResult:
        """Create one account after validation and uniqueness checks."""

        username, password = validate_registration(username=username, password=password)

        if await self._credentials.get_by_username(username=username) is not None:
            logger.info("registration_rejected reason=duplicate username=%s", username)
            raise DuplicateUserError(username=username)

        password_hash = await asyncio.to_thread(self._password_hasher.hash_password, password)
        record = UserRecord(
            user_id=uuid4(),
            username=username,
            password_hash=password_hash,
            registered_at=self._clock(),
        )

        try:
            await self._credentials.insert(record)
        except UserAlreadyExistsError as exc:
            logger.info("registration_rejected reason=concurrent_insert username=%s", username)
            raise DuplicateUserError(username=username) from exc

        logger.info("user_registered username=%s user_id=%s", username, record.user_id)
        return RegistrationResult(username=record.username)

    async def authenticate(
        self,
        *,
        username: str | None,
        password: str | None,
    ) -> AuthenticationResult:
        """Verify credentials; unknown users and wrong passwords fail identically."""

        username, password = validate_login(username=username, password=password)

        user = await self._credentials.get_by_username(username=username)
        if user is None:
            logger.info("login_failed username=%s", username)
            raise InvalidCredentialsError()

        is_valid = await asyncio.to_thread(
            self._verify_password,
            password,
            user.password_hash,
        )
        if not is_valid:
            logger.info("login_failed username=%s", username)
            raise InvalidCredentialsError()

        logger.info("login_succeeded username=%s", username)
        return AuthenticationResult(username=user.username, logged_in_at=self._clock())

    async def list_users(self) -> list[UserSummary]:
        """Return hash-free account listing for audit surfaces."""

        return await self._credentials.list_users()

    def _verify_password(self, password: str, password_hash: str) -> bool:
        return self._password_hasher.verify_password(
            password=password,
            password_hash=password_hash,
        )
