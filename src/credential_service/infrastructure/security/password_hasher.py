"""Bcrypt password hasher adapter."""

from __future__ import annotations

import bcrypt

from credential_service.application.ports.password_hasher_port import (
    HashingError,
    PasswordHasherPort,
)

DEFAULT_BCRYPT_ROUNDS = 10
MIN_BCRYPT_ROUNDS = 4
MAX_BCRYPT_ROUNDS = 31
# bcrypt only consumes the first 72 bytes of a secret.
_BCRYPT_MAX_SECRET_BYTES = 72


class BcryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using bcrypt with a tunable cost factor."""

    def __init__(self, *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        if not MIN_BCRYPT_ROUNDS <= rounds <= MAX_BCRYPT_ROUNDS:
            raise HashingError(
                f"bcrypt rounds must be between {MIN_BCRYPT_ROUNDS} and {MAX_BCRYPT_ROUNDS}"
            )
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash_password(self, password: str) -> str:
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            return bcrypt.hashpw(_encode_secret(password), salt).decode("utf-8")
        except ValueError as exc:
            raise HashingError("bcrypt hashing failed") from exc

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_encode_secret(password), password_hash.encode("utf-8"))
        except ValueError as exc:
            raise HashingError("stored password hash is malformed") from exc


def _encode_secret(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_SECRET_BYTES]
