"""Port for password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class HashingError(RuntimeError):
    """Raised when the hashing primitive cannot run or a stored hash is malformed."""


class PasswordHasherPort(Protocol):
    """Password hashing/verification contract."""

    def hash_password(self, password: str) -> str:
        """Hash plaintext password for storage with a fresh random salt."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext password against stored hash."""
