"""Port for durable credential storage used by authentication services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

# New accounts get a UUID; legacy `usuarios.json` files carry numeric millisecond ids.
UserId = UUID | int


@dataclass(frozen=True)
class UserRecord:
    """Stored account, including its password hash."""

    user_id: UserId
    username: str
    password_hash: str
    registered_at: datetime

    def to_summary(self) -> UserSummary:
        """Return the hash-free view of this account."""

        return UserSummary(
            user_id=self.user_id,
            username=self.username,
            registered_at=self.registered_at,
        )


@dataclass(frozen=True)
class UserSummary:
    """Account view safe to expose outside the credential store."""

    user_id: UserId
    username: str
    registered_at: datetime


class UserAlreadyExistsError(LookupError):
    """Raised when an insert conflicts with an existing username."""

    def __init__(self, *, username: str) -> None:
        super().__init__(f"username already exists: {username}")
        self.username = username


class StoreUnavailableError(RuntimeError):
    """Raised when the storage backend cannot be read or written."""


class CredentialStorePort(Protocol):
    """Credential store contract.

    `insert` is an atomic check-and-insert: two concurrent inserts for the same
    username never both succeed, and a successful insert is durable before it
    returns. `list_users` ordering is unspecified.
    """

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return stored user by exact (case-sensitive) username or None."""

    async def insert(self, record: UserRecord) -> None:
        """Persist a new user or raise `UserAlreadyExistsError`."""

    async def list_users(self) -> list[UserSummary]:
        """Return every stored user without password hashes."""
