"""Process-local credential store for tests and ephemeral runs."""

from __future__ import annotations

import threading

from credential_service.application.ports.credential_store_port import (
    CredentialStorePort,
    UserAlreadyExistsError,
    UserRecord,
    UserSummary,
)


class InMemoryCredentialStore(CredentialStorePort):
    """Dictionary-backed credential store; contents are lost on restart."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, UserRecord] = {}

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        return self._users.get(username)

    async def insert(self, record: UserRecord) -> None:
        with self._lock:
            if record.username in self._users:
                raise UserAlreadyExistsError(username=record.username)
            self._users[record.username] = record

    async def list_users(self) -> list[UserSummary]:
        with self._lock:
            records = list(self._users.values())
        return [record.to_summary() for record in records]
