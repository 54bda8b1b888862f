"""Flat JSON file adapter for credential storage."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any
from uuid import UUID

from credential_service.application.ports.credential_store_port import (
    CredentialStorePort,
    StoreUnavailableError,
    UserAlreadyExistsError,
    UserId,
    UserRecord,
    UserSummary,
)
from credential_service.domain.timestamps import format_utc_timestamp, parse_utc_timestamp

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_path_locks: dict[Path, threading.RLock] = {}


def _writer_lock_for(path: Path) -> threading.RLock:
    """Return the process-wide writer lock shared by every store on one file."""

    with _registry_lock:
        lock = _path_locks.get(path)
        if lock is None:
            lock = threading.RLock()
            _path_locks[path] = lock
        return lock


class JsonFileCredentialStore(CredentialStorePort):
    """Credential store persisted as one JSON array of user documents.

    Each document uses the `{id, usuario, contrasena, fechaRegistro}` layout.
    Writes hold a single-writer lock across re-read, existence check and write,
    and replace the file atomically so readers never observe a partial write.
    The lock is per process: only one process may write a given file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path).resolve()
        self._lock = _writer_lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by exact username or None."""

        documents = await asyncio.to_thread(self._read_documents)
        for document in documents:
            if document.get("usuario") == username:
                return _to_user_record(document)
        return None

    async def insert(self, record: UserRecord) -> None:
        """Append one user document unless the username is already present."""

        await asyncio.to_thread(self._insert_locked, record)

    async def list_users(self) -> list[UserSummary]:
        """Return users in file (insertion) order, without password hashes."""

        documents = await asyncio.to_thread(self._read_documents)
        return [_to_user_record(document).to_summary() for document in documents]

    def _insert_locked(self, record: UserRecord) -> None:
        with self._lock:
            documents = self._read_documents()
            if any(document.get("usuario") == record.username for document in documents):
                raise UserAlreadyExistsError(username=record.username)
            documents.append(_to_document(record))
            self._write_documents(documents)

    def _read_documents(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            self._initialize_file()
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreUnavailableError(f"cannot read credential file {self._path}") from exc

        try:
            documents = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreUnavailableError(f"credential file {self._path} is not valid JSON") from exc
        if not isinstance(documents, list):
            raise StoreUnavailableError(f"credential file {self._path} must hold a JSON array")
        return documents

    def _initialize_file(self) -> None:
        with self._lock:
            if self._path.exists():
                return
            logger.info("credential_file_created path=%s", self._path)
            self._write_documents([])

    def _write_documents(self, documents: list[dict[str, Any]]) -> None:
        payload = json.dumps(documents, indent=2, ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreUnavailableError(f"cannot write credential file {self._path}") from exc


def _to_document(record: UserRecord) -> dict[str, Any]:
    user_id = record.user_id
    return {
        "id": user_id if isinstance(user_id, int) else str(user_id),
        "usuario": record.username,
        "contrasena": record.password_hash,
        "fechaRegistro": format_utc_timestamp(record.registered_at),
    }


def _to_user_id(raw: object) -> UserId:
    # Files written by the earlier Node server use `Date.now()` integers as ids.
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return UUID(raw)
    raise ValueError(f"unsupported user id: {raw!r}")


def _to_user_record(document: dict[str, Any]) -> UserRecord:
    try:
        return UserRecord(
            user_id=_to_user_id(document["id"]),
            username=str(document["usuario"]),
            password_hash=str(document["contrasena"]),
            registered_at=parse_utc_timestamp(str(document["fechaRegistro"])),
        )
    except (KeyError, ValueError) as exc:
        raise StoreUnavailableError("credential file holds a malformed user document") from exc
