"""SQLAlchemy adapter for credential storage."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credential_service.application.ports.credential_store_port import (
    CredentialStorePort,
    StoreUnavailableError,
    UserAlreadyExistsError,
    UserRecord,
    UserSummary,
)
from credential_service.infrastructure.db.metadata import users


class SqlAlchemyCredentialStore(CredentialStorePort):
    """Credential store backed by SQLAlchemy async sessions.

    Username uniqueness is enforced by the `uq_users_username` constraint, so
    concurrent inserts are arbitrated by the database itself.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by exact username or None."""

        statement = sa.select(
            users.c.id,
            users.c.username,
            users.c.password_hash,
            users.c.registered_at,
        ).where(users.c.username == username).limit(1)

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
        except (DBAPIError, OSError) as exc:
            raise StoreUnavailableError("credential database is unavailable") from exc

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def insert(self, record: UserRecord) -> None:
        """Insert one user row.

        Only a `uq_users_username` violation becomes `UserAlreadyExistsError`;
        other integrity failures propagate unchanged.
        """

        statement = sa.insert(users).values(
            id=record.user_id,
            username=record.username,
            password_hash=record.password_hash,
            registered_at=record.registered_at,
        )

        try:
            async with self._session_factory() as session:
                try:
                    await session.execute(statement)
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    if _is_username_conflict(exc):
                        raise UserAlreadyExistsError(username=record.username) from exc
                    raise
        except IntegrityError:
            raise
        except (DBAPIError, OSError) as exc:
            raise StoreUnavailableError("credential database is unavailable") from exc

    async def list_users(self) -> list[UserSummary]:
        """Return users ordered by registration time, without password hashes."""

        statement = sa.select(
            users.c.id,
            users.c.username,
            users.c.registered_at,
        ).order_by(users.c.registered_at, users.c.id)

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
        except (DBAPIError, OSError) as exc:
            raise StoreUnavailableError("credential database is unavailable") from exc

        return [_to_user_summary(row) for row in result.mappings().all()]


# SQLite names the column instead of the constraint.
_USERNAME_CONFLICT_MARKERS = ("uq_users_username", "UNIQUE constraint failed: users.username")


def _is_username_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _USERNAME_CONFLICT_MARKERS)


def _to_uuid(raw_user_id: object) -> UUID:
    return raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))


def _to_aware_datetime(value: datetime) -> datetime:
    # SQLite drops tzinfo on round-trip; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    return UserRecord(
        user_id=_to_uuid(row["id"]),
        username=cast(str, row["username"]),
        password_hash=cast(str, row["password_hash"]),
        registered_at=_to_aware_datetime(cast(datetime, row["registered_at"])),
    )


def _to_user_summary(row: sa.RowMapping) -> UserSummary:
    return UserSummary(
        user_id=_to_uuid(row["id"]),
        username=cast(str, row["username"]),
        registered_at=_to_aware_datetime(cast(datetime, row["registered_at"])),
    )
