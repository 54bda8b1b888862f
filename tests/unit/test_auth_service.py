from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from credential_service.application.ports.credential_store_port import (
    UserAlreadyExistsError,
    UserRecord,
    UserSummary,
)
from credential_service.application.services.auth_service import (
    INVALID_CREDENTIALS_MESSAGE,
    AuthService,
    DuplicateUserError,
    InvalidCredentialsError,
)
from credential_service.domain.auth.credentials import (
    CredentialField,
    CredentialValidationError,
    ValidationReason,
)
from credential_service.infrastructure.memory.in_memory_credential_store import (
    InMemoryCredentialStore,
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


class FakeCredentialStore:
    def __init__(self, *, existing: UserRecord | None = None) -> None:
        self.existing = existing
        self.inserted: list[UserRecord] = []
        self.lookups: list[str] = []

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        self.lookups.append(username)
        if self.existing is not None and self.existing.username == username:
            return self.existing
        return None

    async def insert(self, record: UserRecord) -> None:
        self.inserted.append(record)

    async def list_users(self) -> list[UserSummary]:
        return [record.to_summary() for record in self.inserted]


class RaceLosingCredentialStore(FakeCredentialStore):
    """Reports no user on lookup but a conflict on insert."""

    async def insert(self, record: UserRecord) -> None:
        raise UserAlreadyExistsError(username=record.username)


class FakePasswordHasher:
    def __init__(self, *, should_verify: bool = True) -> None:
        self.should_verify = should_verify
        self.hash_calls: list[str] = []
        self.verify_calls: list[tuple[str, str]] = []

    def hash_password(self, password: str) -> str:
        self.hash_calls.append(password)
        return f"hashed::{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        self.verify_calls.append((password, password_hash))
        return self.should_verify


def _user(*, username: str = "alice", password_hash: str = "hashed::secret1") -> UserRecord:
    return UserRecord(
        user_id=uuid4(),
        username=username,
        password_hash=password_hash,
        registered_at=FIXED_NOW,
    )


def _service(store: object, hasher: FakePasswordHasher) -> AuthService:
    return AuthService(
        credentials=store,  # type: ignore[arg-type]
        password_hasher=hasher,
        clock=lambda: FIXED_NOW,
    )


@pytest.mark.asyncio
async def test_register_hashes_password_and_inserts_record() -> None:
    store = FakeCredentialStore()
    hasher = FakePasswordHasher()
    service = _service(store, hasher)

    result = await service.register(username="alice", password="secret1")

    assert result.username == "alice"
    assert hasher.hash_calls == ["secret1"]
    assert len(store.inserted) == 1
    record = store.inserted[0]
    assert record.username == "alice"
    assert record.password_hash == "hashed::secret1"
    assert record.registered_at == FIXED_NOW


@pytest.mark.asyncio
async def test_register_rejects_existing_username_without_hashing() -> None:
    store = FakeCredentialStore(existing=_user())
    hasher = FakePasswordHasher()
    service = _service(store, hasher)

    with pytest.raises(DuplicateUserError):
        await service.register(username="alice", password="other12")

    assert hasher.hash_calls == []
    assert store.inserted == []


@pytest.mark.asyncio
async def test_register_maps_lost_insert_race_to_duplicate_user() -> None:
    store = RaceLosingCredentialStore()
    service = _service(store, FakePasswordHasher())

    with pytest.raises(DuplicateUserError):
        await service.register(username="alice", password="secret1")


@pytest.mark.asyncio
async def test_register_validates_before_touching_store() -> None:
    store = FakeCredentialStore()
    hasher = FakePasswordHasher()
    service = _service(store, hasher)

    with pytest.raises(CredentialValidationError) as exc_info:
        await service.register(username="ab", password="secret1")

    assert exc_info.value.field is CredentialField.USERNAME
    assert exc_info.value.reason is ValidationReason.TOO_SHORT
    assert store.lookups == []
    assert hasher.hash_calls == []


@pytest.mark.asyncio
async def test_register_usernames_are_case_sensitive() -> None:
    store = FakeCredentialStore(existing=_user(username="alice"))
    service = _service(store, FakePasswordHasher())

    result = await service.register(username="Alice", password="secret1")

    assert result.username == "Alice"


@pytest.mark.asyncio
async def test_authenticate_success_returns_username_and_login_time() -> None:
    user = _user()
    hasher = FakePasswordHasher(should_verify=True)
    service = _service(FakeCredentialStore(existing=user), hasher)

    result = await service.authenticate(username="alice", password="secret1")

    assert result.username == "alice"
    assert result.logged_in_at == FIXED_NOW
    assert hasher.verify_calls == [("secret1", "hashed::secret1")]


@pytest.mark.asyncio
async def test_authenticate_wrong_password_and_unknown_user_are_indistinguishable() -> None:
    wrong_password_service = _service(
        FakeCredentialStore(existing=_user()),
        FakePasswordHasher(should_verify=False),
    )
    unknown_user_hasher = FakePasswordHasher(should_verify=True)
    unknown_user_service = _service(FakeCredentialStore(), unknown_user_hasher)

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await wrong_password_service.authenticate(username="alice", password="wrong12")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        await unknown_user_service.authenticate(username="bob", password="whatever")

    assert type(wrong_password.value) is type(unknown_user.value)
    assert str(wrong_password.value) == str(unknown_user.value) == INVALID_CREDENTIALS_MESSAGE
    assert unknown_user_hasher.verify_calls == []


@pytest.mark.asyncio
async def test_authenticate_requires_both_fields() -> None:
    store = FakeCredentialStore(existing=_user())
    service = _service(store, FakePasswordHasher())

    with pytest.raises(CredentialValidationError):
        await service.authenticate(username="alice", password="")

    assert store.lookups == []


@pytest.mark.asyncio
async def test_authenticate_rereads_store_on_every_call() -> None:
    store = FakeCredentialStore(existing=_user())
    service = _service(store, FakePasswordHasher())

    await service.authenticate(username="alice", password="secret1")
    await service.authenticate(username="alice", password="secret1")

    assert store.lookups == ["alice", "alice"]


@pytest.mark.asyncio
async def test_list_users_returns_summaries_without_hashes() -> None:
    store = FakeCredentialStore()
    service = _service(store, FakePasswordHasher())
    await service.register(username="alice", password="secret1")

    users = await service.list_users()

    assert [user.username for user in users] == ["alice"]
    assert all(not hasattr(user, "password_hash") for user in users)


@pytest.mark.asyncio
async def test_concurrent_registrations_for_one_username_yield_single_success() -> None:
    store = InMemoryCredentialStore()
    service = _service(store, FakePasswordHasher())
    attempts = 10

    results = await asyncio.gather(
        *(
            service.register(username="alice", password=f"secret{index:02d}")
            for index in range(attempts)
        ),
        return_exceptions=True,
    )

    successes = [result for result in results if not isinstance(result, BaseException)]
    duplicates = [result for result in results if isinstance(result, DuplicateUserError)]
    assert len(successes) == 1
    assert len(duplicates) == attempts - 1
    assert [user.username for user in await store.list_users()] == ["alice"]
