from __future__ import annotations

import pytest

from credential_service.application.ports.password_hasher_port import HashingError
from credential_service.infrastructure.security.password_hasher import (
    DEFAULT_BCRYPT_ROUNDS,
    BcryptPasswordHasher,
)


def test_hash_password_never_stores_plaintext_and_verifies() -> None:
    hasher = BcryptPasswordHasher(rounds=4)
    password = "super-secret-password"

    password_hash = hasher.hash_password(password)

    assert password_hash != password
    assert password not in password_hash
    assert hasher.verify_password(password=password, password_hash=password_hash) is True


def test_wrong_password_fails_verification() -> None:
    hasher = BcryptPasswordHasher(rounds=4)
    password_hash = hasher.hash_password("correct")

    assert hasher.verify_password(password="wrong", password_hash=password_hash) is False


def test_same_password_hashes_differently_and_both_verify() -> None:
    hasher = BcryptPasswordHasher(rounds=4)

    first = hasher.hash_password("secret1")
    second = hasher.hash_password("secret1")

    assert first != second
    assert hasher.verify_password(password="secret1", password_hash=first) is True
    assert hasher.verify_password(password="secret1", password_hash=second) is True


def test_default_cost_matches_bcrypt_ten_rounds() -> None:
    hasher = BcryptPasswordHasher()

    password_hash = hasher.hash_password("secret1")

    assert DEFAULT_BCRYPT_ROUNDS == 10
    assert hasher.rounds == 10
    assert password_hash.startswith("$2b$10$")


def test_configured_cost_is_embedded_in_hash() -> None:
    hasher = BcryptPasswordHasher(rounds=5)

    assert hasher.hash_password("secret1").startswith("$2b$05$")


@pytest.mark.parametrize("rounds", [0, 3, 32])
def test_invalid_cost_raises_hashing_error(rounds: int) -> None:
    with pytest.raises(HashingError):
        BcryptPasswordHasher(rounds=rounds)


def test_malformed_stored_hash_raises_hashing_error() -> None:
    hasher = BcryptPasswordHasher(rounds=4)

    with pytest.raises(HashingError):
        hasher.verify_password(password="secret1", password_hash="not-a-bcrypt-hash")


def test_secrets_longer_than_bcrypt_limit_hash_and_verify() -> None:
    hasher = BcryptPasswordHasher(rounds=4)
    long_password = "x" * 100

    password_hash = hasher.hash_password(long_password)

    assert hasher.verify_password(password=long_password, password_hash=password_hash) is True
