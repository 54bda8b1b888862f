"""auth-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credential_service.application.ports.credential_store_port import CredentialStorePort
from credential_service.application.services.auth_service import AuthService
from credential_service.config.settings import Settings, load_settings
from credential_service.infrastructure.db.credential_store import SqlAlchemyCredentialStore
from credential_service.infrastructure.db.session import create_session_factory
from credential_service.infrastructure.file.json_credential_store import JsonFileCredentialStore
from credential_service.infrastructure.http.auth_router import build_auth_router
from credential_service.infrastructure.logging import configure_logging
from credential_service.infrastructure.memory.in_memory_credential_store import (
    InMemoryCredentialStore,
)
from credential_service.infrastructure.security.password_hasher import BcryptPasswordHasher

logger = logging.getLogger(__name__)


def build_credential_store(settings: Settings) -> CredentialStorePort:
    """Build the credential store adapter selected by `CREDENTIAL_BACKEND`."""

    if settings.credential_backend == "database":
        assert settings.database_url is not None
        return SqlAlchemyCredentialStore(create_session_factory(settings.database_url))
    if settings.credential_backend == "memory":
        return InMemoryCredentialStore()
    return JsonFileCredentialStore(settings.users_file_path)


def build_auth_service(settings: Settings) -> AuthService:
    """Build authentication service with configured store and bcrypt cost."""

    return AuthService(
        credentials=build_credential_store(settings),
        password_hasher=BcryptPasswordHasher(rounds=settings.bcrypt_rounds),
    )


def create_app(
    *,
    auth_service: AuthService | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create FastAPI app exposing the credential endpoints."""

    if settings is None:
        settings = load_settings()
    configure_logging(level=settings.log_level)

    if auth_service is None:
        auth_service = build_auth_service(settings)

    app = FastAPI(title="credential-service")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(build_auth_router(auth_service=auth_service))

    logger.info(
        "auth_api_configured port=%s backend=%s",
        settings.port,
        settings.credential_backend,
    )
    return app


def run_asgi_server(*, host: str, port: int) -> None:
    """Run auth-api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.auth_api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run auth-api runtime process."""

    settings = load_settings()
    run_asgi_server(host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
