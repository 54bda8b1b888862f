"""FastAPI router for registration, login and account listing endpoints."""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from credential_service.application.dto.auth_models import (
    CredentialsRequest,
    ErrorResponse,
    LoginResponse,
    RegisterResponse,
    UserListItem,
    UserListResponse,
)
from credential_service.application.services.auth_service import (
    AuthService,
    DuplicateUserError,
    InvalidCredentialsError,
)
from credential_service.domain.auth.credentials import CredentialValidationError
from credential_service.domain.timestamps import format_utc_timestamp

logger = logging.getLogger(__name__)

REGISTER_SUCCESS_MESSAGE = "Registro exitoso"
LOGIN_SUCCESS_MESSAGE = "Autenticación satisfactoria"
INTERNAL_ERROR_MESSAGE = "Error interno del servidor"

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def build_auth_router(*, auth_service: AuthService) -> APIRouter:
    """Build router exposing the credential HTTP contract under `/api`."""

    router = APIRouter(prefix="/api", tags=["auth"])

    @router.post(
        "/registro",
        response_model=RegisterResponse,
        status_code=201,
        responses={**_ERROR_RESPONSES, 409: {"model": ErrorResponse}},
    )
    async def register(request: Request) -> RegisterResponse | JSONResponse:
        payload = await _read_credentials(request)
        try:
            result = await auth_service.register(
                username=payload.usuario,
                password=payload.contrasena,
            )
        except CredentialValidationError as exc:
            return _error_response(status_code=400, message=exc.message)
        except DuplicateUserError as exc:
            return _error_response(status_code=409, message=str(exc))
        except Exception:
            logger.exception("registration_failed_internal")
            return _error_response(status_code=500, message=INTERNAL_ERROR_MESSAGE)

        return RegisterResponse(mensaje=REGISTER_SUCCESS_MESSAGE, usuario=result.username)

    @router.post(
        "/login",
        response_model=LoginResponse,
        responses={**_ERROR_RESPONSES, 401: {"model": ErrorResponse}},
    )
    async def login(request: Request) -> LoginResponse | JSONResponse:
        payload = await _read_credentials(request)
        try:
            result = await auth_service.authenticate(
                username=payload.usuario,
                password=payload.contrasena,
            )
        except CredentialValidationError as exc:
            return _error_response(status_code=400, message=exc.message)
        except InvalidCredentialsError as exc:
            return _error_response(status_code=401, message=str(exc))
        except Exception:
            logger.exception("login_failed_internal")
            return _error_response(status_code=500, message=INTERNAL_ERROR_MESSAGE)

        return LoginResponse(
            mensaje=LOGIN_SUCCESS_MESSAGE,
            usuario=result.username,
            fechaLogin=format_utc_timestamp(result.logged_in_at),
        )

    @router.get(
        "/usuarios",
        response_model=UserListResponse,
        responses={500: {"model": ErrorResponse}},
    )
    async def list_users() -> UserListResponse | JSONResponse:
        try:
            summaries = await auth_service.list_users()
        except Exception:
            logger.exception("user_listing_failed_internal")
            return _error_response(status_code=500, message=INTERNAL_ERROR_MESSAGE)

        items = [
            UserListItem(
                id=summary.user_id if isinstance(summary.user_id, int) else str(summary.user_id),
                usuario=summary.username,
                fechaRegistro=format_utc_timestamp(summary.registered_at),
            )
            for summary in summaries
        ]
        return UserListResponse(cantidad=len(items), usuarios=items)

    return router


async def _read_credentials(request: Request) -> CredentialsRequest:
    """Parse JSON or form-encoded credentials; unreadable bodies count as empty."""

    raw_body = await request.body()
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        fields = dict(parse_qsl(raw_body.decode("utf-8", errors="replace")))
        return CredentialsRequest(
            usuario=fields.get("usuario"),
            contrasena=fields.get("contrasena"),
        )

    try:
        return CredentialsRequest.model_validate_json(raw_body)
    except ValidationError:
        return CredentialsRequest()


def _error_response(*, status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(mensaje=message).model_dump(),
    )
