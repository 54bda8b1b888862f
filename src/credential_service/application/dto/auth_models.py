"""Pydantic models for the registration, login and user listing HTTP contracts."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class CredentialsRequest(BaseModel):
    """Request body shared by registration and login.

    Both fields are optional at the model level so that missing values reach
    the credential rules and produce the same messages clients expect.
    """

    model_config = ConfigDict(extra="ignore")

    usuario: StrictStr | None = None
    contrasena: StrictStr | None = None


class ErrorResponse(StrictModel):
    """Failure body returned by every endpoint."""

    exito: Literal[False] = False
    mensaje: str


class RegisterResponse(StrictModel):
    """HTTP response model for successful registration."""

    exito: Literal[True] = True
    mensaje: str
    usuario: str


class LoginResponse(StrictModel):
    """HTTP response model for successful login."""

    exito: Literal[True] = True
    mensaje: str
    usuario: str
    fechaLogin: str


class UserListItem(StrictModel):
    """Public account view; never carries password material."""

    id: StrictInt | StrictStr
    usuario: str
    fechaRegistro: str


class UserListResponse(StrictModel):
    """HTTP response model for the account listing endpoint."""

    exito: Literal[True] = True
    cantidad: int
    usuarios: list[UserListItem]
