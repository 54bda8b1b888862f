"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PortInt = Annotated[int, Field(gt=0, le=65_535)]
BcryptRounds = Annotated[int, Field(ge=4, le=31)]

CredentialBackend = Literal["file", "database", "memory"]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: NonEmptyStr = Field(default="0.0.0.0", validation_alias="HOST")
    port: PortInt = Field(default=3000, validation_alias="PORT")
    credential_backend: CredentialBackend = Field(
        default="file",
        validation_alias="CREDENTIAL_BACKEND",
    )
    users_file_path: NonEmptyStr = Field(
        default="usuarios.json",
        validation_alias="USERS_FILE_PATH",
    )
    database_url: NonEmptyStr | None = Field(default=None, validation_alias="DATABASE_URL")
    bcrypt_rounds: BcryptRounds = Field(default=10, validation_alias="BCRYPT_ROUNDS")
    cors_allow_origins: str = Field(default="*", validation_alias="CORS_ALLOW_ORIGINS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def _require_database_url_for_database_backend(self) -> "Settings":
        if self.credential_backend == "database" and self.database_url is None:
            raise ValueError("DATABASE_URL is required when CREDENTIAL_BACKEND=database")
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Return configured CORS origins as a list."""

        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()
