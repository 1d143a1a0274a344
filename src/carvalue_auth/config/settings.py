"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveFloat = Annotated[float, Field(gt=0.0)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    database_echo: bool = Field(default=False, validation_alias="DATABASE_ECHO")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    auth_operation_timeout_seconds: PositiveFloat | None = Field(
        default=None,
        validation_alias="AUTH_OPERATION_TIMEOUT_SECONDS",
    )
    auth_conceal_signin_failure: bool = Field(
        default=False,
        validation_alias="AUTH_CONCEAL_SIGNIN_FAILURE",
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
