"""api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from carvalue_auth.application.services.auth_service import AuthService
from carvalue_auth.application.services.user_management_service import UserManagementService
from carvalue_auth.config.settings import Settings, load_settings
from carvalue_auth.infrastructure.db.session import create_session_factory
from carvalue_auth.infrastructure.db.user_repository import SqlAlchemyUserRepository
from carvalue_auth.infrastructure.http.auth_router import build_auth_router
from carvalue_auth.infrastructure.logging import configure_logging
from carvalue_auth.infrastructure.observability.user_lifecycle_logger import (
    LoggingUserLifecycleHook,
)
from carvalue_auth.infrastructure.security.password_hasher import ScryptPasswordHasher

API_HOST = "0.0.0.0"
API_PORT = 3000
logger = logging.getLogger(__name__)


def build_user_repository(
    database_url: str,
    *,
    database_echo: bool = False,
) -> SqlAlchemyUserRepository:
    """Build user repository that reports committed writes to the lifecycle logger."""

    session_factory = create_session_factory(database_url, echo=database_echo)
    return SqlAlchemyUserRepository(
        session_factory,
        lifecycle_hook=LoggingUserLifecycleHook(),
    )


def build_auth_service(
    database_url: str,
    *,
    database_echo: bool = False,
    operation_timeout_seconds: float | None = None,
    conceal_signin_failure: bool = False,
) -> AuthService:
    """Build signup/signin service with SQLAlchemy-backed dependencies."""

    return AuthService(
        users=build_user_repository(database_url, database_echo=database_echo),
        password_hasher=ScryptPasswordHasher(),
        operation_timeout_seconds=operation_timeout_seconds,
        conceal_signin_failure=conceal_signin_failure,
    )


def build_user_management_service(
    database_url: str,
    *,
    database_echo: bool = False,
) -> UserManagementService:
    """Build user-management service with SQLAlchemy-backed dependencies."""

    return UserManagementService(
        users=build_user_repository(database_url, database_echo=database_echo),
    )


def build_auth_service_from_settings(settings: Settings) -> AuthService:
    """Build signup/signin service from runtime settings."""

    return build_auth_service(
        settings.database_url,
        database_echo=settings.database_echo,
        operation_timeout_seconds=settings.auth_operation_timeout_seconds,
        conceal_signin_failure=settings.auth_conceal_signin_failure,
    )


def create_app(
    *,
    auth_service: AuthService | None = None,
    user_management: UserManagementService | None = None,
) -> FastAPI:
    """Create FastAPI app exposing the signup/signin and user-management routes."""

    if auth_service is None or user_management is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        if auth_service is None:
            auth_service = build_auth_service_from_settings(settings)
            logger.info(
                "api_auth_service_ready conceal_signin_failure=%s timeout_seconds=%s",
                settings.auth_conceal_signin_failure,
                settings.auth_operation_timeout_seconds,
            )
        if user_management is None:
            user_management = build_user_management_service(
                settings.database_url,
                database_echo=settings.database_echo,
            )

    app = FastAPI()
    app.include_router(
        build_auth_router(auth_service=auth_service, user_management=user_management)
    )
    return app


def run_asgi_server(*, host: str = API_HOST, port: int = API_PORT) -> None:
    """Run api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run api runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
