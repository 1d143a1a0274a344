"""FastAPI router for signup, signin, and user-management endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from carvalue_auth.application.dto.auth_models import (
    CredentialsRequest,
    UpdateUserRequest,
    UserResponse,
)
from carvalue_auth.application.ports.user_repository_port import UserNotFoundError
from carvalue_auth.application.services.auth_service import AuthService
from carvalue_auth.application.services.user_management_service import UserManagementService
from carvalue_auth.domain.auth.errors import (
    AuthenticationFailedError,
    CredentialError,
    CredentialOperationTimeout,
    DuplicateIdentifierError,
    IdentifierNotFoundError,
)

logger = logging.getLogger(__name__)


def build_auth_router(
    *,
    auth_service: AuthService,
    user_management: UserManagementService,
) -> APIRouter:
    """Build router exposing signup, signin, and user-management endpoints."""

    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.post(
        "/signup",
        response_model=UserResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def signup(payload: CredentialsRequest) -> UserResponse:
        try:
            user = await auth_service.signup(email=payload.email, password=payload.password)
        except DuplicateIdentifierError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        except CredentialError as error:
            raise _http_error_for_fault(error) from error
        return UserResponse.from_record(user)

    @router.post("/signin", response_model=UserResponse)
    async def signin(payload: CredentialsRequest) -> UserResponse:
        try:
            user = await auth_service.signin(email=payload.email, password=payload.password)
        except AuthenticationFailedError as error:
            raise _http_error_for_signin_failure(error) from error
        except CredentialError as error:
            raise _http_error_for_fault(error) from error
        return UserResponse.from_record(user)

    @router.get("", response_model=list[UserResponse])
    async def find_users(email: Annotated[str, Query(min_length=1)]) -> list[UserResponse]:
        try:
            found = await user_management.find_users(email=email)
        except ValueError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error
        return [UserResponse.from_record(user) for user in found]

    @router.get("/{user_id}", response_model=UserResponse)
    async def get_user(user_id: int) -> UserResponse:
        try:
            user = await user_management.get_user(user_id=user_id)
        except UserNotFoundError as error:
            raise HTTPException(status_code=404, detail="user not found") from error
        return UserResponse.from_record(user)

    @router.patch("/{user_id}", response_model=UserResponse)
    async def update_user(user_id: int, payload: UpdateUserRequest) -> UserResponse:
        try:
            user = await user_management.update_user(user_id=user_id, email=payload.email)
        except UserNotFoundError as error:
            raise HTTPException(status_code=404, detail="user not found") from error
        except DuplicateIdentifierError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return UserResponse.from_record(user)

    @router.delete("/{user_id}", response_model=UserResponse)
    async def remove_user(user_id: int) -> UserResponse:
        try:
            user = await user_management.remove_user(user_id=user_id)
        except UserNotFoundError as error:
            raise HTTPException(status_code=404, detail="user not found") from error
        return UserResponse.from_record(user)

    return router


def _http_error_for_signin_failure(error: AuthenticationFailedError) -> HTTPException:
    """Map signin rejections, collapsing them to one 401 when concealed."""

    if error.concealed:
        return HTTPException(status_code=401, detail=str(error))
    if isinstance(error, IdentifierNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


def _http_error_for_fault(error: CredentialError) -> HTTPException:
    """Map timeouts and data faults without exposing stored credential details."""

    if isinstance(error, CredentialOperationTimeout):
        return HTTPException(status_code=503, detail="credential check timed out, retry later")

    logger.error("credential_fault error_type=%s", type(error).__name__)
    return HTTPException(status_code=500, detail="internal credential error")
