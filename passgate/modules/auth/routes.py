"""Authentication API routes."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from passgate.modules.auth.exceptions import (
    AuthenticationError,
    IncorrectPasswordError,
    PasswordPolicyError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from passgate.modules.auth.models import User
from passgate.modules.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from passgate.modules.auth.service import AuthService

logger = structlog.get_logger()

router = APIRouter(prefix="/users", tags=["authentication"])

_bearer = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    """Get the auth service built during app startup."""
    service: AuthService | None = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured",
        )
    return service


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        created_at=user.created_at,
    )


async def get_current_user(
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> User:
    """Resolve the user from an ``Authorization: Bearer`` header."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except AuthenticationError as e:
        raise _unauthorized(str(e)) from e


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    data: RegisterRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserResponse:
    """Create an account. The password must satisfy the strength policy."""
    try:
        user = await auth_service.register(data.name, data.email, data.password)
    except PasswordPolicyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except UserAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e

    return _user_response(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login with email and password",
    description="Authenticate and receive a JWT bearer token.",
)
async def login(
    data: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """Authenticate user and return JWT token."""
    try:
        result = await auth_service.login(data.email, data.password)
    except AuthenticationError as e:
        raise _unauthorized(str(e)) from e

    return LoginResponse(
        id=result.user.id,
        name=result.user.name,
        email=result.user.email,
        token=result.token,
        token_type="bearer",  # nosec B106 - OAuth2 token type, not a password
        expires_in=result.expires_in,
    )


@router.put(
    "/newpass",
    response_model=MessageResponse,
    summary="Change password",
)
async def change_password(
    data: ChangePasswordRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Replace the password of the account identified by email."""
    try:
        await auth_service.change_password(
            data.email,
            data.password,
            data.new_password,
        )
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except IncorrectPasswordError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except PasswordPolicyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return MessageResponse(message="Password updated successfully")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
)
async def me(user: Annotated[User, Depends(get_current_user)]) -> UserResponse:
    """Return the account the bearer token belongs to."""
    return _user_response(user)
