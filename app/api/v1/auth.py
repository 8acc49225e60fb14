"""Signup/login routes and the auth dependencies (get_current_user, require_action)."""

import logging
from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import TokenError, TokenErrorKind, TokenService
from app.schemas.auth import (
    AccountOut,
    CurrentUser,
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from app.services import accounts
from app.services.errors import AuthenticationError, AuthorizationError
from app.services.policy import Action, is_allowed

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_service() -> TokenService:
    """Token service built once from settings; override in tests to inject a secret."""
    return TokenService.from_settings(get_settings())


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
) -> SignupResponse:
    """Register an account with role admin, moderator or user."""
    user = accounts.sign_up(
        db,
        username=body.username,
        password=body.password,
        role=body.role,
        rounds=get_settings().BCRYPT_ROUNDS,
    )
    return SignupResponse(
        message="User registered successfully",
        user=AccountOut.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    token, claims = accounts.login(db, token_service, body.username, body.password)
    return TokenResponse(token=token, token_type="bearer", expires_at=claims.expires_at)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer JWT and return the caller from its claims.

    The store is not consulted. Verified claims are kept on request.state.
    Raises AuthenticationError (401) if the token is missing or invalid.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(
            "Authentication required",
            code="missing_token",
            challenge="missing_token",
        )
    try:
        claims = token_service.verify(credentials.credentials)
    except TokenError as e:
        if e.kind is TokenErrorKind.MISSING:
            raise AuthenticationError(
                "Authentication required",
                code="missing_token",
                challenge="missing_token",
            ) from e
        code = "expired_token" if e.kind is TokenErrorKind.EXPIRED else "invalid_token"
        raise AuthenticationError(e.message, code=code, challenge="invalid_token") from e

    request.state.token_claims = claims
    return claims.identity


def require_action(action: Action) -> Callable[..., CurrentUser]:
    """Dependency factory: authenticated caller whose role allows action, else 403."""

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if not is_allowed(current_user.role, action):
            logger.debug(
                "Access denied",
                extra={"username": current_user.username, "action": action.value},
            )
            raise AuthorizationError()
        return current_user

    return dependency
