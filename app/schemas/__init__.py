"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AccountOut,
    CurrentUser,
    LoginRequest,
    Role,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.posts import (
    MessageResponse,
    PostCreate,
    PostMessage,
    PostModerate,
    PostOut,
    PostStatus,
)

__all__ = [
    "AccountOut",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "PostCreate",
    "PostMessage",
    "PostModerate",
    "PostOut",
    "PostStatus",
    "Role",
    "SignupRequest",
    "SignupResponse",
    "TokenResponse",
]
