"""Request/response schemas for signup, login, and the authenticated caller."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Closed set of account roles. Stored accounts and token claims carry exactly one."""

    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


ROLE_VALUES: frozenset[str] = frozenset(r.value for r in Role)


def parse_role(value: object) -> Role | None:
    """Return the Role for value (exact, case-sensitive), or None if it is not one."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value)
    except ValueError:
        return None


class SignupRequest(BaseModel):
    """Credentials and requested role for a new account."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")
    # Plain optional string so unknown or missing roles reach the registry and fail as invalid_role.
    role: str | None = Field(default=None, description="admin, moderator or user (required)")


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT returned after successful login."""

    token: str = Field(..., description="JWT bearer token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="When the token stops being accepted")


class AccountOut(BaseModel):
    """Public view of an account (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: Role


class SignupResponse(BaseModel):
    message: str
    user: AccountOut


class CurrentUser(BaseModel):
    """Authenticated caller resolved from token claims."""

    username: str
    role: Role
