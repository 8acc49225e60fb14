"""Account registry: signup with unique usernames and closed roles, and password login."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import (
    BCRYPT_ROUNDS,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    TokenClaims,
    TokenService,
    hash_password,
    verify_password,
)
from app.models import User
from app.schemas.auth import ROLE_VALUES, CurrentUser, parse_role
from app.services.errors import InputValidationError

logger = logging.getLogger(__name__)


def _clean_username(username: str) -> str:
    cleaned = (username or "").strip()
    if not (USERNAME_MIN_LEN <= len(cleaned) <= USERNAME_MAX_LEN):
        raise InputValidationError("Invalid username length.", code="invalid_request")
    return cleaned


def _check_password(password: str) -> None:
    if not isinstance(password, str) or not (
        PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN
    ):
        raise InputValidationError("Invalid password length.", code="invalid_request")


def find_account(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def sign_up(
    db: Session,
    username: str,
    password: str,
    role: str | None,
    rounds: int = BCRYPT_ROUNDS,
) -> User:
    """
    Create an account with a hashed password.

    The role is checked before the store is touched. Uniqueness is checked up
    front for a clear error and enforced again by the unique index, so a
    concurrent signup that slips between check and insert still fails as
    duplicate_username.
    """
    parsed_role = parse_role(role)
    if parsed_role is None:
        raise InputValidationError(
            f"Invalid role. Must be one of {sorted(ROLE_VALUES)}.",
            code="invalid_role",
        )
    username = _clean_username(username)
    _check_password(password)

    if find_account(db, username) is not None:
        raise InputValidationError("Username already exists", code="duplicate_username")

    user = User(
        username=username,
        password_hash=hash_password(password, rounds=rounds),
        role=parsed_role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise InputValidationError("Username already exists", code="duplicate_username") from e
    db.refresh(user)
    logger.info("Account created", extra={"username": user.username, "role": user.role})
    return user


def login(
    db: Session,
    token_service: TokenService,
    username: str,
    password: str,
) -> tuple[str, TokenClaims]:
    """Verify credentials and issue a bearer token for the account's identity and role."""
    username = (username or "").strip()
    user = find_account(db, username) if username else None
    if user is None:
        logger.info("Login failed: unknown user", extra={"username": username})
        raise InputValidationError("User not found", code="user_not_found")
    if not verify_password(password, user.password_hash):
        logger.info("Login failed: bad password", extra={"username": username})
        raise InputValidationError("Invalid password", code="bad_password")

    role = parse_role(user.role)
    if role is None:
        # Rows written outside the registry; never sign a role we do not recognize.
        logger.error("Account has unknown role", extra={"username": username, "role": user.role})
        raise InputValidationError("Invalid role", code="invalid_role")

    token, claims = token_service.mint(CurrentUser(username=user.username, role=role))
    logger.info("Login succeeded", extra={"username": user.username, "role": role.value})
    return token, claims
