"""Password hashing and JWT issuance/verification for authentication."""

import base64
import hashlib
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings
from app.schemas.auth import CurrentUser, Role, parse_role

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128

REQUIRED_CLAIMS = ("sub", "role", "iat", "exp")


def _prehash(plain_password: str) -> bytes:
    # bcrypt only reads 72 bytes; a base64 SHA-256 digest (44 bytes, no NUL) keeps every byte significant.
    digest = hashlib.sha256(plain_password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    return bcrypt.hashpw(_prehash(plain_password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes yield False."""
    if not isinstance(plain_password, str) or not isinstance(hashed, str):
        return False
    try:
        return bcrypt.checkpw(_prehash(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class TokenErrorKind(str, Enum):
    """Why a bearer token was rejected."""

    MISSING = "missing"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


class TokenError(Exception):
    """Raised by TokenService.verify; kind tells the gate which challenge to send."""

    def __init__(self, kind: TokenErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenClaims:
    """Identity and lifetime carried by a verified token."""

    username: str
    role: Role
    issued_at: datetime
    expires_at: datetime

    @property
    def identity(self) -> CurrentUser:
        return CurrentUser(username=self.username, role=self.role)


class TokenService:
    """
    Issues and verifies HMAC-signed JWTs.

    The secret and lifetimes are passed in at construction; nothing is read
    from process-wide state, so tests can inject their own secret and clock.
    Verification is stateless: claims are not re-checked against the store,
    and there is no revocation list.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(hours=24),
        max_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must be non-empty")
        if default_ttl <= timedelta(0) or default_ttl > max_ttl:
            raise ValueError("default_ttl must be positive and at most max_ttl")
        self._secret = secret
        self._algorithm = algorithm
        self.default_ttl = default_ttl
        self.max_ttl = max_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            default_ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            max_ttl=timedelta(minutes=settings.JWT_MAX_EXPIRE_MINUTES),
        )

    def mint(self, identity: CurrentUser, ttl: timedelta | None = None) -> tuple[str, TokenClaims]:
        """Create a signed token for identity; returns (token, claims)."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= timedelta(0) or ttl > self.max_ttl:
            raise ValueError(f"Token ttl must be positive and at most {self.max_ttl}")
        role = parse_role(identity.role)
        if role is None:
            raise ValueError(f"Cannot issue a token for unknown role {identity.role!r}")

        # JWT timestamps are whole seconds; keep claims identical to what verify() will decode.
        issued = int(self._clock())
        expires = issued + int(ttl.total_seconds())
        payload: dict[str, Any] = {
            "sub": identity.username,
            "role": role.value,
            "iat": issued,
            "exp": expires,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        claims = TokenClaims(
            username=identity.username,
            role=role,
            issued_at=datetime.fromtimestamp(issued, UTC),
            expires_at=datetime.fromtimestamp(expires, UTC),
        )
        return token, claims

    def issue(self, identity: CurrentUser, ttl: timedelta | None = None) -> str:
        """Create a signed token for identity valid for ttl (default from configuration)."""
        token, _ = self.mint(identity, ttl)
        return token

    def verify(self, token: str | None) -> TokenClaims:
        """
        Decode and validate a token; return its claims.

        The signature is checked before any claim, so a tampered payload fails
        with BAD_SIGNATURE even when it is also expired. Expiry is judged
        against this service's clock: the token is expired once now > exp.
        Raises TokenError on any failure.
        """
        if not token or not token.strip():
            raise TokenError(TokenErrorKind.MISSING, "No token provided")
        try:
            payload = jwt.decode(
                token.strip(),
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": list(REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenError(TokenErrorKind.BAD_SIGNATURE, "Token signature is invalid") from e
        except jwt.PyJWTError as e:
            raise TokenError(TokenErrorKind.MALFORMED, "Token is malformed") from e

        username = payload.get("sub")
        role = parse_role(payload.get("role"))
        if not isinstance(username, str) or not username or role is None:
            raise TokenError(TokenErrorKind.MALFORMED, "Token claims are invalid")
        iat, exp = payload["iat"], payload["exp"]
        if isinstance(iat, bool) or isinstance(exp, bool) or not (
            isinstance(iat, int) and isinstance(exp, int)
        ):
            raise TokenError(TokenErrorKind.MALFORMED, "Token claims are invalid")
        try:
            issued_at = datetime.fromtimestamp(iat, UTC)
            expires_at = datetime.fromtimestamp(exp, UTC)
        except (ValueError, OverflowError, OSError) as e:
            raise TokenError(TokenErrorKind.MALFORMED, "Token claims are invalid") from e
        if self._clock() > exp:
            raise TokenError(TokenErrorKind.EXPIRED, "Token has expired")
        return TokenClaims(
            username=username,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )
