"""
Core security utilities for authentication and password handling.

Access and refresh tokens are signed with two different secrets, so a leaked
refresh secret cannot mint access tokens and the other way round.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from ..config import Settings
from ..exceptions import UnauthorizedException

# Set up logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class SubjectType(str, Enum):
    """Kind of account a token is bound to."""
    USER = "user"
    PROFESSIONAL = "professional"
    CLINIC = "clinic"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


@dataclass(frozen=True)
class TokenClaims:
    subject_id: int
    subject_type: SubjectType
    kind: TokenKind
    expires_at: datetime


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against a hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to compare against

    Returns:
        bool: True if password matches hash
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def parse_duration(value: str) -> timedelta:
    """
    Parse a lifetime such as "15m", "1h", "7d" or "3600".

    Raises:
        ValueError: If the value is not a recognised duration
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def _secret_for(kind: TokenKind, settings: Settings) -> str:
    if kind == TokenKind.REFRESH:
        return settings.jwt_refresh_secret
    return settings.jwt_secret


def _lifetime_for(kind: TokenKind, settings: Settings) -> timedelta:
    if kind == TokenKind.REFRESH:
        return parse_duration(settings.jwt_refresh_expires_in)
    return parse_duration(settings.jwt_expires_in)


def create_token(
    subject_id: int,
    kind: TokenKind,
    settings: Settings,
    subject_type: SubjectType = SubjectType.USER,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a signed JWT for a subject.

    Args:
        subject_id: Id of the user, professional or clinic
        kind: Access or refresh token
        settings: Application settings holding secrets and lifetimes
        subject_type: Kind of account the id refers to
        expires_delta: Override of the configured lifetime
        extra_claims: Additional non-reserved claims

    Returns:
        str: Encoded JWT token
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else _lifetime_for(kind, settings))
    to_encode = dict(extra_claims or {})
    to_encode.update({
        "sub": str(subject_id),
        "typ": kind.value,
        "subject_type": subject_type.value,
        "iat": now,
        "exp": expire,
    })
    return jwt.encode(to_encode, _secret_for(kind, settings), algorithm=settings.jwt_algorithm)


def issue_tokens(
    subject_id: int,
    settings: Settings,
    subject_type: SubjectType = SubjectType.USER,
) -> TokenPair:
    """
    Issue an access/refresh token pair bound to ``subject_id``.
    """
    access_token = create_token(subject_id, TokenKind.ACCESS, settings, subject_type)
    refresh_token = create_token(subject_id, TokenKind.REFRESH, settings, subject_type)
    return TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=int(_lifetime_for(TokenKind.ACCESS, settings).total_seconds()),
    )


def decode_token(token: str, kind: TokenKind, settings: Settings) -> TokenClaims:
    """
    Verify and decode a JWT of the given kind.

    Args:
        token: JWT token string
        kind: Expected token kind, selects the verification secret
        settings: Application settings

    Returns:
        TokenClaims: Verified claims

    Raises:
        UnauthorizedException: On bad signature, expiry, wrong kind or malformed claims
    """
    try:
        payload = jwt.decode(token, _secret_for(kind, settings), algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired")
    except JWTError:
        raise UnauthorizedException("Invalid token")

    if payload.get("typ") != kind.value:
        raise UnauthorizedException("Invalid token type")

    try:
        subject_id = int(payload["sub"])
        subject_type = SubjectType(payload.get("subject_type", SubjectType.USER.value))
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedException("Invalid token payload")

    return TokenClaims(
        subject_id=subject_id,
        subject_type=subject_type,
        kind=kind,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    return decode_token(token, TokenKind.ACCESS, settings)


def verify_refresh_token(token: str, settings: Settings) -> TokenClaims:
    """
    Verify a refresh token.

    There is no revocation list: any refresh token that verifies stays usable
    until it expires.

    Raises:
        UnauthorizedException: "Invalid refresh token" for any failure
    """
    try:
        return decode_token(token, TokenKind.REFRESH, settings)
    except UnauthorizedException as e:
        logger.warning(f"Refresh token rejected: {e.detail}")
        raise UnauthorizedException("Invalid or expired refresh token")
