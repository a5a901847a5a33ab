"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A single access token (24h) carries the user id and email. There are
no refresh tokens and no revocation — a token is valid until it expires.

The subject is encoded as a decimal string (RFC 7519 StringOrURI) and
decoded back to the integer user id on verification.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from gatehouse.config import HMAC_ALGORITHMS, settings


class TokenError(Exception):
    """Raised when token creation/verification fails."""


class TokenExpiredError(TokenError):
    """Raised when a token's exp claim is in the past."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    expires_at: datetime


def create_access_token(
    user_id: int,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token for a user."""
    now = datetime.now(timezone.utc)
    expires = now + (
        expires_delta
        if expires_delta is not None
        else timedelta(hours=settings.access_token_expire_hours)
    )
    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": expires,
        "iat": now,
    }
    try:
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise TokenError(f"Failed to sign token: {e}") from e


def verify_token(token: str) -> TokenClaims:
    """Verify and decode a JWT token.

    Returns the claims on success.
    Raises TokenExpiredError for expired tokens, TokenError otherwise.

    Learn: Passing an explicit ``algorithms`` list is what stops
    algorithm-substitution attacks — a token whose header says "none"
    or "RS256" is rejected before its signature is even looked at.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=list(HMAC_ALGORITHMS),
            options={"require": ["exp", "sub", "email"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    email = payload["email"]
    if not isinstance(email, str):
        raise TokenError("Invalid token: email claim must be a string")

    return TokenClaims(
        user_id=_parse_subject(payload["sub"]),
        email=email,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def _parse_subject(sub: Any) -> int:
    """Decode the sub claim into an integer user id."""
    if isinstance(sub, str) and sub.isascii() and sub.isdigit():
        return int(sub)
    raise TokenError("Invalid token: subject must be an integer user id")
