"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current user identity from the request. The resolved
identity is a plain value handed to the route, which passes it on to
the service layer explicitly — nothing is stashed on the request.
"""

from typing import Optional

from fastapi import Header

from gatehouse.auth.jwt import TokenError, verify_token
from gatehouse.errors import UnauthenticatedError

BEARER_PREFIX = "Bearer "


class CurrentIdentity:
    """Represents the authenticated user making the request.

    Learn: Built from the token claims alone. Routes that need the
    full user row re-fetch it by user_id, since the account may have
    changed (or vanished) since the token was issued.
    """

    def __init__(self, user_id: int, email: str):
        self.user_id = user_id
        self.email = email

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!r}, email={self.email!r})"


async def get_current_user(
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no valid bearer token).

    Learn: Malformed, expired and badly-signed tokens all produce the
    same 401. Callers learn that the token is unusable, not why.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthenticatedError("missing or invalid Authorization header")

    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        claims = verify_token(token)
    except TokenError:
        raise UnauthenticatedError("invalid or expired token")

    return CurrentIdentity(user_id=claims.user_id, email=claims.email)
