"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (bcrypt_rounds=12) takes ~250ms per hash on modern hardware.

bcrypt only looks at the first 72 bytes of its input, so the policy
rejects longer passwords instead of letting them be truncated silently.
"""

import bcrypt

from gatehouse.config import settings
from gatehouse.errors import BadRequestError

MIN_PASSWORD_BYTES = 8
MAX_PASSWORD_BYTES = 72


class HashingError(Exception):
    """Raised when bcrypt fails to produce a hash."""


def validate_password(password: str) -> None:
    """Check the password policy. Raises BadRequestError on violation."""
    trimmed = password.strip()
    if not trimmed:
        raise BadRequestError("password is required")
    if len(trimmed.encode("utf-8")) < MIN_PASSWORD_BYTES:
        raise BadRequestError(
            f"password must be at least {MIN_PASSWORD_BYTES} characters"
        )
    if (
        len(trimmed.encode("utf-8")) > MAX_PASSWORD_BYTES
        or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES
    ):
        raise BadRequestError(
            f"password must be at most {MAX_PASSWORD_BYTES} characters"
        )


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$", so the algorithm and cost travel
    with the hash itself.
    """
    try:
        salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
    except (ValueError, TypeError) as e:
        raise HashingError(str(e)) from e


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False
