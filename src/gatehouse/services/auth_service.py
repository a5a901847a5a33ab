"""Auth service — signup, login, OAuth callback and current-user lookups.

Learn: Service layer separates business logic from HTTP routing.
Routes parse the body and call one method here; this module validates,
talks to the identity store, hashes, signs, and turns every outcome into
either a result or an AppError from the error taxonomy:

    signup         → User                     | BadRequest, Conflict, Internal
    login          → LoginResult              | BadRequest, InvalidCredentials, Internal
    oauth_callback → OAuthResult              | BadRequest, Internal
    me / profile   → User                     | NotFound, Internal
    token_demo     → str                      | Internal

Store, hashing and signing failures are logged here with context and
surfaced as a bare InternalError — no SQL or driver detail leaves.
"""

from dataclasses import dataclass
from typing import Optional

import email_validator
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.auth.dependencies import CurrentIdentity
from gatehouse.auth.jwt import TokenError, create_access_token
from gatehouse.auth.password import (
    HashingError,
    hash_password,
    validate_password,
    verify_password,
)
from gatehouse.db.models import User
from gatehouse.errors import (
    BadRequestError,
    EmailAlreadyExistsError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
)
from gatehouse.services.identity_store import (
    DuplicateEmailError,
    IdentityNotFoundError,
    IdentityStore,
    StoreError,
    UserNotFoundError,
)

logger = structlog.get_logger()

DEMO_USER_ID = 1
DEMO_USER_EMAIL = "demo@example.com"


@dataclass
class LoginResult:
    token: str
    user: User


@dataclass
class OAuthResult:
    user: User
    is_new_user: bool


def normalize_email(email: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return email.strip().lower()


def validate_email(email: str) -> None:
    """Require a single bare RFC 5322 mailbox.

    Learn: The parsed address must equal the input exactly, which
    rejects display-name forms ("Ann <ann@x.com>") and address lists
    as well as anything the parser would rewrite. Dotless and
    special-use domains (user@localhost, a@b, x@y.test) are valid
    mailboxes, so only syntax is checked, not global deliverability.
    """
    if not email:
        raise BadRequestError("email is required")
    try:
        parsed = email_validator.validate_email(
            email, check_deliverability=False, globally_deliverable=False
        )
    except email_validator.EmailNotValidError:
        raise BadRequestError("invalid email")
    if parsed.normalized != email:
        raise BadRequestError("invalid email")


class AuthService:
    """Authentication workflows. One instance per request, no shared state."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = IdentityStore(db)

    # ─── Password accounts ──────────────────────────────

    async def signup(self, email: str, password: str) -> User:
        email = normalize_email(email)
        validate_email(email)
        validate_password(password)

        try:
            password_hash = hash_password(password)
        except HashingError as e:
            logger.error("auth.hash_failed", error=str(e))
            raise InternalError("failed to hash password")

        try:
            user = await self.store.insert_user(email, password_hash)
        except DuplicateEmailError:
            raise EmailAlreadyExistsError()
        except StoreError as e:
            logger.error("auth.signup_failed", error=str(e.__cause__ or e))
            raise InternalError("failed to create user")

        logger.info("auth.signup", user_id=user.id)
        return user

    async def login(self, email: str, password: str) -> LoginResult:
        """Check credentials and issue a token.

        Learn: An unknown email, an OAuth-only account (no hash) and a
        wrong password all raise the same InvalidCredentialsError, so
        the response never reveals which accounts exist.
        """
        email = normalize_email(email)
        validate_email(email)
        validate_password(password)

        try:
            user, password_hash = await self.store.find_user_by_email(email)
        except UserNotFoundError:
            raise InvalidCredentialsError()
        except StoreError as e:
            logger.error("auth.login_failed", error=str(e.__cause__ or e))
            raise InternalError("failed to login")

        if not password_hash or not verify_password(password, password_hash):
            raise InvalidCredentialsError()

        token = self._issue_token(user.id, user.email)
        logger.info("auth.login", user_id=user.id)
        return LoginResult(token=token, user=user)

    # ─── OAuth ──────────────────────────────────────────

    async def oauth_callback(
        self,
        provider: str,
        provider_account_id: str,
        email: str,
        name: Optional[str] = None,
    ) -> OAuthResult:
        """Resolve a provider account to a user, creating one if needed.

        Learn: Only a genuine "no such identity" leads to creation. A
        store error during the lookup is an Internal failure — falling
        through to the create path there could link a second user.
        """
        if not provider or not provider_account_id:
            raise BadRequestError("provider and provider_account_id are required")

        email = normalize_email(email)

        try:
            user_id = await self.store.find_identity(provider, provider_account_id)
        except IdentityNotFoundError:
            user_id = None
        except StoreError as e:
            logger.error(
                "auth.oauth_lookup_failed",
                provider=provider,
                error=str(e.__cause__ or e),
            )
            raise InternalError("failed to check auth identity")

        if user_id is not None:
            try:
                user = await self.store.find_user_by_id(user_id)
            except (UserNotFoundError, StoreError) as e:
                logger.error(
                    "auth.oauth_user_fetch_failed",
                    user_id=user_id,
                    error=str(e.__cause__ or e),
                )
                raise InternalError("failed to fetch user")
            return OAuthResult(user=user, is_new_user=False)

        try:
            user = await self.store.create_oauth_user(
                email, name or None, provider, provider_account_id
            )
        except StoreError as e:
            logger.error(
                "auth.oauth_create_failed",
                provider=provider,
                error=str(e.__cause__ or e),
            )
            raise InternalError("failed to create user")

        logger.info("auth.oauth_linked", user_id=user.id, provider=provider)
        return OAuthResult(user=user, is_new_user=True)

    # ─── Current user ───────────────────────────────────

    async def me(self, identity: CurrentIdentity) -> User:
        """Re-fetch the user behind a verified token.

        A valid token whose user row is gone is NotFound, not
        Unauthenticated.
        """
        try:
            return await self.store.find_user_by_id(identity.user_id)
        except UserNotFoundError:
            raise NotFoundError("user not found")
        except StoreError as e:
            logger.error(
                "auth.user_fetch_failed",
                user_id=identity.user_id,
                error=str(e.__cause__ or e),
            )
            raise InternalError("failed to fetch user")

    async def profile(self, identity: CurrentIdentity) -> User:
        return await self.me(identity)

    # ─── Directory ──────────────────────────────────────

    async def list_users(self) -> list[User]:
        try:
            return await self.store.list_users()
        except StoreError as e:
            logger.error("users.list_failed", error=str(e.__cause__ or e))
            raise InternalError("failed to fetch users")

    # ─── Tokens ─────────────────────────────────────────

    def token_demo(self) -> str:
        """Issue a token for the fixed demo identity. Not a real auth path."""
        return self._issue_token(DEMO_USER_ID, DEMO_USER_EMAIL)

    def _issue_token(self, user_id: int, email: str) -> str:
        try:
            return create_access_token(user_id, email)
        except TokenError as e:
            logger.error("auth.token_sign_failed", user_id=user_id, error=str(e))
            raise InternalError("failed to generate token")
