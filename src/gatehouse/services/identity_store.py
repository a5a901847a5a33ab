"""Identity store — parameterized reads and writes for users and OAuth links.

Learn: This is the only module that talks SQL. Every SQLAlchemy failure
is re-raised as StoreError so callers never see driver exceptions, and
the two "expected" failures get their own types:
- DuplicateEmailError — the users.email UNIQUE constraint fired
- UserNotFoundError / IdentityNotFoundError — lookup matched no row

Upserts use the dialect's INSERT ... ON CONFLICT, available for both
PostgreSQL and SQLite with the same API.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.db.models import AuthIdentity, User

UNIQUE_VIOLATION = "23505"


class StoreError(Exception):
    """Raised when the database fails for reasons other than a missing row."""


class DuplicateEmailError(StoreError):
    """Raised when inserting a user whose email already exists."""


class RecordNotFoundError(Exception):
    """Raised when a lookup matches no row."""


class UserNotFoundError(RecordNotFoundError):
    """Raised when a user is not found."""


class IdentityNotFoundError(RecordNotFoundError):
    """Raised when no user is linked to a provider account."""


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Check whether an IntegrityError came from a UNIQUE constraint."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


class IdentityStore:
    """Users and auth identities, scoped to one request's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self, table):
        """Dialect-specific INSERT supporting ON CONFLICT."""
        if self.db.get_bind().dialect.name == "sqlite":
            return sqlite.insert(table)
        return postgresql.insert(table)

    # ─── Users ──────────────────────────────────────────

    async def insert_user(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            await self.db.rollback()
            if _is_unique_violation(e):
                raise DuplicateEmailError(f"email already exists: {email}") from e
            raise StoreError("failed to insert user") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("failed to insert user") from e
        return user

    async def find_user_by_email(self, email: str) -> tuple[User, Optional[str]]:
        """Return the user and their password hash (None for OAuth-only users)."""
        try:
            result = await self.db.execute(select(User).where(User.email == email))
            user = result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreError("failed to query user by email") from e
        if user is None:
            raise UserNotFoundError(email)
        return user, user.password_hash

    async def find_user_by_id(self, user_id: int) -> User:
        try:
            user = await self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreError("failed to query user by id") from e
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    async def list_users(self) -> list[User]:
        try:
            result = await self.db.execute(select(User).order_by(User.id))
        except SQLAlchemyError as e:
            raise StoreError("failed to list users") from e
        return list(result.scalars().all())

    async def upsert_user_by_email(self, email: str, name: Optional[str]) -> User:
        """Insert a user, or fill in the name of an existing one.

        Learn: COALESCE(users.name, EXCLUDED.name) keeps an existing
        name and only writes the new one when the stored name is NULL —
        first write wins. The statement runs in the caller's transaction;
        nothing is committed here.
        """
        stmt = self._insert(User).values(email=email, name=name)
        stmt = (
            stmt.on_conflict_do_update(
                index_elements=[User.email],
                set_={"name": func.coalesce(User.name, stmt.excluded.name)},
            )
            .returning(User)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.db.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise StoreError("failed to upsert user") from e

    # ─── Auth identities ────────────────────────────────

    async def find_identity(self, provider: str, provider_account_id: str) -> int:
        """Return the id of the user linked to a provider account."""
        try:
            result = await self.db.execute(
                select(AuthIdentity.user_id).where(
                    AuthIdentity.provider == provider,
                    AuthIdentity.provider_account_id == provider_account_id,
                )
            )
            user_id = result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreError("failed to query auth identity") from e
        if user_id is None:
            raise IdentityNotFoundError(f"{provider}:{provider_account_id}")
        return user_id

    async def link_identity(
        self, user_id: int, provider: str, provider_account_id: str
    ) -> None:
        """Link a provider account to a user. No-op if already linked."""
        stmt = (
            self._insert(AuthIdentity)
            .values(
                user_id=user_id,
                provider=provider,
                provider_account_id=provider_account_id,
            )
            .on_conflict_do_nothing(index_elements=["provider", "provider_account_id"])
        )
        try:
            await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError("failed to insert auth identity") from e

    async def create_oauth_user(
        self,
        email: str,
        name: Optional[str],
        provider: str,
        provider_account_id: str,
    ) -> User:
        """Find-or-create the user for an email and link the provider account.

        Learn: Both writes share one transaction. If either fails — or
        the commit itself fails — everything rolls back, so there is
        never a user without the identity the caller asked to link.
        """
        try:
            user = await self.upsert_user_by_email(email, name)
            await self.link_identity(user.id, provider, provider_account_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("failed to commit oauth user") from e
        except Exception:
            await self.db.rollback()
            raise
        return user
