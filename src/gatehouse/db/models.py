"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Constraints are declared here so the database,
not application code, is what enforces uniqueness:
- users.email is UNIQUE — signup relies on the constraint violation
  to detect duplicates, with no check-then-insert race
- (provider, provider_account_id) is UNIQUE — linking is idempotent
  via ON CONFLICT DO NOTHING

Integer ids are BIGINT on PostgreSQL and INTEGER on SQLite, where only
INTEGER PRIMARY KEY autoincrements.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

IdType = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class User(Base):
    """A user account. Password users have a hash; OAuth-only users don't.

    Learn: email is always stored normalized (trimmed, lowercased) —
    the service layer normalizes before every write and lookup.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )  # nullable for OAuth
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class AuthIdentity(Base):
    """Link between a user and an external OAuth provider account.

    Created once per (provider, provider_account_id) pair during the
    OAuth callback and never mutated afterwards.
    """

    __tablename__ = "auth_identities"
    __table_args__ = (
        UniqueConstraint(
            "provider", "provider_account_id", name="uq_auth_identities_provider_account"
        ),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    provider_account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
