"""Identity store tests — constraint handling, upsert and the OAuth transaction."""

import pytest
from sqlalchemy import func, select

from gatehouse.db.models import AuthIdentity, User
from gatehouse.services.identity_store import (
    DuplicateEmailError,
    IdentityNotFoundError,
    IdentityStore,
    StoreError,
    UserNotFoundError,
)


# ═══════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_insert_and_find_user(db_session):
    store = IdentityStore(db_session)
    user = await store.insert_user("a@example.com", "$2b$hash")
    assert user.id is not None
    assert user.created_at is not None
    assert user.name is None

    found, password_hash = await store.find_user_by_email("a@example.com")
    assert found.id == user.id
    assert password_hash == "$2b$hash"

    assert (await store.find_user_by_id(user.id)).email == "a@example.com"


@pytest.mark.asyncio
async def test_insert_duplicate_email_raises_duplicate(db_session):
    """The UNIQUE constraint, not a pre-check, detects the duplicate."""
    store = IdentityStore(db_session)
    await store.insert_user("dup@example.com", "h1")
    with pytest.raises(DuplicateEmailError):
        await store.insert_user("dup@example.com", "h2")

    # Session is still usable after the failed insert
    users = await store.list_users()
    assert [u.email for u in users] == ["dup@example.com"]


@pytest.mark.asyncio
async def test_find_missing_user_raises_not_found(db_session):
    store = IdentityStore(db_session)
    with pytest.raises(UserNotFoundError):
        await store.find_user_by_email("nobody@example.com")
    with pytest.raises(UserNotFoundError):
        await store.find_user_by_id(999)


@pytest.mark.asyncio
async def test_list_users_ascending_by_id(db_session):
    store = IdentityStore(db_session)
    for email in ["c@example.com", "a@example.com", "b@example.com"]:
        await store.insert_user(email, "h")
    users = await store.list_users()
    assert [u.id for u in users] == sorted(u.id for u in users)
    assert [u.email for u in users] == ["c@example.com", "a@example.com", "b@example.com"]


@pytest.mark.asyncio
async def test_upsert_first_name_wins(db_session):
    store = IdentityStore(db_session)
    first = await store.upsert_user_by_email("u@example.com", "First")
    second = await store.upsert_user_by_email("u@example.com", "Second")
    assert second.id == first.id
    assert second.name == "First"


@pytest.mark.asyncio
async def test_upsert_fills_missing_name(db_session):
    store = IdentityStore(db_session)
    user = await store.insert_user("p@example.com", "h")
    merged = await store.upsert_user_by_email("p@example.com", "Filled")
    assert merged.id == user.id
    assert merged.name == "Filled"


# ═══════════════════════════════════════════════════════════
# Auth identities
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_link_identity_is_idempotent(db_session):
    store = IdentityStore(db_session)
    user = await store.upsert_user_by_email("o@example.com", None)
    await store.link_identity(user.id, "google", "123")
    await store.link_identity(user.id, "google", "123")
    await db_session.commit()

    count = await db_session.scalar(select(func.count()).select_from(AuthIdentity))
    assert count == 1
    assert await store.find_identity("google", "123") == user.id


@pytest.mark.asyncio
async def test_find_identity_missing(db_session):
    store = IdentityStore(db_session)
    with pytest.raises(IdentityNotFoundError):
        await store.find_identity("github", "nope")


@pytest.mark.asyncio
async def test_create_oauth_user_commits_both_rows(db_session, session_factory):
    store = IdentityStore(db_session)
    user = await store.create_oauth_user("x@y.com", "X", "google", "123")

    async with session_factory() as other:
        assert await IdentityStore(other).find_identity("google", "123") == user.id


@pytest.mark.asyncio
async def test_create_oauth_user_rolls_back_when_link_fails(
    db_session, session_factory, monkeypatch
):
    """A failed link must not leave an orphan user behind."""
    store = IdentityStore(db_session)

    async def failing_link(*args, **kwargs):
        raise StoreError("failed to insert auth identity")

    monkeypatch.setattr(store, "link_identity", failing_link)

    with pytest.raises(StoreError):
        await store.create_oauth_user("x@y.com", "X", "google", "123")

    async with session_factory() as other:
        count = await other.scalar(select(func.count()).select_from(User))
    assert count == 0
