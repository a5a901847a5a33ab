"""Auth service tests — email rules and workflow outcomes without HTTP."""

import pytest

from gatehouse.auth.dependencies import CurrentIdentity
from gatehouse.auth.jwt import verify_token
from gatehouse.errors import (
    BadRequestError,
    EmailAlreadyExistsError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
)
from gatehouse.services.auth_service import (
    DEMO_USER_EMAIL,
    DEMO_USER_ID,
    AuthService,
    normalize_email,
    validate_email,
)
from gatehouse.services.identity_store import StoreError

EMAILS = ["a@example.com", "  Bob.Smith@Example.COM ", "x+tag@sub.example.org"]


# ═══════════════════════════════════════════════════════════
# Email normalization / validation
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize("email", EMAILS)
def test_normalize_ignores_case(email):
    assert normalize_email(email) == normalize_email(email.upper())


@pytest.mark.parametrize("email", EMAILS)
def test_normalize_is_idempotent(email):
    once = normalize_email(email)
    assert normalize_email(once) == once


def test_normalize_trims_and_lowercases():
    assert normalize_email("  A@Example.com ") == "a@example.com"


@pytest.mark.parametrize(
    "email",
    [
        "a@example.com",
        "first.last@sub.example.org",
        "user@localhost",
        "a@b",
        "x@y.test",
        "me@host.local",
    ],
)
def test_validate_accepts_bare_mailbox(email):
    validate_email(email)


@pytest.mark.parametrize(
    "email",
    [
        "not-an-email",
        "ann <ann@example.com>",
        "a@example.com, b@example.com",
        "a@@example.com",
        "@example.com",
    ],
)
def test_validate_rejects_non_mailboxes(email):
    with pytest.raises(BadRequestError):
        validate_email(email)


def test_validate_requires_email():
    with pytest.raises(BadRequestError) as exc:
        validate_email("")
    assert exc.value.message == "email is required"


# ═══════════════════════════════════════════════════════════
# Workflows
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_signup_normalizes_and_hashes(db_session):
    svc = AuthService(db_session)
    user = await svc.signup(" New@Example.com ", "password1")
    assert user.email == "new@example.com"
    assert user.password_hash and user.password_hash != "password1"


@pytest.mark.asyncio
async def test_signup_duplicate_is_conflict(db_session):
    svc = AuthService(db_session)
    await svc.signup("dup@example.com", "password1")
    with pytest.raises(EmailAlreadyExistsError):
        await svc.signup("DUP@example.com", "password2")


@pytest.mark.asyncio
async def test_signup_store_failure_is_internal(db_session, monkeypatch):
    svc = AuthService(db_session)

    async def broken_insert(*args, **kwargs):
        raise StoreError("failed to insert user")

    monkeypatch.setattr(svc.store, "insert_user", broken_insert)
    with pytest.raises(InternalError):
        await svc.signup("a@example.com", "password1")


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(db_session):
    svc = AuthService(db_session)
    await svc.signup("known@example.com", "password1")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await svc.login("known@example.com", "password2")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await svc.login("unknown@example.com", "password1")

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.code == unknown_email.value.code


@pytest.mark.asyncio
async def test_login_oauth_only_account_is_invalid_credentials(db_session):
    svc = AuthService(db_session)
    await svc.oauth_callback("google", "1", "oauth@example.com", "O")
    with pytest.raises(InvalidCredentialsError):
        await svc.login("oauth@example.com", "password1")


@pytest.mark.asyncio
async def test_oauth_requires_provider_fields(db_session):
    svc = AuthService(db_session)
    with pytest.raises(BadRequestError):
        await svc.oauth_callback("", "123", "x@y.com")
    with pytest.raises(BadRequestError):
        await svc.oauth_callback("google", "", "x@y.com")


@pytest.mark.asyncio
async def test_oauth_lookup_store_error_does_not_create(db_session, monkeypatch):
    """A failing lookup is Internal — it must never fall through to creation."""
    svc = AuthService(db_session)
    created = []

    async def broken_lookup(*args, **kwargs):
        raise StoreError("failed to query auth identity")

    async def record_create(*args, **kwargs):
        created.append(args)

    monkeypatch.setattr(svc.store, "find_identity", broken_lookup)
    monkeypatch.setattr(svc.store, "create_oauth_user", record_create)

    with pytest.raises(InternalError):
        await svc.oauth_callback("google", "123", "x@y.com", "X")
    assert created == []


@pytest.mark.asyncio
async def test_oauth_merges_into_existing_password_account(db_session):
    svc = AuthService(db_session)
    user = await svc.signup("merge@example.com", "password1")

    result = await svc.oauth_callback("github", "gh-9", "Merge@Example.com", "Merged")
    assert result.is_new_user is True
    assert result.user.id == user.id
    assert result.user.name == "Merged"

    # Password login still works for the merged account
    login = await svc.login("merge@example.com", "password1")
    assert login.user.id == user.id


@pytest.mark.asyncio
async def test_me_missing_user_is_not_found(db_session):
    svc = AuthService(db_session)
    with pytest.raises(NotFoundError):
        await svc.me(CurrentIdentity(user_id=12345, email="gone@example.com"))


def test_token_demo_uses_fixed_identity():
    claims = verify_token(AuthService(None).token_demo())
    assert claims.user_id == DEMO_USER_ID == 1
    assert claims.email == DEMO_USER_EMAIL == "demo@example.com"
