"""Auth API — signup, login, OAuth callback, current user, demo token.

Learn: Routes for user authentication:
- POST /auth/signup → create a password account (also mounted at POST /users)
- POST /auth/login → email/password → JWT
- POST /auth/oauth/callback → find-or-create the user for a provider account
- GET /auth/me → current user (Bearer token required)
- GET /auth/token-demo → token for a fixed demo identity

Handlers stay thin: parse the body, call AuthService, shape the response.
Errors are AppErrors raised by the service and rendered by the app's
exception handlers.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.auth.dependencies import CurrentIdentity, get_current_user
from gatehouse.db.engine import get_db
from gatehouse.schemas.auth import (
    LoginRequest,
    LoginResponse,
    OAuthCallbackRequest,
    OAuthCallbackResponse,
    SignupRequest,
    TokenResponse,
)
from gatehouse.schemas.user import UserRead
from gatehouse.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


# ─── Signup ──────────────────────────────────────────────


@router.post(
    "/signup",
    response_model=UserRead,
    response_model_exclude_none=True,
    status_code=201,
)
async def signup(body: SignupRequest, svc: AuthService = Depends(get_auth_service)):
    """Create a new user account."""
    return await svc.signup(body.email, body.password)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
async def login(body: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    """Login with email and password → JWT token + user."""
    result = await svc.login(body.email, body.password)
    return LoginResponse(token=result.token, user=UserRead.model_validate(result.user))


# ─── OAuth ───────────────────────────────────────────────


@router.post(
    "/oauth/callback",
    response_model=OAuthCallbackResponse,
    response_model_exclude_none=True,
)
async def oauth_callback(
    body: OAuthCallbackRequest,
    response: Response,
    svc: AuthService = Depends(get_auth_service),
):
    """Resolve or create the user for a provider account.

    201 when a user/link was created, 200 when the account was already linked.
    """
    result = await svc.oauth_callback(
        provider=body.provider,
        provider_account_id=body.provider_account_id,
        email=body.email,
        name=body.name,
    )
    response.status_code = 201 if result.is_new_user else 200
    return OAuthCallbackResponse(
        user=UserRead.model_validate(result.user),
        is_new_user=result.is_new_user,
    )


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead, response_model_exclude_none=True)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(get_auth_service),
):
    """Get the current authenticated user's info."""
    return await svc.me(identity)


# ─── Demo token ─────────────────────────────────────────


@router.get("/token-demo", response_model=TokenResponse)
async def token_demo(svc: AuthService = Depends(get_auth_service)):
    """Issue a token for the hardcoded demo user (id 1)."""
    return TokenResponse(token=svc.token_demo())
