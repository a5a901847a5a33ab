"""Pydantic schemas for signup, login, OAuth callback and tokens.

Learn: Request fields default to "" instead of being required, so a
missing field reaches the service and gets the same message as an
empty one ("email is required"). Field rules (email format, password
policy) live in the service, not here.
"""

from pydantic import BaseModel

from gatehouse.schemas.user import UserRead


# ─── Requests ───────────────────────────────────────────

class SignupRequest(BaseModel):
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class OAuthCallbackRequest(BaseModel):
    provider: str = ""
    provider_account_id: str = ""
    email: str = ""
    name: str = ""


# ─── Responses ──────────────────────────────────────────

class TokenResponse(BaseModel):
    token: str


class LoginResponse(BaseModel):
    token: str
    user: UserRead


class OAuthCallbackResponse(BaseModel):
    user: UserRead
    is_new_user: bool
