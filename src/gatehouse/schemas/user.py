"""Pydantic schemas for users.

Learn: UserRead is the public shape of a user everywhere it appears —
signup, login, OAuth callback, /auth/me and the directory. It never
carries password_hash. Routes render it with response_model_exclude_none
so an absent name is omitted rather than sent as null.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserRead(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileRead(BaseModel):
    id: int
    email: str
    bio: str
