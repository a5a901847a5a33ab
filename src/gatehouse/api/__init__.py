"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Routes live at the root (no /api/v1 prefix). Protection is
per-route: handlers that need a user declare
Depends(get_current_user) and receive the resolved identity as an
argument, so everything else stays open.
"""

from fastapi import APIRouter

from gatehouse.api.auth import router as auth_router
from gatehouse.api.health import router as health_router
from gatehouse.api.users import router as users_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(users_router, tags=["users"])
