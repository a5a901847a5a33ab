"""User directory and profile routes.

- POST /users → signup alias (same handler as POST /auth/signup)
- GET /users → all users, ascending by id
- GET /me/profile → sample profile for the current user (Bearer token required)
"""

from fastapi import APIRouter, Depends

from gatehouse.api.auth import get_auth_service, signup
from gatehouse.auth.dependencies import CurrentIdentity, get_current_user
from gatehouse.schemas.user import ProfileRead, UserRead
from gatehouse.services.auth_service import AuthService

PROFILE_BIO = "This is a sample profile."

router = APIRouter()

router.add_api_route(
    "/users",
    signup,
    methods=["POST"],
    response_model=UserRead,
    response_model_exclude_none=True,
    status_code=201,
)


@router.get("/users", response_model=list[UserRead], response_model_exclude_none=True)
async def list_users(svc: AuthService = Depends(get_auth_service)):
    return await svc.list_users()


@router.get("/me/profile", response_model=ProfileRead)
async def get_profile(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(get_auth_service),
):
    user = await svc.profile(identity)
    return ProfileRead(id=user.id, email=user.email, bio=PROFILE_BIO)
