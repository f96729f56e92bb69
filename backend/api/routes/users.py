"""
User-related endpoints.

Provides endpoints for the current user's profile and onboarding role choice.
"""

from fastapi import APIRouter, Depends

from modules.auth.interfaces import ISessionService
from modules.auth.models import UserProfile

from ..dependencies import get_session_service
from ..middleware.guard import RequireUser
from ..models.user import RoleUpdateRequest, UserProfileResponse

router = APIRouter()


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    user: UserProfile = RequireUser,
) -> UserProfileResponse:
    """
    Get the current user's profile.

    Requires authentication. Pending users are allowed.
    """
    return UserProfileResponse.from_profile(user)


@router.put("/me/role", response_model=UserProfileResponse)
async def update_my_role(
    request: RoleUpdateRequest,
    user: UserProfile = RequireUser,
    session: ISessionService = Depends(get_session_service),
) -> UserProfileResponse:
    """
    Choose a role.

    Used by onboarding to move a pending user to tenant, landlord or
    agent. Returns 400 for "pending".
    """
    updated = await session.update_user_role(user.id, request.role)
    return UserProfileResponse.from_profile(updated)
