"""
Role dashboard endpoints.

Each endpoint is protected by the role authorization gate and returns
landing data derived from the current profile, cached per user.
"""

from fastapi import APIRouter, Depends

from modules.auth.gate import dashboard_path_for
from modules.auth.models import Role, UserProfile
from shared.cache import QueryCache
from shared.config import Settings

from ..dependencies import get_app_settings, get_query_cache
from ..middleware.guard import RedirectRequired, require_role, require_user
from ..models.user import DashboardResponse

router = APIRouter()


async def _dashboard_for(user: UserProfile, cache: QueryCache) -> DashboardResponse:
    async def load() -> DashboardResponse:
        return DashboardResponse(
            user_id=user.id,
            role=user.role,
            display_name=user.full_name or user.email,
            dashboard_path=dashboard_path_for(user.role),
            verified=user.verified,
            default_landlord_id=user.default_landlord_id,
        )

    return await cache.get_or_load(f"user:{user.id}:dashboard", load)


@router.get("/onboarding", response_model=DashboardResponse)
async def onboarding(
    user: UserProfile = Depends(require_user),
    settings: Settings = Depends(get_app_settings),
    cache: QueryCache = Depends(get_query_cache),
) -> DashboardResponse:
    """
    Onboarding landing data.

    Users who already have a role are sent to their dashboard.
    """
    if user.role != Role.PENDING:
        raise RedirectRequired(dashboard_path_for(user.role, settings.onboarding_path))
    return await _dashboard_for(user, cache)


@router.get("/home", response_model=DashboardResponse)
async def home(
    user: UserProfile = Depends(require_role()),
    cache: QueryCache = Depends(get_query_cache),
) -> DashboardResponse:
    """Dashboard for any onboarded user."""
    return await _dashboard_for(user, cache)


@router.get("/tenant", response_model=DashboardResponse)
async def tenant_dashboard(
    user: UserProfile = Depends(require_role(Role.TENANT)),
    cache: QueryCache = Depends(get_query_cache),
) -> DashboardResponse:
    """Tenant dashboard."""
    return await _dashboard_for(user, cache)


@router.get("/landlord", response_model=DashboardResponse)
async def landlord_dashboard(
    user: UserProfile = Depends(require_role(Role.LANDLORD)),
    cache: QueryCache = Depends(get_query_cache),
) -> DashboardResponse:
    """Landlord dashboard. Agents are admitted too."""
    return await _dashboard_for(user, cache)


@router.get("/agent", response_model=DashboardResponse)
async def agent_dashboard(
    user: UserProfile = Depends(require_role(Role.AGENT)),
    cache: QueryCache = Depends(get_query_cache),
) -> DashboardResponse:
    """Agent dashboard. Shares the landlord area's access rules."""
    return await _dashboard_for(user, cache)
