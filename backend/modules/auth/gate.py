"""
Role authorization gate.

Pure decision functions used by the routing layer. No I/O and no
framework dependencies, so every branch is testable on its own.
"""

from typing import Optional

from .models import Role, RouteDecision, UserProfile

# Roles that share access to the landlord-oriented area. Agents act as
# delegates for landlords and reach the same screens.
LANDLORD_AREA_ROLES = frozenset({Role.LANDLORD, Role.AGENT})

DASHBOARD_PATHS = {
    Role.TENANT: "/dashboard/tenant",
    Role.LANDLORD: "/dashboard/landlord",
    Role.AGENT: "/dashboard/agent",
}


def authorize(
    user: Optional[UserProfile],
    loading: bool,
    required_role: Optional[Role],
    *,
    sign_in_path: str = "/login",
    onboarding_path: str = "/onboarding",
    root_path: str = "/",
) -> RouteDecision:
    """
    Decide whether the current user may see a route.

    Args:
        user: The signed-in profile, or None
        loading: Whether the session is still being established
        required_role: Role the route is restricted to, or None for any
            signed-in, onboarded user
        sign_in_path: Redirect target for anonymous users
        onboarding_path: Redirect target for pending users
        root_path: Redirect target for users with the wrong role

    Returns:
        RouteDecision to render, show a loading placeholder, or redirect
    """
    if loading:
        return RouteDecision.loading()

    if user is None:
        return RouteDecision.redirect(sign_in_path)

    if user.role == Role.PENDING:
        return RouteDecision.redirect(onboarding_path)

    if required_role is None:
        return RouteDecision.render()

    if required_role in LANDLORD_AREA_ROLES:
        if user.role in LANDLORD_AREA_ROLES:
            return RouteDecision.render()
        return RouteDecision.redirect(root_path)

    if user.role == required_role:
        return RouteDecision.render()
    return RouteDecision.redirect(root_path)


def dashboard_path_for(role: Role, onboarding_path: str = "/onboarding") -> str:
    """Landing page for a role; pending users go to onboarding."""
    return DASHBOARD_PATHS.get(role, onboarding_path)
