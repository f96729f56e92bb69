"""
Route protection.

Binds each request to the session through the bearer token returned by
sign-in, then turns role authorization decisions into FastAPI
dependencies. A caller whose token does not match the published session
is treated as anonymous.
"""

from typing import Callable, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from modules.auth.gate import authorize
from modules.auth.interfaces import ISessionService
from modules.auth.models import DecisionKind, Role, UserProfile
from shared.config import Settings

from ..dependencies import get_app_settings, get_session_service

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class RedirectRequired(HTTPException):
    """The current user must be sent elsewhere."""
    def __init__(self, target: str):
        super().__init__(
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            detail=f"Redirect to {target}",
            headers={"Location": target},
        )


class SessionLoading(HTTPException):
    """The session is still being established; the client should retry."""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session is loading",
            headers={"Retry-After": "1"},
        )


class NotSignedIn(HTTPException):
    """Authentication error with consistent format."""
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def caller_user(
    session: ISessionService,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[UserProfile]:
    """The published user if the caller presented its token, otherwise None."""
    token = credentials.credentials if credentials else None
    if not session.verify_access_token(token):
        return None
    return session.current_user


def require_role(required_role: Optional[Role] = None) -> Callable:
    """
    Build a dependency that admits only users the gate renders for.

    Usage:
        @router.get("/tenant")
        async def tenant_home(user: UserProfile = Depends(require_role(Role.TENANT))):
            ...
    """

    async def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        session: ISessionService = Depends(get_session_service),
        settings: Settings = Depends(get_app_settings),
    ) -> UserProfile:
        user = caller_user(session, credentials)
        decision = authorize(
            user,
            session.loading,
            required_role,
            sign_in_path=settings.sign_in_path,
            onboarding_path=settings.onboarding_path,
            root_path=settings.root_path,
        )

        if decision.kind == DecisionKind.LOADING:
            raise SessionLoading()
        if decision.kind == DecisionKind.REDIRECT:
            raise RedirectRequired(decision.target)
        return user

    return dependency


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: ISessionService = Depends(get_session_service),
) -> UserProfile:
    """
    Dependency that requires the signed-in user in any role.

    Pending users pass, so onboarding screens can use it.
    """
    if session.loading:
        raise SessionLoading()
    user = caller_user(session, credentials)
    if user is None:
        raise NotSignedIn()
    return user


# Type aliases for cleaner route definitions
RequireUser = Depends(require_user)
