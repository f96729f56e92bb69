"""
Session endpoints.

Sign-in, sign-up, federated sign-in and sign-out. Domain errors
(invalid credentials, duplicate email) and provider failures are
rendered by the application's BaabaError handler.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.responses import RedirectResponse

from modules.auth.gate import dashboard_path_for
from modules.auth.interfaces import ISessionService
from modules.auth.models import Role, UserProfile
from shared.config import Settings

from ..dependencies import get_app_settings, get_session_service
from ..middleware.guard import RequireUser, bearer_scheme, caller_user
from ..models.errors import ErrorResponse
from ..models.user import (
    OAuthStartResponse,
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    UserProfileResponse,
)

router = APIRouter()

PROVIDER_ERROR = {502: {"model": ErrorResponse, "description": "Identity provider failure"}}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: ISessionService = Depends(get_session_service),
) -> SessionResponse:
    """
    Get the current session state.

    Never fails: a degraded session reports status "degraded" and the
    reason in last_error. The profile is only included for the caller
    holding the session's bearer token.
    """
    return SessionResponse.from_snapshot(
        session.snapshot(),
        show_user=caller_user(session, credentials) is not None,
    )


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    responses={401: {"model": ErrorResponse}, **PROVIDER_ERROR},
)
async def sign_in(
    request: SignInRequest,
    session: ISessionService = Depends(get_session_service),
) -> SignInResponse:
    """
    Sign in with email and password.

    The returned access_token must be sent as a bearer token on every
    request that reads or changes the signed-in user.
    """
    await session.sign_in(request.email, request.password)
    snapshot = session.snapshot()
    return SignInResponse(
        **SessionResponse.from_snapshot(snapshot).model_dump(),
        access_token=session.access_token,
    )


@router.post(
    "/sign-up",
    response_model=UserProfileResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}, **PROVIDER_ERROR},
)
async def sign_up(
    request: SignUpRequest,
    session: ISessionService = Depends(get_session_service),
) -> UserProfileResponse:
    """
    Register with email and password.

    Fails with 409 before any identity is created if the email is
    already registered.
    """
    profile = await session.sign_up(
        request.email,
        request.password,
        role=request.role,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    return UserProfileResponse.from_profile(profile)


@router.get("/oauth/google", response_model=OAuthStartResponse)
async def start_google_sign_in(
    session: ISessionService = Depends(get_session_service),
) -> OAuthStartResponse:
    """Get the provider URL that starts Google sign-in."""
    start = await session.sign_in_with_google()
    return OAuthStartResponse(provider=start.provider, url=start.url)


@router.get("/callback", status_code=303, responses=PROVIDER_ERROR)
async def oauth_callback(
    code: str = Query(..., min_length=1, description="Authorization code from the provider"),
    session: ISessionService = Depends(get_session_service),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """
    Complete federated sign-in.

    First-time users land on onboarding with a pending profile; everyone
    else lands on their dashboard. The bearer token travels in the URL
    fragment, which browsers never send back to a server.
    """
    profile = await session.complete_oauth(code)
    if profile.role == Role.PENDING:
        target = settings.onboarding_path
    else:
        target = dashboard_path_for(profile.role, settings.onboarding_path)
    fragment = urlencode({"access_token": session.access_token, "token_type": "bearer"})
    return RedirectResponse(
        f"{settings.frontend_url.rstrip('/')}{target}#{fragment}",
        status_code=303,
    )


@router.post("/sign-out", status_code=204, responses=PROVIDER_ERROR)
async def sign_out(
    user: UserProfile = RequireUser,
    session: ISessionService = Depends(get_session_service),
) -> None:
    """Sign out and clear cached data. Only the session holder may sign out."""
    await session.sign_out()
