"""API models package."""

from .errors import ErrorResponse
from .user import (
    DashboardResponse,
    OAuthStartResponse,
    RoleUpdateRequest,
    SessionResponse,
    SignInResponse,
    SignInRequest,
    SignUpRequest,
    UserProfileResponse,
)

__all__ = [
    "ErrorResponse",
    "DashboardResponse",
    "OAuthStartResponse",
    "RoleUpdateRequest",
    "SessionResponse",
    "SignInResponse",
    "SignInRequest",
    "SignUpRequest",
    "UserProfileResponse",
]
