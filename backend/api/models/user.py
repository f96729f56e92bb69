"""
Request and response models for session and user endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from modules.auth.gate import dashboard_path_for
from modules.auth.models import Role, SessionSnapshot, SessionStatus, UserProfile


class SignInRequest(BaseModel):
    """Email/password sign-in."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignUpRequest(BaseModel):
    """Email/password registration."""
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Optional[Role] = Field(None, description="Role chosen on the registration form")
    first_name: str = ""
    last_name: str = ""


class RoleUpdateRequest(BaseModel):
    """Role chosen during onboarding."""
    role: Role


class UserProfileResponse(BaseModel):
    """User profile response model."""

    id: str
    email: str
    role: Role
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    profile_image: Optional[str] = None
    verified: bool
    default_landlord_id: Optional[str] = None
    created_at: datetime
    home_path: str

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserProfileResponse":
        return cls(
            **profile.model_dump(),
            home_path=dashboard_path_for(profile.role),
        )


class SessionResponse(BaseModel):
    """Current state of the session cell."""

    user: Optional[UserProfileResponse] = None
    loading: bool
    status: SessionStatus
    last_error: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot, show_user: bool = True) -> "SessionResponse":
        user = snapshot.user if show_user else None
        return cls(
            user=UserProfileResponse.from_profile(user) if user else None,
            loading=snapshot.loading,
            status=snapshot.status,
            last_error=snapshot.last_error,
        )


class SignInResponse(SessionResponse):
    """Session state plus the bearer token that binds later requests to it."""
    access_token: str
    token_type: str = "bearer"


class OAuthStartResponse(BaseModel):
    """Where to send the browser for federated sign-in."""
    provider: str
    url: str


class DashboardResponse(BaseModel):
    """Landing data for a role dashboard."""
    user_id: str
    role: Role
    display_name: str
    dashboard_path: str
    verified: bool
    default_landlord_id: Optional[str] = None
