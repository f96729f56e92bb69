"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    """Application roles."""

    PENDING = "pending"      # Authenticated but not yet onboarded
    TENANT = "tenant"
    LANDLORD = "landlord"
    AGENT = "agent"          # Acts on behalf of landlords

    @property
    def is_terminal(self) -> bool:
        """Whether this is a post-onboarding role."""
        return self is not Role.PENDING


class Identity(BaseModel):
    """
    Authenticated subject issued by the identity provider.

    Read-only input to this module; the provider owns it.
    """

    id: str = Field(..., description="Opaque subject ID (UUID from Supabase)")
    email: str = Field(default="", description="Email on the identity")
    user_metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-supplied metadata (full name, avatar, ...)",
    )

    model_config = {"frozen": True}


class ProviderSession(BaseModel):
    """Live session held by the identity provider."""

    identity: Identity
    access_token: str = Field(..., description="Provider access token")
    refresh_token: Optional[str] = Field(None, description="Provider refresh token")
    expires_at: Optional[int] = Field(None, description="Expiry as Unix timestamp")

    model_config = {"frozen": True}


class UserProfile(BaseModel):
    """
    Application-level user record, keyed by the identity ID.

    Stored in the ``users`` table. Only fully formed instances are ever
    published to the session cell.
    """

    id: str = Field(..., description="Equal to the identity ID")
    email: str = Field(..., description="Email copied from the identity at creation")
    role: Role = Field(default=Role.PENDING, description="Application role")
    first_name: str = Field(default="", description="First name")
    last_name: str = Field(default="", description="Last name")
    phone_number: Optional[str] = Field(None, description="Phone number")
    profile_image: Optional[str] = Field(None, description="Avatar URL")
    verified: bool = Field(default=False, description="Set by the verification workflow")
    default_landlord_id: Optional[str] = Field(
        None,
        description="Delegation identifier, present only for agents",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation time",
    )

    model_config = {"frozen": True}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "UserProfile":
        """Map a ``users`` row into a profile."""
        return cls(
            id=row["id"],
            email=row.get("email") or "",
            role=row.get("role") or Role.PENDING,
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            phone_number=row.get("phone_number"),
            profile_image=row.get("profile_image"),
            verified=bool(row.get("verified", False)),
            default_landlord_id=row.get("default_landlord_id"),
            created_at=row.get("created_at") or datetime.now(timezone.utc),
        )

    def to_row(self) -> dict[str, Any]:
        """Map the profile into a ``users`` row for insertion."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "profile_image": self.profile_image,
            "verified": self.verified,
            "default_landlord_id": self.default_landlord_id,
            "created_at": self.created_at.isoformat(),
        }

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class AuthEventKind(str, Enum):
    """Session change notifications, collapsed to what the session core needs."""

    SIGNED_OUT = "signed_out"
    SESSION_ESTABLISHED = "session_established"


class AuthEvent(BaseModel):
    """
    A session change notification from the identity provider.

    ``SESSION_ESTABLISHED`` covers sign-in, token refresh and OAuth
    callback completion. A non-signout event may still arrive without a
    session, in which case local state is cleared.
    """

    kind: AuthEventKind
    session: Optional[ProviderSession] = None
    provider_event: str = Field(default="", description="Raw provider event name")

    model_config = {"frozen": True}

    @classmethod
    def signed_out(cls, provider_event: str = "SIGNED_OUT") -> "AuthEvent":
        return cls(kind=AuthEventKind.SIGNED_OUT, provider_event=provider_event)

    @classmethod
    def established(
        cls,
        session: Optional[ProviderSession],
        provider_event: str = "SIGNED_IN",
    ) -> "AuthEvent":
        return cls(
            kind=AuthEventKind.SESSION_ESTABLISHED,
            session=session,
            provider_event=provider_event,
        )


class SessionStatus(str, Enum):
    """Observable state of the session cell."""

    LOADING = "loading"
    SIGNED_OUT = "signed_out"
    AUTHENTICATED = "authenticated"
    DEGRADED = "degraded"        # Signed out because a background step failed


class SessionSnapshot(BaseModel):
    """Read-only projection of the session cell."""

    user: Optional[UserProfile] = None
    loading: bool = False
    status: SessionStatus = SessionStatus.SIGNED_OUT
    last_error: Optional[str] = Field(None, description="Why the session degraded")

    model_config = {"frozen": True}


class DecisionKind(str, Enum):
    """Outcomes of the authorization gate."""

    RENDER = "render"
    LOADING = "loading"
    REDIRECT = "redirect"


class RouteDecision(BaseModel):
    """Result of authorizing a route for the current user."""

    kind: DecisionKind
    target: Optional[str] = Field(None, description="Redirect target, for redirects only")

    model_config = {"frozen": True}

    @classmethod
    def render(cls) -> "RouteDecision":
        return cls(kind=DecisionKind.RENDER)

    @classmethod
    def loading(cls) -> "RouteDecision":
        return cls(kind=DecisionKind.LOADING)

    @classmethod
    def redirect(cls, target: str) -> "RouteDecision":
        return cls(kind=DecisionKind.REDIRECT, target=target)


class OAuthStart(BaseModel):
    """Where to send the browser to begin federated sign-in."""

    provider: str
    url: str
