"""
Authentication module.

Handles the session lifecycle, profile resolution, role authorization
and role assignment.

Public API:
- ISessionService: Interface for the session core
- IIdentityProvider / IProfileRepository: Collaborator interfaces
- authorize: Role authorization gate
- UserProfile, Role, RouteDecision, SessionSnapshot: Models
- Auth exceptions: InvalidCredentialsError, EmailAlreadyRegisteredError, etc.
"""

from .interfaces import IIdentityProvider, IProfileRepository, ISessionService
from .models import (
    AuthEvent,
    AuthEventKind,
    DecisionKind,
    Identity,
    OAuthStart,
    ProviderSession,
    Role,
    RouteDecision,
    SessionSnapshot,
    SessionStatus,
    UserProfile,
)
from .gate import authorize, dashboard_path_for
from .exceptions import (
    EmailAlreadyRegisteredError,
    IdentityProviderError,
    InvalidCredentialsError,
    InvalidRoleError,
    ProfileNotFoundError,
    ProfileResolutionError,
)

__all__ = [
    # Interfaces
    "IIdentityProvider",
    "IProfileRepository",
    "ISessionService",
    # Models
    "AuthEvent",
    "AuthEventKind",
    "DecisionKind",
    "Identity",
    "OAuthStart",
    "ProviderSession",
    "Role",
    "RouteDecision",
    "SessionSnapshot",
    "SessionStatus",
    "UserProfile",
    # Gate
    "authorize",
    "dashboard_path_for",
    # Exceptions
    "EmailAlreadyRegisteredError",
    "IdentityProviderError",
    "InvalidCredentialsError",
    "InvalidRoleError",
    "ProfileNotFoundError",
    "ProfileResolutionError",
]
