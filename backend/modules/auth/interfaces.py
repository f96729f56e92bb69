"""
Authentication module interfaces.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with in-memory fakes and swapping
the identity provider without touching the session core.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from .models import (
    AuthEvent,
    OAuthStart,
    ProviderSession,
    Role,
    SessionSnapshot,
    UserProfile,
)

SessionChangeCallback = Callable[[AuthEvent], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class IIdentityProvider(Protocol):
    """
    Interface for the hosted identity provider.

    Implementations translate provider failures into InvalidCredentialsError
    (bad input) or IdentityProviderError (everything else).
    """

    async def get_session(self) -> Optional[ProviderSession]:
        """
        Return the current session, if any.

        Raises:
            IdentityProviderError: If the provider cannot be reached
        """
        ...

    def on_session_change(self, callback: SessionChangeCallback) -> Unsubscribe:
        """
        Register for session change notifications.

        The callback may be invoked from a provider-owned thread.

        Returns:
            Callable that cancels the subscription
        """
        ...

    async def sign_in_with_password(self, email: str, password: str) -> ProviderSession:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentialsError: If the credentials are rejected
            IdentityProviderError: On any other provider failure
        """
        ...

    async def sign_up(self, email: str, password: str) -> str:
        """
        Create a new identity.

        Returns:
            The new identity ID
        """
        ...

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> OAuthStart:
        """Begin federated sign-in and return the provider authorize URL."""
        ...

    async def exchange_code_for_session(self, auth_code: str) -> ProviderSession:
        """Complete federated sign-in from the callback code."""
        ...

    async def sign_out(self) -> None:
        """End the provider session."""
        ...


@runtime_checkable
class IProfileRepository(Protocol):
    """Interface for application profile storage."""

    async def find_by_id(self, user_id: str) -> Optional[UserProfile]:
        """Return the profile for a user ID, or None if there isn't one."""
        ...

    async def find_by_email(self, email: str) -> Optional[UserProfile]:
        """Return the profile with this email, or None."""
        ...

    async def insert(self, profile: UserProfile) -> UserProfile:
        """Insert a profile and return the persisted row."""
        ...

    async def insert_if_absent(self, profile: UserProfile) -> UserProfile:
        """
        Insert a profile unless one already exists for its ID.

        Returns:
            The stored profile, whether newly inserted or pre-existing
        """
        ...

    async def update(self, user_id: str, patch: dict) -> UserProfile:
        """
        Apply a partial update and return the updated row.

        Raises:
            ProfileNotFoundError: If no profile exists for user_id
        """
        ...


@runtime_checkable
class ISessionService(Protocol):
    """
    Interface for the session and role-authorization core.

    Routing and every dashboard/profile view read the session through
    this interface; only its operations write to it.
    """

    @property
    def current_user(self) -> Optional[UserProfile]:
        ...

    @property
    def loading(self) -> bool:
        ...

    @property
    def access_token(self) -> Optional[str]:
        ...

    def verify_access_token(self, token: Optional[str]) -> bool:
        """Whether a caller presenting token owns the published session."""
        ...

    def snapshot(self) -> SessionSnapshot:
        """Return an immutable view of the session cell."""
        ...

    async def start(self) -> None:
        """Subscribe to provider events and hydrate from any existing session."""
        ...

    async def close(self) -> None:
        """Cancel the provider subscription."""
        ...

    async def bootstrap(self) -> SessionSnapshot:
        """Hydrate the session from the provider's existing session. Never raises."""
        ...

    async def sign_in(self, email: str, password: str) -> UserProfile:
        ...

    async def sign_up(
        self,
        email: str,
        password: str,
        role: Optional[Role] = None,
        first_name: str = "",
        last_name: str = "",
    ) -> UserProfile:
        ...

    async def sign_in_with_google(self) -> OAuthStart:
        ...

    async def complete_oauth(self, auth_code: str) -> UserProfile:
        ...

    async def sign_out(self) -> None:
        ...

    async def update_user_role(self, user_id: str, role: Role) -> UserProfile:
        ...
