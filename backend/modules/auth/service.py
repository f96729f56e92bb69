"""
Session service implementation.

Owns the canonical session cell (current user, loading flag, status)
and every operation that writes to it: bootstrap, auth event handling,
sign-in/up/out, federated sign-in and role assignment.
"""

import logging
import secrets
import uuid
from typing import Optional

from shared.cache import QueryCache
from shared.config import Settings, get_settings

from .events import AuthEventListener
from .interfaces import IIdentityProvider, IProfileRepository, ISessionService
from .models import (
    AuthEvent,
    AuthEventKind,
    OAuthStart,
    ProviderSession,
    Role,
    SessionSnapshot,
    SessionStatus,
    UserProfile,
)
from .resolver import ProfileResolver
from .exceptions import EmailAlreadyRegisteredError, InvalidRoleError

logger = logging.getLogger(__name__)


def new_delegation_id() -> str:
    """Generate an opaque delegation identifier for an agent."""
    return str(uuid.uuid4())


class SessionService(ISessionService):
    """
    Implementation of the session core.

    One instance is created per application and shared by every reader.
    Readers only ever see a fully resolved UserProfile or None; the
    last operation to complete wins.

    Background paths (bootstrap, event handling) never raise. Explicit
    user actions propagate their errors to the caller.
    """

    def __init__(
        self,
        provider: IIdentityProvider,
        repository: IProfileRepository,
        cache: Optional[QueryCache] = None,
        settings: Optional[Settings] = None,
        resolver: Optional[ProfileResolver] = None,
    ):
        self._provider = provider
        self._repository = repository
        self._resolver = resolver or ProfileResolver(repository)
        self._cache = cache if cache is not None else QueryCache()
        self._settings = settings or get_settings()
        self._listener = AuthEventListener(provider, self.handle_event)

        self._user: Optional[UserProfile] = None
        self._loading = True
        self._status = SessionStatus.LOADING
        self._last_error: Optional[str] = None
        self._access_token: Optional[str] = None

    # -------------------------------------------------------------------------
    # Read-only projections
    # -------------------------------------------------------------------------

    @property
    def current_user(self) -> Optional[UserProfile]:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def access_token(self) -> Optional[str]:
        """Provider access token of the published session, if any."""
        return self._access_token

    def verify_access_token(self, token: Optional[str]) -> bool:
        """Whether token belongs to the published session."""
        if not token or self._user is None or self._access_token is None:
            return False
        return secrets.compare_digest(token, self._access_token)

    @property
    def cache(self) -> QueryCache:
        return self._cache

    @property
    def listener(self) -> AuthEventListener:
        return self._listener

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            user=self._user,
            loading=self._loading,
            status=self._status,
            last_error=self._last_error,
        )

    # -------------------------------------------------------------------------
    # Cell writes
    # -------------------------------------------------------------------------

    def _publish(self, profile: UserProfile, session: Optional[ProviderSession] = None) -> None:
        if self._user is not None and self._user.id != profile.id:
            self._cache.invalidate_all()
        if session is not None:
            self._access_token = session.access_token
        self._user = profile
        self._loading = False
        self._status = SessionStatus.AUTHENTICATED
        self._last_error = None

    def _clear(self, error: Optional[str] = None) -> None:
        self._user = None
        self._access_token = None
        self._loading = False
        self._status = SessionStatus.DEGRADED if error else SessionStatus.SIGNED_OUT
        self._last_error = error

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Subscribe to provider events, then hydrate from any existing session."""
        await self._listener.start()
        await self.bootstrap()

    async def close(self) -> None:
        await self._listener.close()

    async def bootstrap(self) -> SessionSnapshot:
        """
        Hydrate the session from the provider's existing session.

        Never raises: a provider or storage failure leaves the session
        signed out with DEGRADED status.
        """
        self._loading = True
        try:
            session = await self._provider.get_session()
            if session is None:
                if self._user is None:
                    self._clear()
            else:
                self._publish(await self._resolver.resolve(session), session)
        except Exception as e:
            logger.warning(f"Session bootstrap failed, continuing signed out: {e}")
            self._clear(error=str(e))
        finally:
            self._loading = False

        return self.snapshot()

    async def handle_event(self, event: AuthEvent) -> None:
        """
        Apply one provider event to the session cell.

        Never raises: a resolution failure clears the session with
        DEGRADED status.
        """
        try:
            if event.kind == AuthEventKind.SIGNED_OUT:
                self._cache.invalidate_all()
                self._clear()
                return

            if event.session is None:
                self._clear()
                return

            try:
                profile = await self._resolver.resolve(event.session)
            except Exception as e:
                logger.warning(f"Could not resolve profile after {event.provider_event}: {e}")
                self._clear(error=str(e))
                return

            self._publish(profile, event.session)
        finally:
            self._loading = False

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> UserProfile:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentialsError: If the credentials are rejected
            IdentityProviderError: If the provider fails
            ProfileResolutionError: If the profile cannot be loaded
        """
        session = await self._provider.sign_in_with_password(email.strip().lower(), password)
        profile = await self._resolver.resolve(session)
        self._publish(profile, session)
        logger.info(f"User {profile.id} signed in as {profile.role.value}")
        return profile

    async def sign_up(
        self,
        email: str,
        password: str,
        role: Optional[Role] = None,
        first_name: str = "",
        last_name: str = "",
    ) -> UserProfile:
        """
        Register a new account with email and password.

        The email is checked against existing profiles before the
        provider is called, so a duplicate never leaves an orphaned
        provider identity behind.

        Raises:
            EmailAlreadyRegisteredError: If a profile already uses the email
            IdentityProviderError: If the provider fails
        """
        email = email.strip().lower()
        role = Role(role) if role is not None else Role.PENDING

        if await self._repository.find_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)

        identity_id = await self._provider.sign_up(email, password)

        profile = await self._resolver.register(
            UserProfile(
                id=identity_id,
                email=email,
                role=role,
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                default_landlord_id=new_delegation_id() if role == Role.AGENT else None,
            )
        )
        logger.info(f"Registered {profile.id} as {profile.role.value}")
        return profile

    async def sign_in_with_google(self) -> OAuthStart:
        """
        Begin federated sign-in.

        The provider redirects back to onboarding so first-time federated
        users get their provisional profile and pick a role.
        """
        return await self._provider.sign_in_with_oauth(
            self._settings.oauth_provider,
            self._settings.oauth_redirect_url,
        )

    async def complete_oauth(self, auth_code: str) -> UserProfile:
        """Finish federated sign-in from the provider's callback code."""
        session = await self._provider.exchange_code_for_session(auth_code)
        profile = await self._resolver.resolve(session)
        self._publish(profile, session)
        return profile

    async def sign_out(self) -> None:
        """
        Sign out.

        Cached query data and the session cell are cleared before the
        provider is called, so nothing from this user survives even if
        the provider call fails. Provider errors still propagate.
        """
        user_id = self._user.id if self._user else None
        self._cache.invalidate_all()
        self._clear()
        await self._provider.sign_out()
        logger.info(f"User {user_id} signed out")

    async def update_user_role(self, user_id: str, role: Role) -> UserProfile:
        """
        Assign a terminal role to a user.

        Callable after onboarding too (administrative role changes).
        Assigning ``agent`` generates a fresh delegation identifier;
        any other role clears it.

        Raises:
            InvalidRoleError: If role is ``pending`` or unknown
            ProfileNotFoundError: If the user has no profile
        """
        try:
            role = Role(role)
        except ValueError:
            raise InvalidRoleError(str(role))
        if not role.is_terminal:
            raise InvalidRoleError(role.value)

        patch = {
            "role": role,
            "default_landlord_id": new_delegation_id() if role == Role.AGENT else None,
        }
        updated = await self._repository.update(user_id, patch)

        self._cache.invalidate_prefix(f"user:{user_id}:")
        if self._user is not None and self._user.id == user_id:
            self._publish(updated)

        logger.info(f"User {user_id} assigned role {role.value}")
        return updated
