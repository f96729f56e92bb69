"""
Supabase Auth adapter.

Implements IIdentityProvider on top of the Supabase client's GoTrue
``auth`` namespace and maps its sessions, events and errors into this
module's types.
"""

import asyncio
import logging
from typing import Any, Optional

from supabase import AuthError, Client

from .interfaces import IIdentityProvider, SessionChangeCallback, Unsubscribe
from .models import AuthEvent, Identity, OAuthStart, ProviderSession
from .exceptions import (
    EmailAlreadyRegisteredError,
    IdentityProviderError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)

SIGNED_OUT_EVENT = "SIGNED_OUT"

# Provider error codes that mean "bad input" rather than "provider failure"
INVALID_CREDENTIAL_CODES = {"invalid_credentials", "email_not_confirmed"}
USER_EXISTS_CODES = {"user_already_exists", "email_exists"}


def _error_code(exc: AuthError) -> str:
    return str(getattr(exc, "code", "") or "")


def _is_invalid_credentials(exc: AuthError) -> bool:
    if _error_code(exc) in INVALID_CREDENTIAL_CODES:
        return True
    if type(exc).__name__ == "AuthInvalidCredentialsError":
        return True
    return "invalid login credentials" in str(exc).lower()


def to_identity(user: Any) -> Identity:
    """Map a GoTrue user into an Identity."""
    return Identity(
        id=str(user.id),
        email=(user.email or "").lower(),
        user_metadata=dict(user.user_metadata or {}),
    )


def to_provider_session(session: Any) -> Optional[ProviderSession]:
    """Map a GoTrue session into a ProviderSession (None passes through)."""
    if session is None or session.user is None:
        return None
    return ProviderSession(
        identity=to_identity(session.user),
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
    )


def to_auth_event(event: str, session: Any) -> AuthEvent:
    """Map a provider event name and session into a typed AuthEvent."""
    event_name = str(getattr(event, "value", event))
    if event_name == SIGNED_OUT_EVENT:
        return AuthEvent.signed_out(event_name)
    return AuthEvent.established(to_provider_session(session), event_name)


class SupabaseIdentityProvider(IIdentityProvider):
    """
    Identity provider backed by Supabase Auth.

    The Supabase client is synchronous, so each call runs in a worker
    thread. Timeouts are left to the client.
    """

    def __init__(self, client: Client):
        self._auth = client.auth

    async def get_session(self) -> Optional[ProviderSession]:
        try:
            session = await asyncio.to_thread(self._auth.get_session)
        except AuthError as e:
            raise IdentityProviderError(str(e), operation="get_session") from e
        return to_provider_session(session)

    def on_session_change(self, callback: SessionChangeCallback) -> Unsubscribe:
        def _forward(event: Any, session: Any) -> None:
            callback(to_auth_event(event, session))

        subscription = self._auth.on_auth_state_change(_forward)
        unsubscribed = False

        def unsubscribe() -> None:
            nonlocal unsubscribed
            if unsubscribed:
                return
            unsubscribed = True
            subscription.unsubscribe()
            logger.debug("Unsubscribed from Supabase auth state changes")

        return unsubscribe

    async def sign_in_with_password(self, email: str, password: str) -> ProviderSession:
        try:
            response = await asyncio.to_thread(
                self._auth.sign_in_with_password,
                {"email": email, "password": password},
            )
        except AuthError as e:
            if _is_invalid_credentials(e):
                raise InvalidCredentialsError() from e
            raise IdentityProviderError(str(e), operation="sign_in_with_password") from e

        session = to_provider_session(response.session)
        if session is None:
            raise IdentityProviderError(
                "Sign-in succeeded without a session",
                operation="sign_in_with_password",
            )
        return session

    async def sign_up(self, email: str, password: str) -> str:
        try:
            response = await asyncio.to_thread(
                self._auth.sign_up, {"email": email, "password": password}
            )
        except AuthError as e:
            if _error_code(e) in USER_EXISTS_CODES:
                raise EmailAlreadyRegisteredError(email) from e
            raise IdentityProviderError(str(e), operation="sign_up") from e

        if response.user is None:
            raise IdentityProviderError("Sign-up returned no user", operation="sign_up")
        return str(response.user.id)

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> OAuthStart:
        try:
            response = await asyncio.to_thread(
                self._auth.sign_in_with_oauth,
                {"provider": provider, "options": {"redirect_to": redirect_to}},
            )
        except AuthError as e:
            raise IdentityProviderError(str(e), operation="sign_in_with_oauth") from e
        return OAuthStart(provider=provider, url=response.url)

    async def exchange_code_for_session(self, auth_code: str) -> ProviderSession:
        try:
            response = await asyncio.to_thread(
                self._auth.exchange_code_for_session, {"auth_code": auth_code}
            )
        except AuthError as e:
            raise IdentityProviderError(str(e), operation="exchange_code_for_session") from e

        session = to_provider_session(response.session)
        if session is None:
            raise IdentityProviderError(
                "Code exchange returned no session",
                operation="exchange_code_for_session",
            )
        return session

    async def sign_out(self) -> None:
        try:
            await asyncio.to_thread(self._auth.sign_out)
        except AuthError as e:
            raise IdentityProviderError(str(e), operation="sign_out") from e
