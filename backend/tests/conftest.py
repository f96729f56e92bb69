"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
in-memory fakes for the identity provider and profile storage, and a
session service wired to them.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from modules.auth.exceptions import (
    EmailAlreadyRegisteredError,
    IdentityProviderError,
    InvalidCredentialsError,
    ProfileNotFoundError,
)
from modules.auth.models import (
    AuthEvent,
    Identity,
    OAuthStart,
    ProviderSession,
    Role,
    UserProfile,
)
from modules.auth.service import SessionService
from shared.cache import QueryCache
from shared.config import Settings
from shared.exceptions import ConflictError


def make_session(
    user_id: str = "user-123",
    email: str = "ada@example.com",
    **metadata: Any,
) -> ProviderSession:
    """Create a provider session for an identity."""
    return ProviderSession(
        identity=Identity(id=user_id, email=email, user_metadata=metadata),
        access_token=f"token-{user_id}",
    )


def make_profile(
    user_id: str = "user-123",
    email: str = "ada@example.com",
    role: Role = Role.TENANT,
    **fields: Any,
) -> UserProfile:
    """Create a stored profile."""
    return UserProfile(
        id=user_id,
        email=email,
        role=role,
        created_at=datetime(2025, 4, 11, tzinfo=timezone.utc),
        **fields,
    )


class FakeIdentityProvider:
    """In-memory identity provider that records calls and emits events."""

    def __init__(self):
        self.session: Optional[ProviderSession] = None
        self.accounts: dict[str, tuple[str, str, dict]] = {}  # email -> (id, password, metadata)
        self.oauth_codes: dict[str, ProviderSession] = {}
        self.callbacks: list = []
        self.unsubscribe_calls = 0
        self.sign_up_calls: list[str] = []
        self.oauth_calls: list[tuple[str, str]] = []
        self.get_session_error: Optional[Exception] = None
        self.sign_out_error: Optional[Exception] = None

    def add_account(self, email: str, password: str, user_id: Optional[str] = None, **metadata):
        user_id = user_id or str(uuid.uuid4())
        self.accounts[email] = (user_id, password, metadata)
        return user_id

    def emit(self, event: AuthEvent) -> None:
        for callback in list(self.callbacks):
            callback(event)

    async def get_session(self) -> Optional[ProviderSession]:
        if self.get_session_error is not None:
            raise self.get_session_error
        return self.session

    def on_session_change(self, callback):
        self.callbacks.append(callback)

        def unsubscribe():
            self.unsubscribe_calls += 1
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return unsubscribe

    async def sign_in_with_password(self, email: str, password: str) -> ProviderSession:
        account = self.accounts.get(email)
        if account is None or account[1] != password:
            raise InvalidCredentialsError()
        user_id, _, metadata = account
        self.session = make_session(user_id, email, **metadata)
        self.emit(AuthEvent.established(self.session, "SIGNED_IN"))
        return self.session

    async def sign_up(self, email: str, password: str) -> str:
        self.sign_up_calls.append(email)
        if email in self.accounts:
            raise EmailAlreadyRegisteredError(email)
        return self.add_account(email, password)

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> OAuthStart:
        self.oauth_calls.append((provider, redirect_to))
        return OAuthStart(
            provider=provider,
            url=f"https://auth.example.com/authorize?provider={provider}&redirect_to={redirect_to}",
        )

    async def exchange_code_for_session(self, auth_code: str) -> ProviderSession:
        session = self.oauth_codes.get(auth_code)
        if session is None:
            raise IdentityProviderError("invalid flow state", operation="exchange_code_for_session")
        self.session = session
        self.emit(AuthEvent.established(session, "SIGNED_IN"))
        return session

    async def sign_out(self) -> None:
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.session = None
        self.emit(AuthEvent.signed_out())


class FakeProfileRepository:
    """In-memory profile storage keyed by identity ID."""

    def __init__(self):
        self.rows: dict[str, UserProfile] = {}
        self.insert_calls = 0
        self.find_error: Optional[Exception] = None
        self.update_error: Optional[Exception] = None

    def add(self, profile: UserProfile) -> UserProfile:
        self.rows[profile.id] = profile
        return profile

    async def find_by_id(self, user_id: str) -> Optional[UserProfile]:
        if self.find_error is not None:
            raise self.find_error
        return self.rows.get(user_id)

    async def find_by_email(self, email: str) -> Optional[UserProfile]:
        for profile in self.rows.values():
            if profile.email == email.strip().lower():
                return profile
        return None

    async def insert(self, profile: UserProfile) -> UserProfile:
        self.insert_calls += 1
        if profile.id in self.rows:
            raise ConflictError(f"duplicate key value violates unique constraint: {profile.id}")
        self.rows[profile.id] = profile
        return profile

    async def insert_if_absent(self, profile: UserProfile) -> UserProfile:
        self.insert_calls += 1
        self.rows.setdefault(profile.id, profile)
        return self.rows[profile.id]

    async def update(self, user_id: str, patch: dict) -> UserProfile:
        if self.update_error is not None:
            raise self.update_error
        if user_id not in self.rows:
            raise ProfileNotFoundError(user_id)
        updated = UserProfile.model_validate({**self.rows[user_id].model_dump(), **patch})
        self.rows[user_id] = updated
        return updated


@pytest.fixture
def settings() -> Settings:
    """Settings with Supabase left unconfigured."""
    return Settings(
        _env_file=None,
        frontend_url="http://localhost:5173",
        supabase_url="",
        supabase_anon_key="",
        supabase_service_role_key="",
    )


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def repository() -> FakeProfileRepository:
    return FakeProfileRepository()


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def service(provider, repository, cache, settings) -> SessionService:
    """Session service wired to in-memory fakes."""
    return SessionService(
        provider=provider,
        repository=repository,
        cache=cache,
        settings=settings,
    )


@pytest.fixture
def session_factory():
    """Factory for provider sessions."""
    return make_session


@pytest.fixture
def profile_factory():
    """Factory for stored profiles."""
    return make_profile
