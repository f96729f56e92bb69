import asyncio

import pytest

from modules.auth.exceptions import ProfileResolutionError
from modules.auth.models import Identity, Role
from modules.auth.resolver import (
    ProfileResolver,
    build_provisional_profile,
    derive_avatar,
    derive_names,
)


class TestDeriveNames:
    def test_splits_full_name(self):
        assert derive_names({"full_name": "Ada Okafor"}) == ("Ada", "Okafor")

    def test_remaining_tokens_form_last_name(self):
        assert derive_names({"full_name": "Chidi Ngozi  Eze"}) == ("Chidi", "Ngozi Eze")

    def test_single_token(self):
        assert derive_names({"full_name": "Tunde"}) == ("Tunde", "")

    def test_name_field_used_when_full_name_missing(self):
        assert derive_names({"name": "Ada Okafor"}) == ("Ada", "Okafor")

    def test_falls_back_to_given_and_family_name(self):
        metadata = {"given_name": "Ada", "family_name": "Okafor"}
        assert derive_names(metadata) == ("Ada", "Okafor")

    def test_blank_full_name_falls_back(self):
        metadata = {"full_name": "   ", "given_name": "Ada"}
        assert derive_names(metadata) == ("Ada", "")

    def test_nothing_available(self):
        assert derive_names({}) == ("", "")


class TestDeriveAvatar:
    def test_avatar_url(self):
        assert derive_avatar({"avatar_url": "https://img/a.png"}) == "https://img/a.png"

    def test_picture_fallback(self):
        assert derive_avatar({"picture": "https://img/p.png"}) == "https://img/p.png"

    def test_missing(self):
        assert derive_avatar({}) is None


class TestBuildProvisionalProfile:
    def test_pending_unverified_profile(self):
        identity = Identity(
            id="user-1",
            email="ada@example.com",
            user_metadata={"full_name": "Ada Okafor", "avatar_url": "https://img/a.png"},
        )
        profile = build_provisional_profile(identity)

        assert profile.id == "user-1"
        assert profile.email == "ada@example.com"
        assert profile.role == Role.PENDING
        assert profile.verified is False
        assert profile.first_name == "Ada"
        assert profile.last_name == "Okafor"
        assert profile.profile_image == "https://img/a.png"
        assert profile.default_landlord_id is None


class TestProfileResolver:
    @pytest.fixture
    def resolver(self, repository):
        return ProfileResolver(repository)

    @pytest.mark.asyncio
    async def test_returns_existing_profile(self, resolver, repository, session_factory, profile_factory):
        """An existing profile is loaded, never re-created."""
        stored = repository.add(profile_factory("user-1", role=Role.LANDLORD))

        profile = await resolver.resolve(session_factory("user-1"))

        assert profile == stored
        assert repository.insert_calls == 0

    @pytest.mark.asyncio
    async def test_first_federated_login_creates_pending_profile(self, resolver, repository, session_factory):
        session = session_factory(
            "user-ada",
            "ada@example.com",
            full_name="Ada Okafor",
            avatar_url="https://img/ada.png",
        )

        profile = await resolver.resolve(session)

        assert profile.first_name == "Ada"
        assert profile.last_name == "Okafor"
        assert profile.role == Role.PENDING
        assert profile.profile_image == "https://img/ada.png"
        assert repository.rows["user-ada"] == profile

    @pytest.mark.asyncio
    async def test_resolving_twice_is_idempotent(self, resolver, repository, session_factory):
        first = await resolver.resolve(session_factory("user-1", full_name="Ada Okafor"))
        second = await resolver.resolve(session_factory("user-1", full_name="Ada Okafor"))

        assert first.id == second.id
        assert repository.insert_calls == 1
        assert len(repository.rows) == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_logins_store_one_profile(self, resolver, repository, session_factory):
        """The bootstrapper and listener racing on cold start share one row."""
        results = await asyncio.gather(
            resolver.resolve(session_factory("user-1")),
            resolver.resolve(session_factory("user-1")),
        )

        assert results[0] == results[1]
        assert len(repository.rows) == 1
        assert repository.insert_calls == 1

    @pytest.mark.asyncio
    async def test_locks_released_after_resolution(self, resolver, session_factory):
        await resolver.resolve(session_factory("user-1"))
        assert resolver._locks == {}

    @pytest.mark.asyncio
    async def test_lookup_failure_becomes_resolution_error(self, resolver, repository, session_factory):
        repository.find_error = ConnectionError("network down")

        with pytest.raises(ProfileResolutionError) as exc_info:
            await resolver.resolve(session_factory("user-1"))

        assert exc_info.value.details["user_id"] == "user-1"
        assert isinstance(exc_info.value.cause, ConnectionError)
        assert repository.insert_calls == 0

    @pytest.mark.asyncio
    async def test_register_inserts_profile(self, resolver, repository, profile_factory):
        profile = profile_factory("user-1", role=Role.TENANT, first_name="Ada")

        stored = await resolver.register(profile)

        assert stored == profile
        assert repository.rows["user-1"] == profile

    @pytest.mark.asyncio
    async def test_register_overrides_provisional_profile(self, resolver, repository, profile_factory):
        """Sign-up details win over a provisional profile created by a racing event."""
        repository.add(profile_factory("user-1", role=Role.PENDING))

        stored = await resolver.register(
            profile_factory("user-1", role=Role.LANDLORD, first_name="Ada", last_name="Okafor")
        )

        assert stored.role == Role.LANDLORD
        assert stored.first_name == "Ada"
        assert repository.rows["user-1"].role == Role.LANDLORD
