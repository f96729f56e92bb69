"""
Fixtures for API tests.

Each test gets its own application wired to the in-memory fakes, so
the session cell never leaks between tests.
"""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer
from modules.auth.models import Role

from tests.conftest import make_profile

PASSWORD = "correct-horse"


@pytest.fixture
def app(settings, provider, repository, cache, service):
    container = ServiceContainer(
        settings=settings,
        identity_provider=provider,
        profile_repository=repository,
        session=service,
        cache=cache,
    )
    return create_app(container)


@pytest.fixture
def client(app):
    """Client with the application lifespan running."""
    with TestClient(app, follow_redirects=False) as client:
        yield client


@pytest.fixture
def sign_in_as(client, provider, repository):
    """Create an account in the given role and sign it in through the API.

    The client keeps the returned bearer token for later requests.
    """

    def _sign_in(role: Role, email: str = "ada@unilag.edu.ng", **fields):
        user_id = provider.add_account(email, PASSWORD)
        repository.add(make_profile(user_id, email, role=role, **fields))
        response = client.post("/api/auth/sign-in", json={"email": email, "password": PASSWORD})
        assert response.status_code == 200
        client.headers["Authorization"] = f"Bearer {response.json()['access_token']}"
        return user_id

    return _sign_in
