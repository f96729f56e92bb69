"""Tests for role-protected dashboard endpoints."""

import pytest
from fastapi.testclient import TestClient

from modules.auth.models import Role


class TestDashboardAccess:
    @pytest.mark.parametrize("path", ["/home", "/tenant", "/landlord", "/agent"])
    def test_anonymous_users_go_to_sign_in(self, client, path):
        response = client.get(f"/api/dashboard{path}")

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    @pytest.mark.parametrize("path", ["/home", "/tenant", "/landlord", "/agent"])
    def test_pending_users_go_to_onboarding(self, client, sign_in_as, path):
        sign_in_as(Role.PENDING)

        response = client.get(f"/api/dashboard{path}")

        assert response.status_code == 307
        assert response.headers["location"] == "/onboarding"

    @pytest.mark.parametrize(
        "role,path,expected",
        [
            (Role.TENANT, "/tenant", 200),
            (Role.TENANT, "/landlord", 307),
            (Role.TENANT, "/agent", 307),
            (Role.LANDLORD, "/landlord", 200),
            (Role.LANDLORD, "/agent", 200),
            (Role.LANDLORD, "/tenant", 307),
            (Role.AGENT, "/agent", 200),
            (Role.AGENT, "/landlord", 200),
            (Role.AGENT, "/tenant", 307),
        ],
    )
    def test_role_rules(self, client, sign_in_as, role, path, expected):
        sign_in_as(role)

        response = client.get(f"/api/dashboard{path}")

        assert response.status_code == expected
        if expected == 307:
            assert response.headers["location"] == "/"

    def test_home_renders_for_any_role(self, client, sign_in_as):
        sign_in_as(Role.AGENT, first_name="Ada", last_name="Okafor", default_landlord_id="dl-1")

        response = client.get("/api/dashboard/home")

        assert response.status_code == 200
        data = response.json()
        assert data["display_name"] == "Ada Okafor"
        assert data["dashboard_path"] == "/dashboard/agent"
        assert data["default_landlord_id"] == "dl-1"

    def test_loading_session(self, app):
        response = TestClient(app).get("/api/dashboard/tenant")

        assert response.status_code == 503


class TestOnboarding:
    def test_pending_users_see_onboarding(self, client, sign_in_as):
        sign_in_as(Role.PENDING)

        response = client.get("/api/dashboard/onboarding")

        assert response.status_code == 200
        assert response.json()["role"] == "pending"

    def test_onboarded_users_go_to_their_dashboard(self, client, sign_in_as):
        sign_in_as(Role.TENANT)

        response = client.get("/api/dashboard/onboarding")

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard/tenant"

    def test_anonymous_users_are_rejected(self, client):
        assert client.get("/api/dashboard/onboarding").status_code == 401


class TestDashboardCache:
    def test_dashboard_data_is_cached_per_user(self, client, cache, sign_in_as):
        user_id = sign_in_as(Role.TENANT)

        client.get("/api/dashboard/tenant")

        assert f"user:{user_id}:dashboard" in cache

    def test_role_change_invalidates_user_entries(self, client, cache, sign_in_as):
        user_id = sign_in_as(Role.PENDING)
        client.get("/api/dashboard/onboarding")
        assert f"user:{user_id}:dashboard" in cache

        client.put("/api/users/me/role", json={"role": "landlord"})

        assert f"user:{user_id}:dashboard" not in cache
        assert client.get("/api/dashboard/landlord").json()["role"] == "landlord"
