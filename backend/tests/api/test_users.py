"""Tests for user registration and profile endpoints."""

from fastapi.testclient import TestClient

from api import app
from api.dependencies import get_container
from tests.conftest import bearer, create_test_token

client = TestClient(app)


def register(headers):
    return client.post("/api/users/register", headers=headers)


class TestRegister:

    def test_register(self, auth_headers, test_user_id):
        response = register(auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["auth_user_id"] == test_user_id
        assert data["email"] == "test@example.com"

    def test_register_twice_single_profile(self, auth_headers):
        first = register(auth_headers).json()
        second = register(auth_headers).json()
        assert first["id"] == second["id"]
        assert len(get_container().gateway.select("users")) == 1

    def test_register_requires_auth(self):
        assert client.post("/api/users/register").status_code == 401


class TestProfile:

    def test_me_before_register(self, auth_headers):
        response = client.get("/api/users/me", headers=auth_headers)
        assert response.status_code == 404

    def test_me(self, auth_headers, test_user_id):
        register(auth_headers)
        response = client.get("/api/users/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["auth_user_id"] == test_user_id

    def test_update_me(self, auth_headers):
        register(auth_headers)
        response = client.patch(
            "/api/users/me",
            headers=auth_headers,
            json={"display_name": "Tester"},
        )
        assert response.status_code == 200
        assert response.json()["display_name"] == "Tester"

    def test_update_rejects_unknown_fields(self, auth_headers):
        register(auth_headers)
        response = client.patch(
            "/api/users/me",
            headers=auth_headers,
            json={"auth_user_id": "someone-else"},
        )
        assert response.status_code == 422

    def test_update_before_register(self, auth_headers):
        response = client.patch("/api/users/me", headers=auth_headers, json={"display_name": "x"})
        assert response.status_code == 404


class TestListProfiles:

    def test_regular_sees_only_own(self, auth_headers):
        other = bearer(create_test_token(user_id="other-user", email="other@example.com"))
        register(auth_headers)
        register(other)

        data = client.get("/api/users", headers=auth_headers).json()
        assert data["total"] == 1
        assert data["profiles"][0]["auth_user_id"] == "test-user-123"

    def test_admin_sees_all(self, auth_headers):
        admin = bearer(create_test_token(user_id="admin-user", app_role="admin"))
        register(auth_headers)
        register(admin)

        data = client.get("/api/users", headers=admin).json()
        assert data["total"] == 2
