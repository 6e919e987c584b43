"""
Tests for likes API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import get_container
from tests.conftest import bearer, create_test_token


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def course_ids():
    gateway = get_container().gateway
    return [
        gateway.insert("courses", {"title": title, "active": True, "premium": False})["id"]
        for title in ("X", "Y")
    ]


@pytest.fixture
def user_a(client):
    headers = bearer(create_test_token(user_id="user-a", email="a@example.com"))
    profile = client.post("/api/users/register", headers=headers).json()
    return headers, profile


@pytest.fixture
def user_b(client):
    headers = bearer(create_test_token(user_id="user-b", email="b@example.com"))
    profile = client.post("/api/users/register", headers=headers).json()
    return headers, profile


def liked(client, headers, **params) -> set[str]:
    data = client.get("/api/likes", headers=headers, params=params).json()
    return {like["course_id"] for like in data["likes"]}


class TestLikes:

    def test_scenario(self, client, course_ids, user_a, user_b):
        """A likes X and Y, B likes X; each sees only their own."""
        x, y = course_ids
        (a, _), (b, b_profile) = user_a, user_b
        for headers, course_id in ((a, x), (a, y), (b, x)):
            response = client.post("/api/likes", headers=headers, json={"course_id": course_id})
            assert response.status_code == 201

        assert liked(client, a) == {x, y}
        assert liked(client, b) == {x}
        assert liked(client, a, user_id=b_profile["id"]) == set()

    def test_like_twice(self, client, course_ids, user_a):
        headers, _ = user_a
        first = client.post("/api/likes", headers=headers, json={"course_id": course_ids[0]})
        second = client.post("/api/likes", headers=headers, json={"course_id": course_ids[0]})
        assert first.json()["id"] == second.json()["id"]

    def test_like_unregistered(self, client, course_ids, auth_headers):
        response = client.post("/api/likes", headers=auth_headers, json={"course_id": course_ids[0]})
        assert response.status_code == 409

    def test_like_missing_course(self, client, user_a):
        headers, _ = user_a
        response = client.post("/api/likes", headers=headers, json={"course_id": "missing"})
        assert response.status_code == 404

    def test_unlike(self, client, course_ids, user_a):
        headers, _ = user_a
        client.post("/api/likes", headers=headers, json={"course_id": course_ids[0]})
        response = client.delete(f"/api/likes/{course_ids[0]}", headers=headers)
        assert response.status_code == 204
        assert liked(client, headers) == set()

    def test_unlike_other_users_like(self, client, course_ids, user_a, user_b):
        (a, _), (b, _) = user_a, user_b
        client.post("/api/likes", headers=b, json={"course_id": course_ids[0]})
        response = client.delete(f"/api/likes/{course_ids[0]}", headers=a)
        assert response.status_code == 404
        assert liked(client, b) == {course_ids[0]}

    def test_requires_auth(self, client):
        assert client.get("/api/likes").status_code == 401
