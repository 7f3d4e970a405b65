"""Integration tests for registration and self-service profile updates.

Run with: pytest tests/test_identity.py -v
"""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

REGISTER_URL = "/api/auth/register"
PROFILE_URL = "/api/auth/me"


def register(client: APIClient, **overrides):
    payload = {"name": "Ada Lovelace", "email": "ada@example.com", "password": "secret"}
    payload.update(overrides)
    return client.post(REGISTER_URL, payload, format="json")


@pytest.mark.django_db
class TestRegister:
    """Tests for POST /api/auth/register"""

    def test_register_participant(self, api_client):
        response = register(api_client)
        assert response.status_code == 201
        assert response.data["name"] == "Ada Lovelace"
        assert response.data["email"] == "ada@example.com"
        assert response.data["role"] == "participant"

        user = get_user_model().objects.get(pk=response.data["id"])
        assert user.username == "ada@example.com"
        assert user.check_password("secret")

    def test_register_collects_violations(self, api_client):
        response = register(api_client, name="A", email="ada@", password="123")
        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_FAILED"
        assert response.data["error"]["details"] == [
            "Name must be at least 2 characters long",
            "Please provide a valid email address",
            "Password must be at least 6 characters long",
        ]
        assert not get_user_model().objects.exists()

    def test_register_duplicate_email(self, api_client):
        register(api_client)
        response = register(api_client, email="ADA@example.com")
        assert response.status_code == 400
        assert response.data["error"]["details"] == ["User already exists"]
        assert get_user_model().objects.count() == 1

    def test_register_missing_fields(self, api_client):
        response = api_client.post(REGISTER_URL, {"name": "Ada"}, format="json")
        assert response.status_code == 400
        assert response.data["error"]["details"] == [
            "email: This field is required.",
            "password: This field is required.",
        ]


@pytest.mark.django_db
class TestProfile:
    """Tests for PUT /api/auth/me"""

    @pytest.fixture
    def account_client(self, api_client):
        user_id = register(api_client).data["id"]
        client = APIClient()
        client.force_authenticate(user=get_user_model().objects.get(pk=user_id))
        return client

    def test_update_profile(self, account_client):
        response = account_client.put(
            PROFILE_URL,
            {"name": "Ada King", "email": "ada.king@example.com", "password": "longer-secret"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["name"] == "Ada King"

        user = get_user_model().objects.get(pk=response.data["id"])
        assert user.username == "ada.king@example.com"
        assert user.check_password("longer-secret")

    def test_self_service_needs_longer_password(self, account_client):
        response = account_client.put(
            PROFILE_URL,
            {"name": "Ada King", "email": "ada@example.com", "password": "secret"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["details"] == [
            "Password must be at least 8 characters long"
        ]

    def test_cannot_take_another_accounts_email(self, api_client, account_client):
        register(api_client, name="Grace Hopper", email="grace@example.com")
        response = account_client.put(
            PROFILE_URL,
            {"name": "Ada King", "email": "grace@example.com", "password": "longer-secret"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["details"] == ["User already exists"]

    def test_anonymous_update_forbidden(self, api_client):
        response = api_client.put(
            PROFILE_URL,
            {"name": "Ada King", "email": "ada@example.com", "password": "longer-secret"},
            format="json",
        )
        assert response.status_code == 403
        assert response.data["error"]["code"] == "FORBIDDEN"
