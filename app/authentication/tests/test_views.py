"""
Tests for the JWT token endpoints.
"""

from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory

TOKEN_URL = "/api/v1/auth/token/"
REFRESH_URL = "/api/v1/auth/token/refresh/"


class TestTokenEndpoints:
    """
    Tests for obtaining and refreshing tokens.

    Why it matters: the access token is what authenticates both the chat
    API and the chat websocket.
    """

    def test_obtain_pair(self, user):
        response = APIClient().post(
            TOKEN_URL,
            {"email": user.email, "password": "TestPass123!"},
            format="json",
        )

        assert response.status_code == 200
        assert set(response.data) == {"access", "refresh"}

    def test_wrong_password(self, user):
        response = APIClient().post(
            TOKEN_URL, {"email": user.email, "password": "nope"}, format="json"
        )

        assert response.status_code == 401

    def test_inactive_user_gets_no_token(self, db):
        user = UserFactory(is_active=False)

        response = APIClient().post(
            TOKEN_URL, {"email": user.email, "password": "TestPass123!"}, format="json"
        )

        assert response.status_code == 401

    def test_refresh(self, user):
        client = APIClient()
        pair = client.post(
            TOKEN_URL,
            {"email": user.email, "password": "TestPass123!"},
            format="json",
        ).data

        response = client.post(REFRESH_URL, {"refresh": pair["refresh"]}, format="json")

        assert response.status_code == 200
        assert "access" in response.data

    def test_access_token_authenticates_chat_api(self, user):
        client = APIClient()
        access = client.post(
            TOKEN_URL,
            {"email": user.email, "password": "TestPass123!"},
            format="json",
        ).data["access"]

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        response = client.get("/api/v1/chat/channels/")

        assert response.status_code == 200
