"""
API tests for registration, login and the rate limiter

Author: Taksha Engineering
Date: 2025-10-17
"""
from unittest.mock import patch

from storefront.core.exceptions import AuthenticationError


class TestAuthApi:

    @patch('storefront.api.auth.AuthService')
    def test_register(self, mock_service_class, api_client):
        client, _ = api_client
        mock_service_class.return_value.register.return_value = {"token": "jwt", "user": {"id": 7}}

        response = client.post("/api/auth/register", json={
            "name": "Asha",
            "email": "asha@example.com",
            "password": "secret123",
            "phone": "9876543210",
        })

        assert response.status_code == 201
        assert response.json()["data"]["token"] == "jwt"

    def test_register_rejects_invalid_phone(self, api_client):
        client, _ = api_client

        response = client.post("/api/auth/register", json={
            "name": "Asha",
            "email": "asha@example.com",
            "password": "secret123",
            "phone": "12345",
        })

        assert response.status_code == 422

    @patch('storefront.api.auth.AuthService')
    def test_wrong_password_is_401(self, mock_service_class, api_client):
        client, _ = api_client
        mock_service_class.return_value.login.side_effect = AuthenticationError("Invalid email or password")

        response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    @patch('storefront.api.auth.AuthService')
    def test_login_attempts_are_limited(self, mock_service_class, api_client):
        client, _ = api_client
        mock_service_class.return_value.login.side_effect = AuthenticationError("Invalid email or password")
        credentials = {"email": "asha@example.com", "password": "nope"}

        statuses = [client.post("/api/auth/login", json=credentials).status_code for _ in range(6)]

        assert statuses == [401, 401, 401, 401, 401, 429]

    def test_invalid_token(self, api_client):
        client, _ = api_client

        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token."

    def test_health_is_not_rate_limited(self, api_client):
        client, _ = api_client

        with patch('storefront.main.check_database', return_value={"status": "connected"}):
            response = client.get("/health")

        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers
