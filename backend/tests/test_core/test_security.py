"""
Unit tests for password hashing, JWT issuing and token resolution

Author: Taksha Engineering
Date: 2025-10-17
"""
import asyncio
import pytest
from unittest.mock import patch
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from storefront.core.auth import (
    TokenUser,
    decode_access_token,
    get_current_user,
    get_current_user_optional,
    require_admin,
)
from storefront.core.security import create_access_token, hash_password, verify_password
from storefront.domain.user import User


def _bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestPasswords:

    def test_hash_and_verify(self):
        password_hash = hash_password("secret1")

        assert password_hash != "secret1"
        assert verify_password("secret1", password_hash)
        assert not verify_password("wrong", password_hash)

    def test_missing_hash_never_verifies(self):
        assert not verify_password("secret1", None)


class TestTokens:

    def test_token_round_trip(self):
        token = create_access_token(7, "asha@example.com", "individual")
        payload = decode_access_token(token)

        assert payload["userId"] == 7
        assert payload["email"] == "asha@example.com"
        assert payload["userType"] == "individual"

    def test_expired_token(self):
        token = create_access_token(7, "asha@example.com", "individual", expires_days=-1)

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired."

    def test_garbage_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token("not-a-jwt")
        assert exc_info.value.detail == "Invalid token."


class TestCurrentUser:
    """Test the authentication dependencies"""

    @patch('storefront.core.auth.UserRepository')
    def test_resolves_active_user(self, mock_repo_class):
        # Arrange
        mock_repo_class.return_value.find_by_id.return_value = User(
            id=7, name="Asha", email="asha@example.com", user_type="corporate"
        )
        token = create_access_token(7, "asha@example.com", "corporate")

        # Act
        user = asyncio.run(get_current_user(_bearer(token)))

        # Assert
        assert user == TokenUser(id=7, email="asha@example.com", name="Asha", user_type="corporate")
        mock_repo_class.return_value.find_by_id.assert_called_once_with(7)

    def test_missing_token(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(None))
        assert exc_info.value.detail == "Access denied. No token provided."

    @patch('storefront.core.auth.UserRepository')
    def test_deactivated_user(self, mock_repo_class):
        mock_repo_class.return_value.find_by_id.return_value = User(
            id=7, name="Asha", email="asha@example.com", is_active=False
        )
        token = create_access_token(7, "asha@example.com", "individual")

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(_bearer(token)))
        assert exc_info.value.detail == "Account is deactivated."

    @patch('storefront.core.auth.UserRepository')
    def test_deleted_user(self, mock_repo_class):
        mock_repo_class.return_value.find_by_id.return_value = None
        token = create_access_token(7, "asha@example.com", "individual")

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(get_current_user(_bearer(token)))
        assert exc_info.value.detail == "Token is not valid. User not found."

    def test_optional_user_ignores_bad_token(self):
        assert asyncio.run(get_current_user_optional(_bearer("not-a-jwt"))) is None
        assert asyncio.run(get_current_user_optional(None)) is None

    def test_require_admin(self, customer, admin_user):
        assert asyncio.run(require_admin(admin_user)) is admin_user

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(require_admin(customer))
        assert exc_info.value.status_code == 403
