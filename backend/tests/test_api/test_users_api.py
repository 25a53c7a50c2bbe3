"""
API tests for profile, address and user administration endpoints

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from unittest.mock import patch

from storefront.domain.user import Address, User


@pytest.fixture
def account():
    return User(
        id=7,
        name="Asha",
        email="asha@example.com",
        addresses=[
            Address(id="home-1", name="Asha", phone="9876543210", address_line1="12 MG Road",
                    city="Bengaluru", state="Karnataka", pincode="560001", is_default=True),
            Address(id="office-1", name="Asha", phone="9876543210", address_line1="4 Residency Road",
                    city="Bengaluru", state="Karnataka", pincode="560025", type="office"),
        ],
    )


@pytest.fixture
def mock_repo():
    with patch('storefront.api.users.UserRepository') as mock_repo_class:
        yield mock_repo_class.return_value


NEW_ADDRESS = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address_line1": "221 Park Street",
    "city": "Kolkata",
    "state": "West Bengal",
    "pincode": "700016",
}


class TestProfile:

    def test_requires_token(self, api_client):
        client, _ = api_client

        assert client.get("/api/users/profile").status_code == 401

    def test_profile_excludes_password_hash(self, api_client, customer, mock_repo, account):
        client, login_as = api_client
        login_as(customer)
        account.password_hash = "$2b$12$hash"
        mock_repo.find_by_id.return_value = account

        response = client.get("/api/users/profile")

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "asha@example.com"
        assert "password_hash" not in response.json()["data"]

    def test_invalid_phone_is_422(self, api_client, customer, mock_repo):
        client, login_as = api_client
        login_as(customer)

        response = client.put("/api/users/profile", json={"phone": "12345"})

        assert response.status_code == 422
        mock_repo.update.assert_not_called()


class TestAddresses:

    def test_first_address_becomes_default(self, api_client, customer, mock_repo):
        client, login_as = api_client
        login_as(customer)
        mock_repo.find_by_id.return_value = User(id=7, name="Asha", email="asha@example.com")

        response = client.post("/api/users/addresses", json=NEW_ADDRESS)

        assert response.status_code == 201
        assert response.json()["data"]["is_default"] is True
        mock_repo.save_profile_documents.assert_called_once()

    def test_new_default_clears_previous(self, api_client, customer, mock_repo, account):
        client, login_as = api_client
        login_as(customer)
        mock_repo.find_by_id.return_value = account

        response = client.post("/api/users/addresses", json={**NEW_ADDRESS, "is_default": True})

        defaults = [a for a in response.json()["addresses"] if a["is_default"]]
        assert len(defaults) == 1
        assert defaults[0]["city"] == "Kolkata"

    def test_invalid_pincode_is_422(self, api_client, customer, mock_repo):
        client, login_as = api_client
        login_as(customer)

        response = client.post("/api/users/addresses", json={**NEW_ADDRESS, "pincode": "7000"})

        assert response.status_code == 422

    def test_deleting_default_moves_default(self, api_client, customer, mock_repo, account):
        # Arrange
        client, login_as = api_client
        login_as(customer)
        mock_repo.find_by_id.return_value = account

        # Act
        response = client.delete("/api/users/addresses/home-1")

        # Assert
        assert response.status_code == 200
        remaining = response.json()["data"]
        assert [a["id"] for a in remaining] == ["office-1"]
        assert remaining[0]["is_default"] is True
        saved = mock_repo.save_profile_documents.call_args[0][0]
        assert saved.default_address.id == "office-1"

    def test_unknown_address_is_404(self, api_client, customer, mock_repo, account):
        client, login_as = api_client
        login_as(customer)
        mock_repo.find_by_id.return_value = account

        response = client.delete("/api/users/addresses/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Address not found"
        mock_repo.save_profile_documents.assert_not_called()

    def test_set_default(self, api_client, customer, mock_repo, account):
        client, login_as = api_client
        login_as(customer)
        mock_repo.find_by_id.return_value = account

        response = client.put("/api/users/addresses/office-1/default")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == "office-1"
        assert [a.is_default for a in account.addresses] == [False, True]


class TestUserAdministration:

    def test_customer_is_forbidden(self, api_client, customer, mock_repo):
        client, login_as = api_client
        login_as(customer)

        assert client.get("/api/users/admin/all").status_code == 403

    def test_admin_cannot_deactivate_self(self, api_client, admin_user, mock_repo):
        client, login_as = api_client
        login_as(admin_user)

        response = client.put("/api/users/admin/1/status", json={"is_active": False})

        assert response.status_code == 400
        assert response.json()["detail"] == "You cannot deactivate your own account"
        mock_repo.update.assert_not_called()

    def test_admin_deactivates_other_user(self, api_client, admin_user, mock_repo, account):
        client, login_as = api_client
        login_as(admin_user)
        account.is_active = False
        mock_repo.update.return_value = account

        response = client.put("/api/users/admin/7/status", json={"is_active": False})

        assert response.status_code == 200
        assert response.json()["message"] == "User deactivated successfully"
        mock_repo.update.assert_called_once_with(7, {"is_active": False})

    def test_user_detail_includes_order_stats(self, api_client, admin_user, mock_repo, account):
        client, login_as = api_client
        login_as(admin_user)
        mock_repo.find_by_id.return_value = account
        mock_repo.get_order_stats.return_value = {"order_count": 3, "total_spent": 2832.0}

        response = client.get("/api/users/admin/7")

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["order_count"] == 3
        assert data["total_spent"] == 2832.0
        mock_repo.get_order_stats.assert_called_once_with(7)

    def test_missing_user_is_404(self, api_client, admin_user, mock_repo):
        client, login_as = api_client
        login_as(admin_user)
        mock_repo.find_by_id.return_value = None

        response = client.get("/api/users/admin/99")

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_list_users_pagination(self, api_client, admin_user, mock_repo, account):
        client, login_as = api_client
        login_as(admin_user)
        mock_repo.find_all.return_value = ([account], 41)

        response = client.get("/api/users/admin/all?page=3&limit=20&search=asha")

        assert response.status_code == 200
        assert response.json()["pagination"]["total_users"] == 41
        mock_repo.find_all.assert_called_once_with(
            search="asha", user_type=None, is_active=None, limit=20, offset=40
        )

    def test_unknown_user_type_is_422(self, api_client, admin_user, mock_repo):
        client, login_as = api_client
        login_as(admin_user)

        response = client.put("/api/users/admin/7/type", json={"user_type": "superuser"})

        assert response.status_code == 422
