"""
Unit tests for the User domain model (addresses and schemas)

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from pydantic import ValidationError as SchemaError

from storefront.core.exceptions import NotFoundError
from storefront.domain.user import Address, AddressCreate, User, UserCreate


def _address(name="Home", **extra):
    return Address(
        name=name,
        phone="9876543210",
        address_line1="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
        **extra
    )


@pytest.fixture
def user():
    return User(id=7, name="Asha", email="asha@example.com", password_hash="hash")


class TestAddresses:
    """Test the single-default address rule"""

    def test_first_address_becomes_default(self, user):
        address = user.add_address(_address())
        assert address.is_default
        assert user.default_address is address

    def test_new_default_clears_previous(self, user):
        first = user.add_address(_address())
        second = user.add_address(_address("Office", is_default=True))

        assert not first.is_default
        assert second.is_default

    def test_second_address_is_not_default(self, user):
        user.add_address(_address())
        second = user.add_address(_address("Office"))
        assert not second.is_default

    def test_removing_default_promotes_next(self, user):
        first = user.add_address(_address())
        second = user.add_address(_address("Office"))

        user.remove_address(first.id)

        assert user.addresses == [second]
        assert second.is_default

    def test_set_default(self, user):
        first = user.add_address(_address())
        second = user.add_address(_address("Office"))

        user.set_default_address(second.id)

        assert second.is_default
        assert not first.is_default

    def test_update_with_default_flag(self, user):
        user.add_address(_address())
        second = user.add_address(_address("Office"))

        user.update_address(second.id, {"city": "Mysuru", "is_default": True})

        assert second.city == "Mysuru"
        assert user.default_address is second

    def test_unknown_address(self, user):
        with pytest.raises(NotFoundError) as exc_info:
            user.remove_address("missing")
        assert exc_info.value.message == "Address not found"


class TestUserSchemas:

    def test_password_hash_not_serialized(self, user):
        assert "password_hash" not in user.to_dict()

    def test_email_lowercased(self):
        data = UserCreate(name="Asha", email="Asha@Example.COM", password="secret1")
        assert data.email == "asha@example.com"

    def test_short_password_rejected(self):
        with pytest.raises(SchemaError):
            UserCreate(name="Asha", email="asha@example.com", password="123")

    def test_registration_cannot_pick_admin(self):
        with pytest.raises(SchemaError):
            UserCreate(name="Asha", email="asha@example.com", password="secret1", user_type="admin")

    def test_address_pincode_validated(self):
        with pytest.raises(SchemaError):
            AddressCreate(
                name="Asha", phone="9876543210", address_line1="12 MG Road",
                city="Bengaluru", state="Karnataka", pincode="060001",
            )
