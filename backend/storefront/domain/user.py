"""
User Domain Models

Represents customers and administrators of the store, their saved
addresses and notification preferences.

Author: Taksha Engineering
Date: 2025-10-17
"""
import uuid
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from typing import Optional, List, Literal
from datetime import datetime

from storefront.core.exceptions import NotFoundError
from storefront.domain.constants import UserType, is_valid_phone, is_valid_pincode


class Address(BaseModel):
    """A saved shipping address"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    phone: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    country: str = "India"
    type: Literal["home", "office", "other"] = "home"
    is_default: bool = False


class NotificationPreferences(BaseModel):
    email: bool = True
    sms: bool = False
    push: bool = True


class Preferences(BaseModel):
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    language: Literal["en", "hi"] = "en"
    currency: Literal["INR", "USD"] = "INR"


class User(BaseModel):
    """
    User domain model

    Fields:
        id: Internal user ID
        name: Display name
        email: Login email (stored lowercase, unique)
        password_hash: bcrypt hash, never serialized
        user_type: individual, corporate, institution or admin
        phone: Contact phone
        profile_picture: Avatar URL
        provider: Sign-in provider (email, google)
        addresses: Saved addresses, at most one flagged default
        preferences: Notification, language and currency preferences
        is_verified / is_active: Account flags
        last_login: Last successful login
    """

    id: int
    name: str
    email: str
    password_hash: Optional[str] = Field(None, exclude=True)
    user_type: UserType = "individual"
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    provider: Literal["email", "google"] = "email"
    addresses: List[Address] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    is_verified: bool = False
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.user_type == "admin"

    @property
    def default_address(self) -> Optional[Address]:
        for address in self.addresses:
            if address.is_default:
                return address
        return None

    def _find_address(self, address_id: str) -> Address:
        for address in self.addresses:
            if address.id == address_id:
                return address
        raise NotFoundError("Address")

    def add_address(self, address: Address) -> Address:
        """Append an address; the first one (or one flagged default) becomes the default"""
        if address.is_default or not self.addresses:
            for existing in self.addresses:
                existing.is_default = False
            address.is_default = True
        self.addresses.append(address)
        return address

    def update_address(self, address_id: str, changes: dict) -> Address:
        address = self._find_address(address_id)
        make_default = changes.pop("is_default", None)
        for key, value in changes.items():
            setattr(address, key, value)
        if make_default:
            self.set_default_address(address_id)
        return address

    def remove_address(self, address_id: str) -> None:
        address = self._find_address(address_id)
        self.addresses.remove(address)
        if address.is_default and self.addresses:
            self.addresses[0].is_default = True

    def set_default_address(self, address_id: str) -> Address:
        target = self._find_address(address_id)
        for address in self.addresses:
            address.is_default = address.id == target.id
        return target

    def to_dict(self) -> dict:
        """Public representation (password hash excluded)"""
        return self.model_dump(mode="json")


class UserCreate(BaseModel):
    """Schema for registration"""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    user_type: Literal["individual", "corporate", "institution"] = "individual"
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower().strip()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value and not is_valid_phone(value):
            raise ValueError("Invalid Indian phone number")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower().strip()


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    profile_picture: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value and not is_valid_phone(value):
            raise ValueError("Invalid Indian phone number")
        return value


class PreferencesUpdate(BaseModel):
    notifications: Optional[NotificationPreferences] = None
    language: Optional[Literal["en", "hi"]] = None
    currency: Optional[Literal["INR", "USD"]] = None


class AddressCreate(BaseModel):
    name: str = Field(..., min_length=2)
    phone: str = Field(..., min_length=10)
    address_line1: str = Field(..., min_length=5)
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    country: str = "India"
    type: Literal["home", "office", "other"] = "home"
    is_default: bool = False

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, value: str) -> str:
        if not is_valid_pincode(value):
            raise ValueError("Invalid pincode")
        return value


class AddressUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: Optional[str] = None
    type: Optional[Literal["home", "office", "other"]] = None
    is_default: Optional[bool] = None

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_pincode(value):
            raise ValueError("Invalid pincode")
        return value
