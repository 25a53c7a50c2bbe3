"""
Authentication Service
Registration and login with bcrypt passwords and JWT access tokens

Author: Taksha Engineering
Date: 2025-10-17
"""
import logging
from typing import Dict, Optional

from storefront.core.exceptions import AuthenticationError, ConflictError
from storefront.core.security import create_access_token, hash_password, verify_password
from storefront.domain.user import User, UserCreate, UserLogin
from storefront.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def issue_token(user: User) -> Dict:
    return {
        "token": create_access_token(user.id, user.email, user.user_type),
        "user": user.to_dict(),
    }


class AuthService:

    def __init__(self, user_repo: Optional[UserRepository] = None):
        self.user_repo = user_repo or UserRepository()

    def register(self, data: UserCreate) -> Dict:
        """
        Create an account and sign it in

        Raises:
            ConflictError: Email already registered
        """
        if self.user_repo.find_by_email(data.email):
            raise ConflictError("User already exists with this email")

        user = self.user_repo.create(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            user_type=data.user_type,
            phone=data.phone,
        )
        logger.info(f"New {user.user_type} user registered: {user.id}")
        return issue_token(user)

    def login(self, credentials: UserLogin) -> Dict:
        """
        Raises:
            AuthenticationError: Wrong email/password or deactivated account
        """
        user = self.user_repo.find_by_email(credentials.email)
        if not user or not verify_password(credentials.password, user.password_hash):
            logger.warning(f"Failed login for {credentials.email}")
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("Account is deactivated. Please contact support.")

        self.user_repo.touch_last_login(user.id)
        return issue_token(user)
