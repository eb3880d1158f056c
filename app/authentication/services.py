"""
Authentication services.

This module provides the AuthService class for registration, credential
checks, token issuance and user search.

Related files:
    - models.py: User
    - views.py: HTTP endpoints that call into this service

Security:
    - Passwords hashed with Django's password hashers
    - Tokens issued by djangorestframework-simplejwt
    - Wrong email and wrong password produce the same error
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth import authenticate
from django.db import IntegrityError
from django.db.models import Q
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import User
from core.exceptions import AuthenticationError, ConflictError
from core.services import BaseService

if TYPE_CHECKING:
    from django.db.models import QuerySet


class AuthService(BaseService):
    """
    Centralized authentication business logic.

    Usage:
        from authentication.services import AuthService

        user = AuthService.register("Ada", "ada@example.com", "s3cret-pass")
        tokens = AuthService.issue_tokens(user)

        user = AuthService.login("ada@example.com", "s3cret-pass")
        matches = AuthService.search_users("ada", exclude=request.user)
    """

    @classmethod
    def register(
        cls,
        name: str,
        email: str,
        password: str,
        pic: str = "",
    ) -> User:
        """
        Create a new user.

        Raises:
            ConflictError: If a user with this email already exists
        """
        email = User.objects.normalize_email(email)
        if User.objects.filter(email=email).exists():
            raise ConflictError("User already exists", error_code="EMAIL_EXISTS")

        try:
            with cls.atomic():
                user = User.objects.create_user(
                    email=email,
                    password=password,
                    name=name.strip(),
                    pic=pic or "",
                )
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError("User already exists", error_code="EMAIL_EXISTS")

        cls.get_logger().info(f"Registered user {user.id}")
        return user

    @classmethod
    def login(cls, email: str, password: str) -> User:
        """
        Check credentials and return the matching active user.

        Raises:
            AuthenticationError: If the email/password pair is invalid
        """
        user = authenticate(email=User.objects.normalize_email(email), password=password)
        if user is None:
            cls.get_logger().info("Rejected login with invalid credentials")
            raise AuthenticationError("Invalid email or password")

        cls.get_logger().debug(f"User {user.id} logged in")
        return user

    @staticmethod
    def issue_tokens(user: User) -> dict[str, str]:
        """Return a fresh access/refresh token pair for the user."""
        refresh = RefreshToken.for_user(user)
        return {
            "token": str(refresh.access_token),
            "refresh": str(refresh),
        }

    @staticmethod
    def search_users(query: str | None, exclude: User | None = None) -> QuerySet[User]:
        """
        Users whose name or email contains the query, case-insensitively.

        An empty query matches every user. The caller is always excluded.
        """
        users = User.objects.filter(is_active=True)
        if query:
            users = users.filter(Q(name__icontains=query) | Q(email__icontains=query))
        if exclude is not None:
            users = users.exclude(pk=exclude.pk)
        return users.order_by("name", "id")
