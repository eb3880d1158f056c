"""
Authentication models.

This module defines the chat user:
- User: Custom user model with email-based authentication, a display name
  and an optional avatar URL

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: AuthService registration, login and search

Security:
    - Passwords hashed with Django's password hashers (never stored raw)
    - Emails stored lowercased so uniqueness is case-insensitive
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        name: Display name shown in chat lists and message bubbles
        email: Primary identifier, unique, used for login
        pic: Avatar image URL (empty when the user has none)
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email='ada@example.com',
            password='securepassword',
            name='Ada Lovelace',
        )
    """

    name = models.CharField(
        max_length=150,
        help_text="User's display name",
    )

    # Primary identifier (replaces username)
    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier, lowercased)",
    )

    pic = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Avatar image URL",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    # Configure email as the username field
    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"

    # Prompted for by createsuperuser in addition to email and password
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        """Return the user's email as string representation."""
        return self.email

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(" ")[0] if self.name else self.email.split("@")[0]
