"""
Tests for the User model and UserManager.

Test Organization:
    - TestUserModel: fields, defaults and string helpers
    - TestUserManager: create_user / create_superuser and email normalization

Testing Philosophy:
    Tests focus on observable behavior: stored values, constraints and
    what the manager refuses to create.
"""

import pytest
from django.db import IntegrityError

from authentication.models import User
from authentication.tests.factories import UserFactory


# =============================================================================
# User Model Tests
# =============================================================================


class TestUserModel:
    """
    Tests for the User model.

    Verifies:
    - Defaults for pic and status flags
    - Email uniqueness
    - String representation and name helpers
    """

    def test_pic_defaults_to_empty_string(self, db):
        """
        A user created without a pic has an empty avatar URL.

        Why it matters: Clients render a placeholder for empty pics.
        """
        user = UserFactory()

        assert user.pic == ""

    def test_new_user_is_active_and_not_staff(self, db):
        """
        New users are active and cannot use the admin site.

        Why it matters: Registration must not grant admin access.
        """
        user = UserFactory()

        assert user.is_active is True
        assert user.is_staff is False
        assert user.is_superuser is False

    def test_duplicate_email_raises_integrity_error(self, db):
        """
        Two users cannot share an email.

        Why it matters: Email is the login identifier.
        """
        UserFactory(email="dup@example.com")

        with pytest.raises(IntegrityError):
            UserFactory(email="dup@example.com")

    def test_str_returns_email(self, db):
        """String form is the email address."""
        user = UserFactory(email="grace@example.com")

        assert str(user) == "grace@example.com"

    def test_get_full_name_returns_name(self, db):
        user = UserFactory(name="Grace Hopper")

        assert user.get_full_name() == "Grace Hopper"

    def test_get_short_name_returns_first_word(self, db):
        user = UserFactory(name="Grace Hopper")

        assert user.get_short_name() == "Grace"

    def test_password_is_hashed(self, db):
        """
        The raw password is never stored.

        Why it matters: Leaked databases must not leak passwords.
        """
        user = UserFactory(password="PlainText123!")

        assert user.password != "PlainText123!"
        assert user.check_password("PlainText123!")


# =============================================================================
# User Manager Tests
# =============================================================================


class TestUserManager:
    """
    Tests for UserManager.

    Verifies:
    - Emails are lowercased in full
    - Lookups by natural key ignore case
    - Superuser flags are enforced
    """

    def test_create_user_lowercases_whole_email(self, db):
        """
        Local part and domain are both lowercased.

        Why it matters: "Ada@Example.com" and "ada@example.com" are the same account.
        """
        user = User.objects.create_user(
            email="Ada.Lovelace@Example.COM", password="Pass12345!", name="Ada"
        )

        assert user.email == "ada.lovelace@example.com"

    def test_create_user_without_email_raises(self, db):
        with pytest.raises(ValueError):
            User.objects.create_user(email="", password="Pass12345!", name="Nobody")

    def test_create_user_without_password_sets_unusable_password(self, db):
        user = User.objects.create_user(email="nopass@example.com", name="No Pass")

        assert user.has_usable_password() is False

    def test_get_by_natural_key_ignores_case(self, db):
        """
        Natural key lookup normalizes the email first.

        Why it matters: Login with a differently-cased email must succeed.
        """
        user = UserFactory(email="case@example.com")

        assert User.objects.get_by_natural_key("CASE@Example.com") == user

    def test_create_superuser_sets_flags(self, superuser):
        assert superuser.is_staff is True
        assert superuser.is_superuser is True

    def test_create_superuser_rejects_is_staff_false(self, db):
        with pytest.raises(ValueError):
            User.objects.create_superuser(
                email="bad@example.com",
                password="Pass12345!",
                name="Bad",
                is_staff=False,
            )
