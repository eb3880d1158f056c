"""
Factory Boy factories for authentication models.

Provides realistic test data generation for:
- User: Custom user model with email-based authentication

Usage:
    from authentication.tests.factories import UserFactory

    # Create a user with default values
    user = UserFactory()

    # Create a user with a specific name
    user = UserFactory(name="Ada Lovelace")

    # Inactive user (deactivated)
    user = UserFactory(is_active=False)
"""

import factory

from authentication.models import User


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active users through UserManager.create_user() so passwords
    are hashed and emails normalized. Every user's password is
    "TestPass123!" unless overridden.

    Examples:
        # Basic user
        user = UserFactory()

        # User with avatar
        user = UserFactory(pic="https://cdn.example.com/ada.png")

        # Staff user
        user = UserFactory(is_staff=True)
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    name = factory.Sequence(lambda n: f"User {n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    pic = ""
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )
