"""
Serializers for authentication models.

This module provides DRF serializers for:
- User summaries (embedded in chats and messages, returned by search)
- Registration and login requests
- Auth responses (user summary plus access/refresh tokens)

Related files:
    - models.py: User model
    - views.py: Views that use these serializers
    - services.py: AuthService doing the actual work

Security:
    - Password fields are write-only
"""

from rest_framework import serializers

from authentication.models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Public view of a user.

    This is the shape every other payload nests: chat participants,
    group admin, message sender and search results.
    """

    class Meta:
        model = User
        fields = ["id", "name", "email", "pic"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """
    Serializer for user registration.

    Duplicate emails are rejected by AuthService with a 409, not here.
    """

    name = serializers.CharField(max_length=150, trim_whitespace=True)
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Password must be at least 8 characters.",
    )
    pic = serializers.URLField(
        required=False,
        allow_blank=True,
        max_length=500,
        help_text="Avatar image URL",
    )

    def validate_email(self, value):
        return value.lower().strip()


class LoginSerializer(serializers.Serializer):
    """Serializer for email/password login."""

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )


class AuthResponseSerializer(UserSummarySerializer):
    """
    Response body for register and login.

    Example:
        {
            "id": 7,
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "pic": "",
            "token": "<access jwt>",
            "refresh": "<refresh jwt>"
        }
    """

    token = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)

    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + ["token", "refresh"]
        read_only_fields = fields

    def to_representation(self, instance):
        """Merge the token pair passed in context into the user payload."""
        data = super().to_representation(instance)
        data.update(self.context.get("tokens", {}))
        return data
