"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures with different chat roles
- Chat fixtures (direct and group)
- Message fixtures
- API client helpers for authenticated requests

Usage:
    def test_example(group_chat, admin_client):
        response = admin_client.get(f'/api/message/{group_chat.id}')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.tests.factories import DirectChatFactory, GroupChatFactory, MessageFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def admin_user(db):
    """Create a user who will be the group admin."""
    return UserFactory(name="Ada Admin")


@pytest.fixture
def member_user(db):
    """Create a user who will be a group member."""
    return UserFactory(name="Grace Member")


@pytest.fixture
def second_member_user(db):
    """Create a second group member."""
    return UserFactory(name="Alan Member")


@pytest.fixture
def other_user(db):
    """Create another user for direct chat tests."""
    return UserFactory(name="Olive Other")


@pytest.fixture
def non_participant_user(db):
    """Create a user who is not a participant in any test chat."""
    return UserFactory(name="Nora Outsider")


# =============================================================================
# Chat Fixtures
# =============================================================================


@pytest.fixture
def group_chat(db, admin_user, member_user, second_member_user):
    """
    Group chat with admin_user as admin.

    Members in join order: admin_user, member_user, second_member_user.
    """
    return GroupChatFactory(
        name="Test Group",
        group_admin=admin_user,
        members=[member_user, second_member_user],
    )


@pytest.fixture
def direct_chat(db, admin_user, other_user):
    """Direct chat between admin_user and other_user."""
    return DirectChatFactory(user_a=admin_user, user_b=other_user)


# =============================================================================
# Message Fixtures
# =============================================================================


@pytest.fixture
def text_message(db, group_chat, admin_user):
    """A message from the admin in the group chat."""
    return MessageFactory(
        chat=group_chat,
        sender=admin_user,
        content="Hello, this is a test message.",
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client for public endpoints."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, some_user):
            client = authenticated_client_factory(some_user)
            response = client.get('/api/chat')
    """

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def admin_client(authenticated_client_factory, admin_user):
    """API client authenticated as the group admin."""
    return authenticated_client_factory(admin_user)


@pytest.fixture
def member_client(authenticated_client_factory, member_user):
    """API client authenticated as a group member."""
    return authenticated_client_factory(member_user)


@pytest.fixture
def other_client(authenticated_client_factory, other_user):
    """API client authenticated as the other user."""
    return authenticated_client_factory(other_user)


@pytest.fixture
def non_participant_client(authenticated_client_factory, non_participant_user):
    """API client authenticated as a non-participant user."""
    return authenticated_client_factory(non_participant_user)


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def admin_only_groups(settings):
    """Restrict group management to the group admin."""
    settings.CHAT_GROUP_ADMIN_ONLY = True
    return settings
