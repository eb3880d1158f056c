"""
Test configuration and fixtures for authentication tests.

This module provides:
- Reusable user fixtures
- API client helpers for authenticated requests
- Test data fixtures for registration and login

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get('/api/user?search=ada')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import User
from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic active user."""
    return UserFactory(name="Test User", email="test@example.com")


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(
        email="admin@example.com", password="AdminPass123!", name="Admin"
    )


@pytest.fixture
def deactivated_user(db):
    """Create a deactivated user (is_active=False)."""
    return UserFactory(is_active=False)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client for public endpoints."""
    return APIClient()


@pytest.fixture
def authenticated_client(user):
    """API client authenticated with a JWT for the `user` fixture."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def valid_registration_data():
    """Valid payload for POST /api/user."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "SecurePass123!",
        "pic": "https://cdn.example.com/ada.png",
    }


@pytest.fixture
def valid_login_data(user):
    """Valid credentials for the `user` fixture."""
    return {
        "email": user.email,
        "password": "TestPass123!",
    }
