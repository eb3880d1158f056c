"""
Authentication application.

This app provides the chat user model, registration, login, user search
and JWT issuance.

Key components:
    - User model: Custom email-based user with name and avatar URL
    - AuthService: Registration, credential checks, token issuance, search

Usage:
    from authentication.models import User
    from authentication.services import AuthService
"""
