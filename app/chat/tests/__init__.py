"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Chat, ChatMember, DirectChatPair, Message model tests
- test_serializers.py: Serializer validation and preview tests
- test_services.py: ChatService tests
- test_consumers.py: WebSocket consumer tests
- test_views.py: REST API endpoint tests

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
