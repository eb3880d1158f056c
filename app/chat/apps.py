"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) and group chats
- A single admin per group
- The websocket relay for typing signals and new-message fan-out
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
