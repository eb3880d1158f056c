"""
Constants and configuration for the chat module.

This module centralizes configuration values for:
- Message content limits
- Group chat membership rules
- Relay (websocket) event types, room names and close codes

Import example:
    from chat.constants import MESSAGE_CONFIG, RelayEvent
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits
    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters

    # Characters of content included in latest_message previews
    PREVIEW_LENGTH: Final[int] = 100


# =============================================================================
# Group Configuration
# =============================================================================


class GROUP_CONFIG:
    """Configuration for group chats."""

    # Users required besides the creator when creating a group
    MIN_INVITED_USERS: Final[int] = 2

    # Participants a group may never drop below
    MIN_PARTICIPANTS: Final[int] = 2

    MAX_NAME_LENGTH: Final[int] = 100


# =============================================================================
# Relay Configuration
# =============================================================================


class RelayEvent:
    """
    Event types carried over the relay websocket.

    Client -> server:
        SETUP, JOIN_CHAT, TYPING, STOP_TYPING, NEW_MESSAGE

    Server -> client:
        CONNECTED, JOINED, TYPING, STOP_TYPING, MESSAGE_RECEIVED, REMOVED, ERROR
    """

    SETUP: Final[str] = "setup"
    JOIN_CHAT: Final[str] = "join chat"
    TYPING: Final[str] = "typing"
    STOP_TYPING: Final[str] = "stop typing"
    NEW_MESSAGE: Final[str] = "new message"

    CONNECTED: Final[str] = "connected"
    JOINED: Final[str] = "joined"
    MESSAGE_RECEIVED: Final[str] = "message received"
    REMOVED: Final[str] = "removed"
    ERROR: Final[str] = "error"


class RELAY_CONFIG:
    """Room naming and close codes for the relay."""

    CHAT_ROOM_PREFIX: Final[str] = "chat_"
    USER_ROOM_PREFIX: Final[str] = "user_"

    # Application close codes (4000-4999 are free for application use)
    CLOSE_UNAUTHENTICATED: Final[int] = 4001


def chat_room(chat_id) -> str:
    """Channel layer group name for a chat."""
    return f"{RELAY_CONFIG.CHAT_ROOM_PREFIX}{chat_id}"


def user_room(user_id) -> str:
    """Channel layer group name for a user's personal room."""
    return f"{RELAY_CONFIG.USER_ROOM_PREFIX}{user_id}"
