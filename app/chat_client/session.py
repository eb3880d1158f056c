"""
Client-side chat session state.

ChatSession holds what a chat screen needs while it is open: the selected
chat, its messages, unread notifications and relay status flags. Relay
events are applied to it through handle_event().
"""

from __future__ import annotations

import logging

from chat.constants import RelayEvent

logger = logging.getLogger(__name__)


class ChatSession:
    """
    State for one signed-in user's chat screen.

    Attributes:
        user: The signed-in user's summary (id, name, email, pic)
        selected_chat: Chat currently open, or None
        messages: Messages of the selected chat, oldest first
        notifications: Messages for other chats, newest first, one per id
        socket_connected: Set once the relay acknowledged setup
        is_typing: Whether someone else is typing (last signal wins)
        fetch_again: Flipped whenever the chat list should be reloaded
        joined_chats: Chat ids the relay confirmed as joined
        last_error: Last error event received from the relay
    """

    def __init__(self, user: dict | None = None):
        self.user = user
        self.selected_chat: dict | None = None
        self.messages: list[dict] = []
        self.notifications: list[dict] = []
        self.socket_connected = False
        self.is_typing = False
        self.fetch_again = False
        self.joined_chats: set[int] = set()
        self.last_error: dict | None = None

    @property
    def selected_chat_id(self) -> int | None:
        return self.selected_chat["id"] if self.selected_chat else None

    def select_chat(self, chat: dict | None, messages: list[dict] | None = None) -> None:
        """Open a chat with its history, dropping notifications for it."""
        self.selected_chat = chat
        self.messages = list(messages or [])
        self.is_typing = False
        if chat is not None:
            self.notifications = [
                n for n in self.notifications if n["chat"]["id"] != chat["id"]
            ]

    def add_sent_message(self, message: dict) -> None:
        """Append a message this user just sent to the open chat."""
        self.messages.append(message)

    def handle_event(self, event: dict) -> None:
        """Apply one relay event to the session."""
        event_type = event.get("type")

        if event_type == RelayEvent.CONNECTED:
            self.socket_connected = True
        elif event_type == RelayEvent.JOINED:
            self.joined_chats.add(event["chat_id"])
        elif event_type == RelayEvent.TYPING:
            self.is_typing = True
        elif event_type == RelayEvent.STOP_TYPING:
            self.is_typing = False
        elif event_type == RelayEvent.MESSAGE_RECEIVED:
            self.on_message_received(event["message"])
        elif event_type == RelayEvent.REMOVED:
            # The chat list no longer holds this chat
            self.joined_chats.discard(event["chat_id"])
            self.fetch_again = not self.fetch_again
        elif event_type == RelayEvent.ERROR:
            self.last_error = event
            logger.warning(
                f"Relay error {event.get('error_code')}: {event.get('message')}"
            )
        else:
            logger.debug(f"Ignoring relay event {event_type!r}")

    def on_message_received(self, message: dict) -> None:
        """
        Route an incoming message.

        Messages for the open chat are appended to the history. Anything
        else becomes a notification (once per message id) and asks for the
        chat list to be reloaded.
        """
        if self.selected_chat_id == message["chat"]["id"]:
            self.messages.append(message)
            return

        if any(n["id"] == message["id"] for n in self.notifications):
            return

        self.notifications.insert(0, message)
        self.fetch_again = not self.fetch_again
