"""
WebSocket consumers for the chat application.

This module implements the real-time relay: a single websocket endpoint over
which a client announces itself, joins chat rooms, and exchanges typing
signals and new-message notifications with the other connections in those
rooms.

Consumers:
    RelayConsumer: Handles relay connections

Authentication:
    Users are authenticated via JWT token passed as query parameter or
    subprotocol. JWTAuthMiddleware attaches the user to self.scope["user"].

Channel Groups:
    Each chat has a channel group named "chat_{chat_id}".
    Each user has a personal channel group named "user_{user_id}".

Message Types (from client):
    - setup: Join the personal room
    - join chat: Join a chat room (participants only)
    - typing / stop typing: Broadcast a typing signal to the room
    - new message: Broadcast a stored message to the room

Message Types (to client):
    - connected: Reply to setup
    - joined: Reply to a successful join chat
    - typing / stop typing: Someone else in the room started/stopped typing
    - message received: A new message in a joined room
    - removed: This user was removed from a joined chat; the room was left
    - error: The last event was rejected

Delivery is best-effort: connections not in the room when an event is
broadcast never see it.
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from chat.authorization import ChatAuthorizationService
from chat.constants import RELAY_CONFIG, RelayEvent, chat_room, user_room
from chat.models import Chat
from chat.serializers import MessageSerializer
from chat.services import MessageService

logger = logging.getLogger(__name__)


class RelayConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for the real-time relay.

    Handles:
        - Connection authentication
        - Personal and per-chat room membership
        - Typing / stop-typing fan-out
        - New-message fan-out

    Attributes:
        user: Authenticated user (after connect)
        joined_chats: Ids of the chat rooms this connection has joined
        personal_room: Name of the user's personal group once setup ran
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = None
        self.joined_chats: set[int] = set()
        self.personal_room: str | None = None

    async def connect(self):
        """
        Handle WebSocket connection.

        Unauthenticated connections are closed with 4001. When the token
        came in the "jwt, <token>" subprotocol pair, "jwt" is echoed back
        as the accepted subprotocol.
        """
        user = self.scope.get("user")

        if user is None or not user.is_authenticated:
            logger.warning("Rejected unauthenticated relay connection")
            await self.close(code=RELAY_CONFIG.CLOSE_UNAUTHENTICATED)
            return

        self.user = user
        subprotocols = self.scope.get("subprotocols") or []
        if subprotocols and subprotocols[0] == "jwt":
            await self.accept(subprotocol="jwt")
        else:
            await self.accept()

        logger.info(f"User {user.id} connected to relay")

    async def disconnect(self, close_code):
        """
        Handle WebSocket disconnection.

        Leaves the personal room and every chat room this connection joined.
        """
        if self.personal_room:
            await self.channel_layer.group_discard(self.personal_room, self.channel_name)

        for chat_id in self.joined_chats:
            await self.channel_layer.group_discard(chat_room(chat_id), self.channel_name)

        if self.user is not None:
            logger.info(
                f"User {self.user.id} disconnected from relay "
                f"(code={close_code}, rooms={len(self.joined_chats)})"
            )
        self.joined_chats = set()
        self.personal_room = None

    async def receive_json(self, content, **kwargs):
        """
        Dispatch an incoming relay event.

        Expected event format:
            {"type": "setup"}
            {"type": "join chat", "chat_id": 12}
            {"type": "typing", "chat_id": 12}
            {"type": "stop typing", "chat_id": 12}
            {"type": "new message", "message": {"id": 40, ...}}
        """
        event_type = content.get("type") if isinstance(content, dict) else None

        handlers = {
            RelayEvent.SETUP: self._handle_setup,
            RelayEvent.JOIN_CHAT: self._handle_join_chat,
            RelayEvent.TYPING: self._handle_typing,
            RelayEvent.STOP_TYPING: self._handle_typing,
            RelayEvent.NEW_MESSAGE: self._handle_new_message,
        }
        handler = handlers.get(event_type)
        if handler is None:
            await self._send_error(
                f"Unknown event type: {event_type}",
                "UNKNOWN_EVENT",
            )
            return

        await handler(content)

    # =========================================================================
    # Client event handlers
    # =========================================================================

    async def _handle_setup(self, content):
        self.personal_room = user_room(self.user.id)
        await self.channel_layer.group_add(self.personal_room, self.channel_name)
        await self.send_json({"type": RelayEvent.CONNECTED})

    async def _handle_join_chat(self, content):
        chat_id = self._parse_id(content.get("chat_id"))
        if chat_id is None:
            await self._send_error("chat_id is required", "INVALID_EVENT")
            return

        membership = await self._get_membership(chat_id)
        if membership == "missing":
            await self._send_error("Chat not found", "CHAT_NOT_FOUND")
            return
        if membership == "outsider":
            logger.warning(
                f"User {self.user.id} tried to join chat {chat_id} without being a participant"
            )
            await self._send_error(
                "You are not a participant in this chat",
                "NOT_PARTICIPANT",
            )
            return

        await self.channel_layer.group_add(chat_room(chat_id), self.channel_name)
        self.joined_chats.add(chat_id)
        logger.debug(f"User {self.user.id} joined chat room {chat_id}")
        await self.send_json({"type": RelayEvent.JOINED, "chat_id": chat_id})

    async def _handle_typing(self, content):
        chat_id = self._parse_id(content.get("chat_id"))
        if chat_id is None:
            await self._send_error("chat_id is required", "INVALID_EVENT")
            return
        if chat_id not in self.joined_chats:
            await self._send_error("Join the chat before sending to it", "NOT_JOINED")
            return

        await self.channel_layer.group_send(
            chat_room(chat_id),
            {
                "type": "relay.typing",
                "event": content["type"],
                "chat_id": chat_id,
                "user_id": self.user.id,
                "sender_channel": self.channel_name,
            },
        )

    async def _handle_new_message(self, content):
        message = content.get("message")
        message_id = message.get("id") if isinstance(message, dict) else None
        if message_id is None:
            await self._send_error("message.id is required", "INVALID_EVENT")
            return

        payload = await self._load_message(message_id)
        if payload is None:
            await self._send_error("Message not found", "MESSAGE_NOT_FOUND")
            return

        chat_id = payload["chat"]["id"]
        if chat_id not in self.joined_chats:
            await self._send_error("Join the chat before sending to it", "NOT_JOINED")
            return
        if payload["sender"]["id"] != self.user.id:
            await self._send_error(
                "Only the sender can announce a message",
                "NOT_SENDER",
            )
            return

        await self.channel_layer.group_send(
            chat_room(chat_id),
            {
                "type": "relay.message",
                "message": payload,
                "sender_channel": self.channel_name,
            },
        )

    # =========================================================================
    # Channel layer handlers
    # =========================================================================

    async def relay_typing(self, event):
        """
        Handle relay.typing events from channel layer.

        Forwards typing / stop typing to every connection except the sender.
        """
        if event["sender_channel"] == self.channel_name:
            return

        await self.send_json(
            {
                "type": event["event"],
                "chat_id": event["chat_id"],
                "user_id": event["user_id"],
            }
        )

    async def relay_message(self, event):
        """
        Handle relay.message events from channel layer.

        Forwards the populated message to every connection except the sender.
        """
        if event["sender_channel"] == self.channel_name:
            return

        await self.send_json(
            {
                "type": RelayEvent.MESSAGE_RECEIVED,
                "message": event["message"],
            }
        )

    async def relay_member_removed(self, event):
        """
        Handle relay.member_removed events from channel layer.

        Connections of the removed user leave the room and are told so;
        everyone else ignores the event.
        """
        if self.user is None or event["user_id"] != self.user.id:
            return

        chat_id = event["chat_id"]
        await self.channel_layer.group_discard(chat_room(chat_id), self.channel_name)
        self.joined_chats.discard(chat_id)
        logger.info(f"User {self.user.id} left chat room {chat_id} after removal")
        await self.send_json({"type": RelayEvent.REMOVED, "chat_id": chat_id})

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _send_error(self, message: str, error_code: str):
        await self.send_json(
            {
                "type": RelayEvent.ERROR,
                "message": message,
                "error_code": error_code,
            }
        )

    @staticmethod
    def _parse_id(value) -> int | None:
        if isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @database_sync_to_async
    def _get_membership(self, chat_id: int) -> str:
        """Return "member", "outsider" or "missing" for the current user."""
        if not Chat.objects.filter(pk=chat_id).exists():
            return "missing"
        if ChatAuthorizationService.is_chat_participant(self.user, chat_id):
            return "member"
        return "outsider"

    @database_sync_to_async
    def _load_message(self, message_id) -> dict | None:
        """Populated message payload, or None if it does not exist."""
        if self._parse_id(message_id) is None:
            return None
        message = MessageService.get_for_relay(message_id)
        if message is None:
            return None
        return MessageSerializer(message).data
