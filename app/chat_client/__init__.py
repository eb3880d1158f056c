"""
Python client for the chat backend.

This package is the counterpart of the chat app for programs that talk to
the backend over the network:
- ChatAPI: synchronous REST client (httpx)
- RelayConnection: asyncio websocket client for the relay (websockets)
- ChatSession: per-session state updated by relay events
- TypingDebouncer: typing / stop typing emission with an inactivity timeout

Usage:
    api = ChatAPI("http://localhost:8000")
    me = api.login("ada@example.com", "s3cret-pass")

    session = ChatSession(user=me)
    async with RelayConnection("ws://localhost:8000", api.token, session) as relay:
        chat = api.access_chat(other_user_id)
        session.select_chat(chat, api.fetch_messages(chat["id"]))
        await relay.join_chat(chat["id"])
"""

from chat_client.api import ChatAPI, ChatAPIError
from chat_client.debounce import TYPING_TIMEOUT, TypingDebouncer
from chat_client.relay import RelayConnection
from chat_client.session import ChatSession

__all__ = [
    "ChatAPI",
    "ChatAPIError",
    "ChatSession",
    "RelayConnection",
    "TYPING_TIMEOUT",
    "TypingDebouncer",
]
