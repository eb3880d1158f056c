"""
Relay websocket client.

RelayConnection connects to ws/relay/ with the REST access token, sends
relay events and feeds every event it receives into a ChatSession.

Related files:
    - chat/consumers.py: the server side of this connection
    - session.py: state updated by received events
"""

from __future__ import annotations

import asyncio
import json
import logging
from urllib.parse import urlencode

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from chat.constants import RelayEvent
from chat_client.debounce import TYPING_TIMEOUT, TypingDebouncer
from chat_client.session import ChatSession

logger = logging.getLogger(__name__)

RELAY_PATH = "/ws/relay/"


class RelayConnection:
    """
    One websocket connection to the relay.

    Args:
        base_url: Websocket origin, e.g. "ws://localhost:8000"
        token: JWT access token
        session: Session that receives every relay event
        connector: Coroutine function opening the socket (defaults to
            websockets' connect; tests pass a fake)

    Usage:
        async with RelayConnection("ws://localhost:8000", token, session) as relay:
            await relay.join_chat(12)
            typing = relay.typing_debouncer(12)
            typing.on_keystroke()
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        session: ChatSession,
        connector=connect,
    ):
        self.url = f"{base_url.rstrip('/')}{RELAY_PATH}?{urlencode({'token': token})}"
        self.session = session
        self._connector = connector
        self._websocket = None
        self._reader: asyncio.Task | None = None

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def open(self) -> None:
        """Connect, start dispatching received events, and send setup."""
        self._websocket = await self._connector(self.url)
        self._reader = asyncio.create_task(self._read_events())
        await self.setup()

    async def close(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        if self._websocket is not None:
            await self._websocket.close()
            self._websocket = None
        self.session.socket_connected = False

    # =========================================================================
    # Outgoing events
    # =========================================================================

    async def send(self, event: dict) -> None:
        if self._websocket is None:
            raise RuntimeError("Relay connection is not open")
        await self._websocket.send(json.dumps(event))

    async def setup(self) -> None:
        await self.send({"type": RelayEvent.SETUP})

    async def join_chat(self, chat_id: int) -> None:
        await self.send({"type": RelayEvent.JOIN_CHAT, "chat_id": chat_id})

    async def typing(self, chat_id: int) -> None:
        await self.send({"type": RelayEvent.TYPING, "chat_id": chat_id})

    async def stop_typing(self, chat_id: int) -> None:
        await self.send({"type": RelayEvent.STOP_TYPING, "chat_id": chat_id})

    async def new_message(self, message: dict) -> None:
        """Announce a message already stored through the REST API."""
        await self.send({"type": RelayEvent.NEW_MESSAGE, "message": message})

    def typing_debouncer(self, chat_id: int, timeout: float = TYPING_TIMEOUT) -> TypingDebouncer:
        """
        Debouncer emitting typing / stop typing for one chat.

        Keystrokes are ignored until the relay has acknowledged setup.
        """
        return TypingDebouncer(
            lambda event_type: self.send({"type": event_type, "chat_id": chat_id}),
            timeout=timeout,
            enabled=lambda: self.session.socket_connected,
        )

    # =========================================================================
    # Incoming events
    # =========================================================================

    async def _read_events(self) -> None:
        try:
            async for raw in self._websocket:
                try:
                    event = json.loads(raw)
                except ValueError:
                    logger.warning(f"Dropping malformed relay frame: {raw!r}")
                    continue
                self.session.handle_event(event)
        except ConnectionClosed as e:
            logger.info(f"Relay connection closed: {e}")
        finally:
            self.session.socket_connected = False
