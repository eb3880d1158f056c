"""
Tests for RelayConnection.

A fake websocket stands in for the server: frames the test pushes into it
are read by the connection, and everything the connection sends is
recorded.
"""

import asyncio
import json

import pytest

from chat_client.relay import RelayConnection
from chat_client.session import ChatSession


class FakeWebSocket:
    """Minimal async websocket: an inbox queue and a sent-frames list."""

    def __init__(self):
        self.sent = []
        self.inbox = asyncio.Queue()
        self.closed = False

    async def send(self, data):
        self.sent.append(json.loads(data))

    async def close(self):
        self.closed = True
        await self.inbox.put(None)

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self.inbox.get()
        if frame is None:
            raise StopAsyncIteration
        return frame

    async def push(self, event):
        await self.inbox.put(json.dumps(event))
        # Let the reader task pick the frame up
        for _ in range(3):
            await asyncio.sleep(0)


@pytest.fixture
def fake_socket():
    return FakeWebSocket()


@pytest.fixture
def connector(fake_socket):
    urls = []

    async def _connect(url):
        urls.append(url)
        return fake_socket

    _connect.urls = urls
    return _connect


@pytest.mark.asyncio
class TestRelayConnection:
    """
    Tests for RelayConnection.

    Verifies:
    - Connecting passes the token and sends setup
    - Outgoing events have the wire shape the server expects
    - Received events update the session
    - The typing debouncer waits for the setup acknowledgment
    """

    async def test_open_sends_setup_with_token(self, connector, fake_socket):
        session = ChatSession()

        async with RelayConnection("ws://chat.test/", "abc.def", session, connector=connector):
            pass

        assert connector.urls == ["ws://chat.test/ws/relay/?token=abc.def"]
        assert fake_socket.sent[0] == {"type": "setup"}
        assert fake_socket.closed is True

    async def test_outgoing_events(self, connector, fake_socket):
        session = ChatSession()

        async with RelayConnection("ws://chat.test", "t", session, connector=connector) as relay:
            await relay.join_chat(3)
            await relay.typing(3)
            await relay.stop_typing(3)
            await relay.new_message({"id": 40, "chat": {"id": 3}})

        assert fake_socket.sent[1:] == [
            {"type": "join chat", "chat_id": 3},
            {"type": "typing", "chat_id": 3},
            {"type": "stop typing", "chat_id": 3},
            {"type": "new message", "message": {"id": 40, "chat": {"id": 3}}},
        ]

    async def test_received_events_reach_session(self, connector, fake_socket):
        """
        Frames from the server are applied to the session in order.

        Why it matters: The chat screen renders from session state only.
        """
        session = ChatSession()
        session.select_chat({"id": 3})

        async with RelayConnection("ws://chat.test", "t", session, connector=connector):
            await fake_socket.push({"type": "connected"})
            await fake_socket.push({"type": "typing", "chat_id": 3, "user_id": 2})
            await fake_socket.push(
                {
                    "type": "message received",
                    "message": {"id": 41, "chat": {"id": 3}, "content": "yo"},
                }
            )

            assert session.socket_connected is True
            assert session.is_typing is True
            assert [m["id"] for m in session.messages] == [41]

        assert session.socket_connected is False

    async def test_malformed_frame_is_skipped(self, connector, fake_socket):
        session = ChatSession()

        async with RelayConnection("ws://chat.test", "t", session, connector=connector):
            await fake_socket.inbox.put("not json")
            await fake_socket.push({"type": "connected"})

            assert session.socket_connected is True

    async def test_debouncer_waits_for_connected(self, connector, fake_socket):
        session = ChatSession()

        async with RelayConnection("ws://chat.test", "t", session, connector=connector) as relay:
            debouncer = relay.typing_debouncer(3, timeout=0.05)

            debouncer.on_keystroke()
            await debouncer.wait_sent()
            assert fake_socket.sent == [{"type": "setup"}]

            await fake_socket.push({"type": "connected"})
            debouncer.on_keystroke()
            debouncer.flush()
            await debouncer.wait_sent()

        assert fake_socket.sent[1:] == [
            {"type": "typing", "chat_id": 3},
            {"type": "stop typing", "chat_id": 3},
        ]

    async def test_send_before_open_raises(self):
        relay = RelayConnection("ws://chat.test", "t", ChatSession())

        with pytest.raises(RuntimeError):
            await relay.typing(1)
