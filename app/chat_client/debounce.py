"""
Typing indicator debouncing.

A burst of keystrokes produces one "typing" event at its start and one
"stop typing" event once no key has been pressed for TYPING_TIMEOUT
seconds. Every keystroke restarts the inactivity timer.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable

from chat.constants import RelayEvent

logger = logging.getLogger(__name__)

# Seconds of inactivity after which "stop typing" is emitted
TYPING_TIMEOUT = 3.0


class TypingDebouncer:
    """
    Restartable typing timer bound to an asyncio loop.

    Args:
        emit: Called with RelayEvent.TYPING or RelayEvent.STOP_TYPING. May
            be a plain function or a coroutine function; coroutines are
            scheduled on the loop.
        timeout: Inactivity period in seconds
        loop: Event loop to schedule on (defaults to the running loop)
        enabled: Optional predicate; keystrokes are ignored while it is false

    Usage:
        debouncer = TypingDebouncer(relay.send_typing_event)
        debouncer.on_keystroke()   # emits typing, arms the timer
        debouncer.on_keystroke()   # re-arms the timer only
        debouncer.flush()          # message sent: "stop typing" right away
        debouncer.close()          # screen closed: cancel, emit nothing
    """

    def __init__(
        self,
        emit: Callable[[str], Any],
        timeout: float = TYPING_TIMEOUT,
        loop: asyncio.AbstractEventLoop | None = None,
        enabled: Callable[[], bool] | None = None,
    ):
        self._emit = emit
        self._enabled = enabled
        self.timeout = timeout
        self._loop = loop
        self._timer: asyncio.TimerHandle | None = None
        self._pending: set[asyncio.Future] = set()
        self.typing = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def on_keystroke(self) -> None:
        if self._enabled is not None and not self._enabled():
            return

        if not self.typing:
            self.typing = True
            self._dispatch(RelayEvent.TYPING)

        self._cancel_timer()
        self._timer = self.loop.call_later(self.timeout, self._expire)

    def flush(self) -> None:
        """End the burst now, emitting "stop typing" if one is active."""
        self._cancel_timer()
        if self.typing:
            self.typing = False
            self._dispatch(RelayEvent.STOP_TYPING)

    def close(self) -> None:
        """Cancel the timer without emitting anything."""
        self._cancel_timer()
        self.typing = False

    async def wait_sent(self) -> None:
        """Wait until every scheduled emission has finished."""
        if self._pending:
            await asyncio.gather(*self._pending)

    def _expire(self) -> None:
        self._timer = None
        if self.typing:
            self.typing = False
            self._dispatch(RelayEvent.STOP_TYPING)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _dispatch(self, event_type: str) -> None:
        result = self._emit(event_type)
        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result, loop=self.loop)
            self._pending.add(future)
            future.add_done_callback(self._on_sent)

    def _on_sent(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.warning(f"Typing event failed to send: {future.exception()}")
