"""
Intcode VM — Integer Channels

Unidirectional FIFO channels used to wire engines to each other and to
controllers running on other threads.

    tx, rx = channel()
    tx.send(42)
    rx.recv()        # → 42

A channel stays open while at least one sender is open. Once every
sender has been closed and the buffer has been drained, ``recv`` raises
ChannelClosed instead of blocking forever. Closing the receiver makes
every later ``send`` raise ChannelClosed. This is how one side tells the
other "nobody is coming": an engine blocked on input is stopped by
closing the sender that feeds it.

Senders can be cloned; each clone must be closed separately. Receivers
cannot be cloned.

Sends never block (the buffer is unbounded).
"""

import threading
from collections import deque
from typing import Deque, Iterator, Optional, Tuple


class ChannelClosed(Exception):
    """The other end of the channel has gone away."""


class ChannelEmpty(Exception):
    """try_recv found nothing buffered."""


class _ChannelState:
    """Shared buffer + bookkeeping behind one Sender/Receiver pair."""

    def __init__(self):
        self.lock = threading.Lock()
        self.ready = threading.Condition(self.lock)
        self.buffer: Deque[int] = deque()
        self.senders = 0
        self.receiver_open = True


class Sender:
    """Writing end of a channel."""

    def __init__(self, state: _ChannelState):
        self._state = state
        self._open = True
        with state.lock:
            state.senders += 1

    def send(self, value: int):
        """Queue a value for the receiver.

        Raises ChannelClosed if the receiver (or this sender) is closed.
        """
        state = self._state
        with state.lock:
            if not self._open or not state.receiver_open:
                raise ChannelClosed("receiver closed")
            state.buffer.append(value)
            state.ready.notify()

    def clone(self) -> "Sender":
        """Another writer onto the same channel."""
        if not self._open:
            raise ChannelClosed("cannot clone a closed sender")
        return Sender(self._state)

    def close(self):
        """Hang up. Idempotent."""
        state = self._state
        with state.lock:
            if not self._open:
                return
            self._open = False
            state.senders -= 1
            if state.senders == 0:
                state.ready.notify_all()

    @property
    def closed(self) -> bool:
        return not self._open

    def __enter__(self) -> "Sender":
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"Sender({'closed' if self.closed else 'open'})"


class Receiver:
    """Reading end of a channel."""

    def __init__(self, state: _ChannelState):
        self._state = state

    def recv(self, timeout: Optional[float] = None) -> int:
        """Block until a value arrives and return it.

        Raises ChannelClosed once the buffer is empty and every sender is
        closed, and TimeoutError if ``timeout`` seconds pass first.
        """
        state = self._state
        with state.lock:
            if not state.receiver_open:
                raise ChannelClosed("receiver closed")
            ok = state.ready.wait_for(
                lambda: (state.buffer or state.senders == 0
                        or not state.receiver_open), timeout)
            if not ok:
                raise TimeoutError(f"no value within {timeout}s")
            if not state.receiver_open:
                raise ChannelClosed("receiver closed")
            if state.buffer:
                return state.buffer.popleft()
            raise ChannelClosed("all senders closed")

    def try_recv(self) -> int:
        """Return a buffered value without blocking.

        Raises ChannelEmpty if nothing is buffered but senders remain.
        """
        state = self._state
        with state.lock:
            if state.buffer and state.receiver_open:
                return state.buffer.popleft()
            if state.senders == 0 or not state.receiver_open:
                raise ChannelClosed("all senders closed")
            raise ChannelEmpty()

    def drain(self) -> list:
        """Everything currently buffered, without blocking."""
        state = self._state
        with state.lock:
            values = list(state.buffer)
            state.buffer.clear()
            return values

    def close(self):
        """Stop receiving. Idempotent; later sends raise ChannelClosed."""
        state = self._state
        with state.lock:
            state.receiver_open = False
            state.buffer.clear()
            state.ready.notify_all()

    @property
    def closed(self) -> bool:
        return not self._state.receiver_open

    def __iter__(self) -> Iterator[int]:
        """Yield values until the channel is closed and drained."""
        while True:
            try:
                yield self.recv()
            except ChannelClosed:
                return

    def __enter__(self) -> "Receiver":
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"Receiver({'closed' if self.closed else 'open'})"


def channel() -> Tuple[Sender, Receiver]:
    """Create a new channel and return its (sender, receiver) pair."""
    state = _ChannelState()
    return Sender(state), Receiver(state)
