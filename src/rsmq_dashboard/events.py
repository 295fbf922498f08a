"""
Event multiplexer for the dashboard main loop.

Two independent producers feed one ordered stream:
- KeyboardReader: emits Input(key) per keypress, stops after the quit key
- Ticker: emits Tick every interval, until the stop token is set

Both write into a shared EventChannel, an unbounded FIFO with many senders
and one receiver. Sends never block. Events reach the consumer in enqueue
order; nothing is reordered or coalesced.

Producers run as daemon threads and are never joined. The optional stop
token lets the app end them early; otherwise process exit reclaims them.
"""

from __future__ import annotations

import contextlib
import logging
import os
import queue
import select
import sys
import termios
import threading
import tty
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Callable, TextIO

from rsmq_dashboard.exceptions import InputError

logger = logging.getLogger(__name__)

# Escape sequences for arrow keys (normal and application cursor mode)
_KEY_NAMES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1bOA": "up",
    "\x1bOB": "down",
}


@dataclass(frozen=True)
class Input:
    """A single keypress, decoded to "up"/"down" or the raw character."""

    key: str


@dataclass(frozen=True)
class Tick:
    """Periodic timer event."""


Event = Input | Tick


def decode_key(raw: str) -> str:
    """
    Map a raw key sequence to a key name.

    Args:
        raw: Character or escape sequence read from the terminal

    Returns:
        "up" or "down" for arrow keys, otherwise the raw sequence
    """
    return _KEY_NAMES.get(raw, raw)


def _read_byte(fd: int) -> str:
    data = os.read(fd, 1)
    if not data:
        raise InputError("Keyboard input stream closed")
    return data.decode(errors="replace")


def _readkey_with_timeout(fd: int, timeout: float) -> str | None:
    """
    Read a keypress with timeout.

    Uses select() to check if input is available, then reads the file
    descriptor byte by byte so escape sequences are not swallowed by a
    text buffer. Does NOT change terminal modes - caller must ensure
    cbreak mode is set.

    Args:
        fd: Input file descriptor (normally sys.stdin.fileno())
        timeout: Maximum seconds to wait for input

    Returns:
        Key pressed, or None if timeout

    Raises:
        InputError: If the stream reached end of file
    """
    if not select.select([fd], [], [], timeout)[0]:
        return None

    char = _read_byte(fd)
    # Collect the rest of an escape sequence (arrow keys)
    if char == "\x1b":
        if select.select([fd], [], [], 0.05)[0]:
            char += _read_byte(fd)
            if char in ("\x1b[", "\x1bO") and select.select([fd], [], [], 0.05)[0]:
                char += _read_byte(fd)
    return char


@contextlib.contextmanager
def cbreak_mode(stream: TextIO | None = None) -> Iterator[None]:
    """
    Put a terminal into cbreak mode for single-keypress reads.

    Restores the previous settings on exit. Does nothing when the stream
    is not a TTY (pipes, tests).

    Args:
        stream: Terminal input stream (default sys.stdin)
    """
    stream = stream if stream is not None else sys.stdin
    if not stream.isatty():
        yield
        return

    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


class EventChannel:
    """
    Unbounded FIFO shared by the producers and the main loop.

    put() may be called from any thread and never blocks. get() is meant
    for a single consumer.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Event] = queue.SimpleQueue()

    def put(self, event: Event) -> None:
        """Enqueue an event without blocking."""
        self._queue.put(event)

    def get(self, timeout: float | None = None) -> Event:
        """
        Block until the next event arrives.

        Args:
            timeout: Seconds to wait, or None to wait forever

        Raises:
            queue.Empty: If timeout elapsed with no event
        """
        return self._queue.get(timeout=timeout)

    def empty(self) -> bool:
        return self._queue.empty()


class KeyboardReader:
    """
    Keyboard producer thread.

    Reads one key at a time and forwards it as Input(key). The loop ends
    right after the quit key has been forwarded, when the stop token is
    set, or when the input stream ends.

    Example:
        reader = KeyboardReader(channel, quit_key="q")
        reader.start()
    """

    def __init__(
        self,
        channel: EventChannel,
        quit_key: str = "q",
        read_key: Callable[[], str | None] | None = None,
        stop: threading.Event | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """
        Initialize keyboard reader.

        Args:
            channel: Channel to send events into
            quit_key: Key that ends the reader after being forwarded
            read_key: Returns one raw key, or None on timeout. Defaults to
                a select() based read of stream with a 0.3s timeout.
            stop: Shared stop token
            stream: Input stream for the default read_key (default sys.stdin)
        """
        self._channel = channel
        self._quit_key = quit_key
        self._stop = stop if stop is not None else threading.Event()
        if read_key is None:
            source = stream if stream is not None else sys.stdin
            read_key = lambda: _readkey_with_timeout(source.fileno(), 0.3)  # noqa: E731
        self._read_key = read_key
        self._thread = threading.Thread(target=self.run, name="keyboard", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def run(self) -> None:
        """Read loop. Runs on the producer thread."""
        try:
            while not self._stop.is_set():
                raw = self._read_key()
                if raw is None:
                    continue
                key = decode_key(raw)
                self._channel.put(Input(key))
                if key == self._quit_key:
                    break
        except InputError as e:
            # Dashboard keeps ticking but no longer reacts to keys
            logger.error(f"Keyboard reader stopped: {e}")

    def is_alive(self) -> bool:
        return self._thread.is_alive()


class Ticker:
    """
    Timer producer thread.

    Emits Tick, then waits interval seconds, until the stop token is set.
    """

    def __init__(
        self,
        channel: EventChannel,
        interval: float = 1.0,
        stop: threading.Event | None = None,
    ) -> None:
        """
        Initialize ticker.

        Args:
            channel: Channel to send events into
            interval: Seconds between ticks (default 1.0)
            stop: Shared stop token
        """
        self._channel = channel
        self._interval = interval
        self._stop = stop if stop is not None else threading.Event()
        self._thread = threading.Thread(target=self.run, name="ticker", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def run(self) -> None:
        """Tick loop. Runs on the producer thread."""
        while not self._stop.is_set():
            self._channel.put(Tick())
            # Event.wait doubles as an interruptible sleep
            self._stop.wait(self._interval)

    def is_alive(self) -> bool:
        return self._thread.is_alive()
