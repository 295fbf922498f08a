"""
Tests for the event multiplexer.

These tests verify:
- Arrow escape sequences decode to "up"/"down"
- EventChannel delivers events in enqueue order across threads
- KeyboardReader forwards keys in order and stops after the quit key
- KeyboardReader stops quietly (with a log record) when input ends
- Ticker emits ticks until its stop token is set
- The select() based key reader handles escape sequences and EOF
"""

import io
import logging
import os
import queue
import threading

import pytest

from rsmq_dashboard.events import (
    EventChannel,
    Input,
    KeyboardReader,
    Tick,
    Ticker,
    _readkey_with_timeout,
    cbreak_mode,
    decode_key,
)
from rsmq_dashboard.exceptions import InputError


def drain(channel: EventChannel) -> list:
    events = []
    while not channel.empty():
        events.append(channel.get(timeout=0))
    return events


def scripted(keys):
    """read_key callable returning keys in order, failing if over-read."""
    it = iter(keys)

    def read_key():
        try:
            return next(it)
        except StopIteration:
            pytest.fail("KeyboardReader read past the quit key")

    return read_key


class TestDecodeKey:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("\x1b[A", "up"),
            ("\x1b[B", "down"),
            ("\x1bOA", "up"),
            ("\x1bOB", "down"),
            ("q", "q"),
            ("\x1b[C", "\x1b[C"),
        ],
    )
    def test_decode(self, raw, expected):
        assert decode_key(raw) == expected


class TestEventChannel:
    def test_fifo_order(self):
        channel = EventChannel()
        events = [Tick(), Input("down"), Tick(), Input("q")]
        for event in events:
            channel.put(event)
        assert drain(channel) == events

    def test_get_timeout_raises_empty(self):
        with pytest.raises(queue.Empty):
            EventChannel().get(timeout=0.01)

    def test_concurrent_producers_keep_per_producer_order(self):
        """Events from each producer arrive in the order that producer sent them."""
        channel = EventChannel()

        def produce(prefix: str) -> None:
            for i in range(200):
                channel.put(Input(f"{prefix}{i}"))

        threads = [threading.Thread(target=produce, args=(p,)) for p in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        keys = [e.key for e in drain(channel)]
        assert len(keys) == 400
        for prefix in ("a", "b"):
            seq = [int(k[1:]) for k in keys if k[0] == prefix]
            assert seq == list(range(200))


class TestKeyboardReader:
    def test_forwards_keys_until_quit(self):
        channel = EventChannel()
        reader = KeyboardReader(channel, read_key=scripted(["x", None, "\x1b[B", "\x1b[A", "q"]))
        reader.run()
        assert drain(channel) == [Input("x"), Input("down"), Input("up"), Input("q")]

    def test_custom_quit_key(self):
        channel = EventChannel()
        reader = KeyboardReader(channel, quit_key="x", read_key=scripted(["q", "x"]))
        reader.run()
        assert drain(channel) == [Input("q"), Input("x")]

    def test_input_error_stops_reader(self, caplog):
        channel = EventChannel()
        keys = iter(["down"])

        def read_key():
            for key in keys:
                return key
            raise InputError("Keyboard input stream closed")

        reader = KeyboardReader(channel, read_key=read_key)
        with caplog.at_level(logging.ERROR, logger="rsmq_dashboard.events"):
            reader.run()

        assert drain(channel) == [Input("down")]
        assert "Keyboard input stream closed" in caplog.text

    def test_stop_token_prevents_reads(self):
        stop = threading.Event()
        stop.set()
        channel = EventChannel()
        reader = KeyboardReader(channel, read_key=scripted([]), stop=stop)
        reader.run()
        assert channel.empty()

    def test_thread_exits_after_quit(self):
        channel = EventChannel()
        reader = KeyboardReader(channel, read_key=scripted(["q"]))
        reader.start()
        assert channel.get(timeout=1) == Input("q")
        reader._thread.join(timeout=1)
        assert not reader.is_alive()


class StoppingChannel(EventChannel):
    """Channel that sets a stop token after a number of puts."""

    def __init__(self, stop: threading.Event, limit: int) -> None:
        super().__init__()
        self.stop = stop
        self.limit = limit
        self.count = 0

    def put(self, event) -> None:
        super().put(event)
        self.count += 1
        if self.count >= self.limit:
            self.stop.set()


class TestTicker:
    def test_emits_ticks_until_stopped(self):
        stop = threading.Event()
        channel = StoppingChannel(stop, limit=3)
        Ticker(channel, interval=0.001, stop=stop).run()
        assert drain(channel) == [Tick(), Tick(), Tick()]

    def test_ticks_first_then_waits(self):
        """The first tick is sent immediately, not after one interval."""
        stop = threading.Event()
        channel = EventChannel()
        ticker = Ticker(channel, interval=60, stop=stop)
        ticker.start()
        try:
            assert channel.get(timeout=1) == Tick()
        finally:
            stop.set()
        ticker._thread.join(timeout=1)
        assert not ticker.is_alive()


class TestReadKeyWithTimeout:
    @pytest.fixture
    def pipe(self):
        read_fd, write_fd = os.pipe()
        fds = {"read": read_fd, "write": write_fd}
        yield fds
        for fd in fds.values():
            if fd is not None:
                os.close(fd)

    def test_timeout_returns_none(self, pipe):
        assert _readkey_with_timeout(pipe["read"], 0.01) is None

    def test_plain_character(self, pipe):
        os.write(pipe["write"], b"q")
        assert _readkey_with_timeout(pipe["read"], 1) == "q"

    def test_arrow_sequence(self, pipe):
        os.write(pipe["write"], b"\x1b[B")
        assert _readkey_with_timeout(pipe["read"], 1) == "\x1b[B"

    def test_keys_read_one_at_a_time(self, pipe):
        os.write(pipe["write"], b"\x1b[Aq")
        assert _readkey_with_timeout(pipe["read"], 1) == "\x1b[A"
        assert _readkey_with_timeout(pipe["read"], 1) == "q"

    def test_eof_raises_input_error(self, pipe):
        os.close(pipe["write"])
        pipe["write"] = None
        with pytest.raises(InputError):
            _readkey_with_timeout(pipe["read"], 1)


def test_cbreak_mode_ignores_non_tty():
    with cbreak_mode(io.StringIO()):
        pass
