"""Shared fixtures for dashboard tests."""

import pytest

from rsmq_dashboard.exceptions import BackendError
from rsmq_dashboard.types import QueueAttributes


def make_attributes(name: str, **overrides) -> QueueAttributes:
    """Build QueueAttributes with plausible defaults."""
    values = {
        "name": name,
        "vt": 30,
        "delay": 0,
        "maxsize": 65536,
        "totalsent": 10,
        "totalrecv": 7,
        "created": 1500000000,
        "modified": 1500000600,
        "msgs": 3,
        "hiddenmsgs": 1,
    }
    values.update(overrides)
    return QueueAttributes(**values)


class MockStore:
    """In-memory store implementing QueueStoreProtocol with call counters."""

    def __init__(self, names=()):
        self.names = set(names)
        self.list_calls = 0
        self.get_calls: list[str] = []
        self.fail = False

    def list_names(self) -> set[str]:
        self.list_calls += 1
        if self.fail:
            raise BackendError("Connection refused")
        return set(self.names)

    def get_attributes(self, name: str) -> QueueAttributes:
        self.get_calls.append(name)
        if self.fail:
            raise BackendError("Connection refused", queue=name)
        if name not in self.names:
            raise BackendError("Queue not found", queue=name)
        return make_attributes(name)

    @property
    def total_calls(self) -> int:
        return self.list_calls + len(self.get_calls)


@pytest.fixture
def store():
    """Store with two queues reported out of order."""
    return MockStore(names={"b", "a"})


@pytest.fixture
def empty_store():
    return MockStore()
