"""
RSMQ queue store adapter.

This module provides read-only access to queues kept in Redis by RSMQ
(Redis Simple Message Queue). Key layout under a namespace ``ns``:

- ``{ns}:QUEUES``: set of queue names
- ``{ns}:{qname}:Q``: hash with vt, delay, maxsize, totalrecv, totalsent,
  created, modified
- ``{ns}:{qname}``: sorted set of message ids scored by the time (ms) at
  which each message becomes visible

Every call is a fresh round trip. There is no caching and no retrying;
the caller decides how often to call. All failures surface as BackendError.
"""

import logging
import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import redis
from pydantic import ValidationError

from rsmq_dashboard.exceptions import BackendError
from rsmq_dashboard.types import QueueAttributes, QueueHash

logger = logging.getLogger(__name__)

_HASH_FIELDS = ("vt", "delay", "maxsize", "totalrecv", "totalsent", "created", "modified")
_NAMESPACE_RE = re.compile(r"^\S+$")


@runtime_checkable
class QueueStoreProtocol(Protocol):
    """
    Protocol for queue backends the dashboard can display.

    - list_names(): Unordered set of queue names
    - get_attributes(): Snapshot of one queue

    Both raise BackendError when the store cannot answer.
    """

    def list_names(self) -> set[str]:
        ...

    def get_attributes(self, name: str) -> QueueAttributes:
        ...


@dataclass
class RedisQueueStore:
    """
    Queue store reading RSMQ data with an injected redis client.

    Attributes:
        redis: Pre-configured redis.Redis client with decode_responses=True.
        namespace: RSMQ namespace (key prefix), "rsmq" by default.

    Example:
        store = RedisQueueStore.from_url("redis://localhost:6379", "rsmq")
        for name in sorted(store.list_names()):
            print(store.get_attributes(name).totalsent)
    """

    redis: redis.Redis
    namespace: str = "rsmq"

    def __post_init__(self) -> None:
        if not _NAMESPACE_RE.match(self.namespace):
            raise BackendError(f"Invalid namespace {self.namespace!r}")

    @classmethod
    def from_url(cls, url: str, namespace: str = "rsmq") -> "RedisQueueStore":
        """
        Build a store from a redis:// connection string.

        The connection itself is opened lazily on the first call.

        Raises:
            BackendError: If the URL or namespace is invalid.
        """
        try:
            client = redis.Redis.from_url(url, decode_responses=True)
        except ValueError as e:
            raise BackendError(f"Invalid Redis URL {url!r}: {e}") from e
        return cls(redis=client, namespace=namespace)

    def _key(self, *parts: str) -> str:
        return ":".join((self.namespace, *parts))

    def list_names(self) -> set[str]:
        """
        Get the names of all queues in the namespace.

        Returns:
            Unordered set of queue names.

        Raises:
            BackendError: If Redis is unreachable or errors.
        """
        try:
            names = self.redis.smembers(self._key("QUEUES"))
        except redis.RedisError as e:
            raise BackendError(f"Can't fetch queue list: {e}") from e
        logger.debug(f"Listed {len(names)} queues in namespace {self.namespace}")
        return set(names)

    def get_attributes(self, name: str) -> QueueAttributes:
        """
        Get configuration and counters for one queue.

        Reads the server clock first so hidden messages are counted against
        Redis time, not local time.

        Args:
            name: Queue name

        Returns:
            QueueAttributes snapshot.

        Raises:
            BackendError: If the queue does not exist, its hash is malformed,
                or Redis is unreachable.
        """
        try:
            seconds, micros = self.redis.time()
            now_ms = int(seconds) * 1000 + int(micros) // 1000

            pipe = self.redis.pipeline(transaction=True)
            pipe.hmget(self._key(name, "Q"), list(_HASH_FIELDS))
            pipe.zcard(self._key(name))
            pipe.zcount(self._key(name), now_ms, "+inf")
            values, msgs, hiddenmsgs = pipe.execute()
        except redis.RedisError as e:
            raise BackendError(f"Can't fetch queue attributes: {e}", queue=name) from e

        raw = dict(zip(_HASH_FIELDS, values))
        if raw["vt"] is None:
            raise BackendError("Queue not found", queue=name)

        try:
            data = QueueHash.model_validate({k: v for k, v in raw.items() if v is not None})
        except ValidationError as e:
            raise BackendError(f"Malformed queue data: {e}", queue=name) from e

        return QueueAttributes(
            name=name,
            vt=data.vt,
            delay=data.delay,
            maxsize=data.maxsize,
            totalsent=data.totalsent,
            totalrecv=data.totalrecv,
            created=data.created,
            modified=data.modified,
            msgs=int(msgs),
            hiddenmsgs=int(hiddenmsgs),
        )
