"""
Core types for the queue dashboard.

This module defines:
- QueueHash: Pydantic model validating raw RSMQ queue hash values
- QueueAttributes: Immutable snapshot of one queue at fetch time
- DashboardSnapshot: Immutable view of the dashboard model for rendering

Redis returns every hash field as a string (or None for missing fields).
QueueHash handles the str -> int conversion; internal code only ever
sees QueueAttributes.
"""

from dataclasses import dataclass

from pydantic import BaseModel


class QueueHash(BaseModel):
    """
    Raw fields of an RSMQ queue hash ({ns}:{qname}:Q).

    Counters are absent on queues that never sent or received a message,
    so they default to 0.
    """

    vt: int
    delay: int
    maxsize: int
    totalrecv: int = 0
    totalsent: int = 0
    created: int
    modified: int = 0


@dataclass(frozen=True)
class QueueAttributes:
    """
    Snapshot of one queue's configuration and counters.

    Superseded wholesale by the next fetch, never patched in place.

    Attributes:
        name: Queue name
        vt: Visibility timeout in seconds
        delay: Initial delivery delay in seconds
        maxsize: Maximum message size in bytes
        totalsent: Total messages sent (monotonic)
        totalrecv: Total messages received (monotonic)
        created: Creation time, epoch seconds
        modified: Last modification time, epoch seconds
        msgs: Messages currently in the queue
        hiddenmsgs: Messages currently invisible to receivers
    """

    name: str
    vt: int
    delay: int
    maxsize: int
    totalsent: int
    totalrecv: int
    created: int
    modified: int
    msgs: int = 0
    hiddenmsgs: int = 0


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    Display-ready copy of the dashboard model.

    Attributes:
        names: Sorted queue names
        selected: Cursor index into names
        attributes: Attributes of the last synced queue, None if no queue
        error: Message of the last failed sync, None when healthy
        viewport: Terminal (width, height), None before the first measure
    """

    names: tuple[str, ...]
    selected: int
    attributes: QueueAttributes | None
    error: str | None = None
    viewport: tuple[int, int] | None = None
