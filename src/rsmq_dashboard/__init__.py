"""
Live terminal dashboard for RSMQ message queues.

This package provides:
- RedisQueueStore: Read-only access to RSMQ queues in Redis
- DashboardState: Navigation state machine with the sync check
- EventChannel, KeyboardReader, Ticker: Event multiplexer
- render_dashboard: Rich two-pane layout
- DashboardApp: Main loop
"""

__version__ = "0.1.0"

from rsmq_dashboard.app import DashboardApp
from rsmq_dashboard.events import EventChannel, Input, KeyboardReader, Tick, Ticker
from rsmq_dashboard.exceptions import BackendError, InputError
from rsmq_dashboard.render import format_timestamp, render_dashboard
from rsmq_dashboard.state import DashboardState
from rsmq_dashboard.store import QueueStoreProtocol, RedisQueueStore
from rsmq_dashboard.types import DashboardSnapshot, QueueAttributes

__all__ = [
    "BackendError",
    "DashboardApp",
    "DashboardSnapshot",
    "DashboardState",
    "EventChannel",
    "Input",
    "InputError",
    "KeyboardReader",
    "QueueAttributes",
    "QueueStoreProtocol",
    "RedisQueueStore",
    "Tick",
    "Ticker",
    "format_timestamp",
    "render_dashboard",
]
