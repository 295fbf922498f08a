"""
Navigation state machine for the queue dashboard.

DashboardState owns the dashboard model (queue names, cursor, last synced
index, loaded attributes) and decides when to call the queue store.

Sync check, run after every event:
- selected == synced: nothing to do, no backend call
- selected != synced: re-list names, re-sort, fetch attributes for the
  selected queue, then synced = selected

Refreshing only when the cursor moved bounds backend traffic to one
list/get pair per navigation, regardless of tick frequency.

The cursor is keyed by queue name. Queues created or deleted elsewhere can
reorder the sorted list between syncs; after a refresh the cursor is moved
to wherever the selected name landed, or to the top if it disappeared.

Only the first load is allowed to fail loudly. A failed sync keeps the last
good data on screen, records the error, and is retried on the next event.

All methods must be called from the main loop thread.
"""

import logging

from rsmq_dashboard.events import Event, Input, Tick
from rsmq_dashboard.exceptions import BackendError
from rsmq_dashboard.store import QueueStoreProtocol
from rsmq_dashboard.types import DashboardSnapshot, QueueAttributes

logger = logging.getLogger(__name__)


class DashboardState:
    """
    Dashboard model plus the transitions that update it.

    Example:
        state = DashboardState(store)
        state.load()
        while state.handle(channel.get()):
            draw(state.snapshot())
    """

    def __init__(self, store: QueueStoreProtocol, quit_key: str = "q") -> None:
        """
        Initialize empty state. Call load() before use.

        Args:
            store: Queue store to fetch names and attributes from
            quit_key: Key that ends the main loop
        """
        self._store = store
        self._quit_key = quit_key

        self.names: list[str] = []
        self.selected = 0
        self.synced = 0
        self.selected_name: str | None = None
        self.attributes: QueueAttributes | None = None
        self.viewport: tuple[int, int] | None = None
        self.error: str | None = None

    def load(self) -> None:
        """
        Initial fetch: list and sort names, select the first queue.

        Raises:
            BackendError: If the store cannot be read. Fatal at startup.
        """
        names = sorted(self._store.list_names())
        attributes = self._store.get_attributes(names[0]) if names else None

        self.names = names
        self.selected = self.synced = 0
        self.selected_name = names[0] if names else None
        self.attributes = attributes
        self.error = None
        logger.info(f"Loaded {len(names)} queues")

    def handle(self, event: Event) -> bool:
        """
        Apply one event, then run the sync check.

        Args:
            event: Input or Tick from the event channel

        Returns:
            False if the event was the quit key, True otherwise
        """
        if isinstance(event, Input):
            if event.key == self._quit_key:
                return False
            if event.key == "down":
                self.move(1)
            elif event.key == "up":
                self.move(-1)
        elif not isinstance(event, Tick):
            logger.warning(f"Ignoring unknown event {event!r}")

        self.sync()
        return True

    def move(self, step: int) -> None:
        """
        Move the cursor by step positions with wraparound.

        No-op on an empty list.
        """
        if not self.names:
            return
        self.selected = (self.selected + step) % len(self.names)
        self.selected_name = self.names[self.selected]

    def sync(self) -> None:
        """
        Refresh names and attributes if the cursor moved since the last sync.

        On BackendError the previous names and attributes are kept, the
        error is recorded, and synced is left behind so the next event
        retries. Moving back onto the synced queue clears the error.
        """
        if self.selected == self.synced:
            # Cursor is back on the loaded queue, so the data on screen is current
            self.error = None
            return

        try:
            names = sorted(self._store.list_names())
            index = self._locate(names)
            attributes = self._store.get_attributes(names[index]) if index is not None else None
        except BackendError as e:
            logger.warning(f"Sync failed, keeping last snapshot: {e}")
            self.error = str(e)
            return

        self.names = names
        if index is None:
            self.selected = self.synced = 0
            self.selected_name = None
        else:
            self.selected = self.synced = index
            self.selected_name = names[index]
        self.attributes = attributes
        self.error = None
        logger.debug(f"Synced to {self.selected_name!r} ({len(names)} queues)")

    def _locate(self, names: list[str]) -> int | None:
        """
        Find the cursor position in a freshly fetched list.

        Returns:
            Index of selected_name in names, 0 if it disappeared, or None
            if the list is empty
        """
        if not names:
            return None
        if self.selected_name in names:
            return names.index(self.selected_name)
        if self.selected_name is not None:
            logger.info(f"Queue {self.selected_name!r} disappeared, selecting first queue")
        return 0

    def resize(self, size: tuple[int, int]) -> bool:
        """
        Record the terminal size.

        Returns:
            True if the size changed and the layout must be redrawn
        """
        if size == self.viewport:
            return False
        self.viewport = size
        return True

    def snapshot(self) -> DashboardSnapshot:
        """Immutable copy of the model for rendering."""
        return DashboardSnapshot(
            names=tuple(self.names),
            selected=self.selected,
            attributes=self.attributes,
            error=self.error,
            viewport=self.viewport,
        )
