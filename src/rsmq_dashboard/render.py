"""
Rendering for the two-pane queue dashboard.

Layout structure:
+----------+------------------------------------------------+
| Queues   |  Details: <queue>                              |
| (20%)    |  (80%)                                         |
|  a       |  Name                 a                        |
| >b       |  Visibility timeout   30                       |
|  c       |  ...                                           |
+----------+------------------------------------------------+

render_dashboard() is a pure function of the snapshot: it performs no
backend calls and keeps no state between frames.
"""

from datetime import datetime, timezone

from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rsmq_dashboard.types import DashboardSnapshot, QueueAttributes

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
EPOCH_ZERO = "1970-01-01 00:00:00"

HIGHLIGHT_SYMBOL = ">"
HIGHLIGHT_STYLE = "bold yellow"
NORMAL_STYLE = "white"

# Rows lost to the panel border
_BORDER_ROWS = 2


def format_timestamp(epoch: int | float) -> str:
    """
    Format epoch seconds as a UTC "YYYY-MM-DD HH:MM:SS" string.

    Args:
        epoch: Seconds since the Unix epoch

    Returns:
        Formatted timestamp, or "1970-01-01 00:00:00" if the value cannot
        be converted
    """
    try:
        return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime(TIMESTAMP_FORMAT)
    except (OverflowError, OSError, ValueError, TypeError):
        return EPOCH_ZERO


def visible_window(count: int, selected: int, height: int | None) -> tuple[int, int]:
    """
    Compute the slice of list rows to show so the selection stays visible.

    Args:
        count: Number of rows in the list
        selected: Index of the highlighted row
        height: Rows available, or None for unlimited

    Returns:
        (start, end) slice bounds into the list
    """
    if height is None or height <= 0 or count <= height:
        return 0, count
    start = min(max(selected - height + 1, 0), count - height)
    return start, start + height


def attribute_rows(attributes: QueueAttributes) -> list[tuple[str, str]]:
    """Key/value rows for the detail table."""
    return [
        ("Name", attributes.name),
        ("Visibility timeout", str(attributes.vt)),
        ("Initial delay", str(attributes.delay)),
        ("Max msg size", str(attributes.maxsize)),
        ("Total msg sent", str(attributes.totalsent)),
        ("Total msg received", str(attributes.totalrecv)),
        ("Created at", format_timestamp(attributes.created)),
        ("Modified at", format_timestamp(attributes.modified)),
        ("Messages", str(attributes.msgs)),
        ("Hidden messages", str(attributes.hiddenmsgs)),
    ]


def make_queue_list(snapshot: DashboardSnapshot) -> Panel:
    """
    Create the selectable queue list panel.

    The selected row is prefixed with ">" and highlighted. The border turns
    red while the last sync failed.
    """
    height = None
    if snapshot.viewport is not None:
        height = snapshot.viewport[1] - _BORDER_ROWS

    start, end = visible_window(len(snapshot.names), snapshot.selected, height)
    lines = []
    for index in range(start, end):
        name = snapshot.names[index]
        if index == snapshot.selected:
            lines.append(Text(f"{HIGHLIGHT_SYMBOL}{name}", style=HIGHLIGHT_STYLE))
        else:
            lines.append(Text(f" {name}", style=NORMAL_STYLE))

    return Panel(
        Group(*lines),
        title=" Queues ",
        border_style="red" if snapshot.error else "blue",
        padding=(0, 0),
    )


def make_details(attributes: QueueAttributes | None, error: str | None = None) -> Panel:
    """
    Create the detail panel for the synced queue.

    Returns an empty panel when no queue is loaded. A failed sync is shown
    as a red subtitle; the attributes on screen are then the last good ones.
    """
    subtitle = None
    if error is not None:
        # Text, not markup: redis messages contain brackets like [Errno 111]
        subtitle = Text(f"sync failed: {error}", style="bold red")

    if attributes is None:
        return Panel("", subtitle=subtitle, border_style="blue")

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(width=18)
    table.add_column(min_width=19)
    for key, value in attribute_rows(attributes):
        table.add_row(key, value, style=NORMAL_STYLE)

    return Panel(
        table,
        title=Text(f" Details: {attributes.name} "),
        subtitle=subtitle,
        border_style="blue",
    )


def render_dashboard(snapshot: DashboardSnapshot) -> Layout:
    """
    Build the full dashboard for one frame.

    Args:
        snapshot: Immutable dashboard model

    Returns:
        Layout with "queues" (20%) and "details" (80%) regions
    """
    layout = Layout(name="root")
    layout.split_row(
        Layout(make_queue_list(snapshot), name="queues", ratio=1),
        Layout(make_details(snapshot.attributes, snapshot.error), name="details", ratio=4),
    )
    return layout
