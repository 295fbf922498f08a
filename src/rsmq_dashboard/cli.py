"""RSMQ dashboard CLI - live terminal view of RSMQ queues.

Options fall back to RSMQ_DASHBOARD_* environment variables (see config.py).
Logging is written to a file only; the terminal belongs to the dashboard.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from rsmq_dashboard import __version__
from rsmq_dashboard.app import DashboardApp
from rsmq_dashboard.config import settings
from rsmq_dashboard.exceptions import BackendError
from rsmq_dashboard.state import DashboardState
from rsmq_dashboard.store import RedisQueueStore

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="rsmq-dashboard",
    help="Terminal UI for your RSMQ queues",
    add_completion=False,
)

err_console = Console(stderr=True)


def configure_logging(log_file: Path | None, level: str) -> None:
    """
    Send log records to a file, or discard them.

    Args:
        log_file: Destination file, None to disable logging output
        level: Level name (e.g. "INFO", "DEBUG")
    """
    if log_file is None:
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)
        return
    logging.basicConfig(
        filename=str(log_file),
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        print(f"rsmq-dashboard {__version__}")
        raise typer.Exit()


@app.command()
def run(
    namespace: str = typer.Option(
        None,
        "--namespace",
        "-n",
        metavar="REDIS_NS",
        help=f"Key used to namespace the RSMQ data in Redis (default: {settings.namespace})",
    ),
    redis_url: str = typer.Option(
        None,
        "--redis-url",
        "-r",
        metavar="REDIS_URL",
        help=(
            "Redis connection string on the format "
            "redis://HOST[:PORT][?password=PASSWORD[&db=DATABASE]] "
            f"(default: {settings.redis_url})"
        ),
    ),
    interval: float = typer.Option(
        None, "--interval", "-i", min=0.1, help="Tick interval in seconds"
    ),
    log_file: Path = typer.Option(None, "--log-file", help="Write logs to this file"),
    log_level: str = typer.Option(None, "--log-level", help="Log level (e.g. INFO, DEBUG)"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Show RSMQ queues and the attributes of the selected queue.

    Use the up/down arrows to select a queue and q to quit.
    """
    namespace = namespace if namespace is not None else settings.namespace
    redis_url = redis_url or settings.redis_url
    interval = interval if interval is not None else settings.tick_interval

    configure_logging(log_file or settings.log_file, log_level or settings.log_level)
    logger.info(f"Starting dashboard for namespace {namespace!r} at {redis_url}")

    try:
        store = RedisQueueStore.from_url(redis_url, namespace)
        state = DashboardState(store, quit_key=settings.quit_key)
        state.load()
    except BackendError as e:
        logger.error(f"Startup failed: {e}")
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    DashboardApp(state, quit_key=settings.quit_key, interval=interval).run()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
