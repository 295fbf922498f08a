"""
DashboardApp: main loop wiring producers, state and rendering.

Startup order:
1. Initial load (caller runs state.load(), failures are fatal)
2. Start keyboard and ticker producers with a shared stop token
3. Enter cbreak mode and the Rich Live screen
4. Draw once, then loop: check size, wait for event, update state, draw
5. On quit, set the stop token and let Live restore the terminal
"""

import logging
import sys
import threading
from typing import TextIO

from rich.console import Console
from rich.live import Live

from rsmq_dashboard.events import EventChannel, KeyboardReader, Ticker, cbreak_mode
from rsmq_dashboard.render import render_dashboard
from rsmq_dashboard.state import DashboardState

logger = logging.getLogger(__name__)


class DashboardApp:
    """
    Runs the dashboard until the quit key is pressed.

    The main loop is the only thread that touches DashboardState; the
    producers only ever see the channel.

    Example:
        state = DashboardState(store)
        state.load()
        DashboardApp(state).run()
    """

    def __init__(
        self,
        state: DashboardState,
        channel: EventChannel | None = None,
        console: Console | None = None,
        quit_key: str = "q",
        interval: float = 1.0,
    ) -> None:
        """
        Initialize the app.

        Args:
            state: Loaded dashboard state
            channel: Event channel (creates one if None)
            console: Rich Console to draw on (creates default if None)
            quit_key: Key that ends the session
            interval: Seconds between ticks
        """
        self.state = state
        self.channel = channel if channel is not None else EventChannel()
        self.console = console if console is not None else Console()
        self.quit_key = quit_key
        self.interval = interval
        self._stop = threading.Event()

    def run(self, stdin: TextIO | None = None) -> None:
        """
        Start the producers and run the main loop in a Live screen.

        Args:
            stdin: Terminal input stream (default sys.stdin)
        """
        stdin = stdin if stdin is not None else sys.stdin
        keyboard = KeyboardReader(self.channel, self.quit_key, stop=self._stop, stream=stdin)
        ticker = Ticker(self.channel, self.interval, stop=self._stop)

        with cbreak_mode(stdin):
            with Live(
                console=self.console,
                screen=True,
                auto_refresh=False,
                transient=True,
            ) as live:
                keyboard.start()
                ticker.start()
                try:
                    self.main_loop(live)
                finally:
                    self._stop.set()

        logger.info("Dashboard stopped")

    def main_loop(self, live: Live) -> None:
        """
        Consume events until the quit key.

        Args:
            live: Rich Live context to draw into
        """
        self._check_size()
        self.draw(live)

        while True:
            if self._check_size():
                self.draw(live)

            event = self.channel.get()
            if not self.state.handle(event):
                break
            self.draw(live)

    def draw(self, live: Live) -> None:
        live.update(render_dashboard(self.state.snapshot()), refresh=True)

    def _check_size(self) -> bool:
        size = self.console.size
        return self.state.resize((size.width, size.height))
