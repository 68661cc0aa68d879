"""Terminal indicator application loop and layout.

This module runs the indicator on a single asyncio event loop: filesystem
notifications, timers, keyboard input and signals are all delivered there, and
the Rich layout is redrawn whenever the controller reports a change.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import termios
import tty
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.layout import Layout
from rich.live import Live

from ..utils import Config
from .controller import IndicatorController
from .keybindings import KeybindingHandler
from .scheduler import LoopScheduler
from .state import DirectoryChangeSource
from .views.footer_bar import render_footer_bar
from .views.indicator_bar import render_indicator
from .views.menu_panel import render_menu_panel

logger = logging.getLogger(__name__)


@contextmanager
def _cbreak_stdin() -> Iterator[None]:
    """Deliver key presses one at a time instead of line by line."""
    if not sys.stdin.isatty():
        yield
        return
    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


class IndicatorApp:
    """Terminal front end for the indicator."""

    def __init__(self, config: Config, console: Console | None = None):
        """Initialize the application.

        Args:
            config: Runtime configuration
            console: Rich console to draw on (default: a new Console)
        """
        self.config = config
        self.console = console or Console()
        self.controller: IndicatorController | None = None
        self.keybinding_handler: KeybindingHandler | None = None
        self.status_message: str | None = None

        self._live: Live | None = None
        self._quit: asyncio.Event | None = None

    def _build_layout(self) -> Layout:
        """Build the indicator/menu/footer layout."""
        layout = Layout()
        layout.split_column(
            Layout(name="indicator", size=3),
            Layout(name="menu", ratio=1),
            Layout(name="footer", size=1),
        )
        return layout

    def _render(self) -> Layout:
        """Render the controller's current state into a fresh layout."""
        layout = self._build_layout()
        controller = self.controller
        if controller is None:
            return layout

        machine = controller.machine
        layout["indicator"].update(
            render_indicator(
                visual=machine.visual,
                overlay_visible=machine.overlay_visible,
                clock_label=machine.clock_label,
                bars=controller.animator.bars,
            )
        )
        layout["menu"].update(render_menu_panel(controller.menu()))
        layout["footer"].update(
            render_footer_bar(
                watch_mode=controller.watch_mode,
                error_message=machine.error_message or self.status_message,
                terminal_width=self.console.width,
            )
        )
        return layout

    def _refresh(self) -> None:
        if self._live is not None:
            self._live.update(self._render(), refresh=True)

    def request_quit(self) -> None:
        """Ask the main loop to exit."""
        logger.info("Quit requested")
        if self._quit is not None:
            self._quit.set()

    def _on_stdin(self) -> None:
        key = sys.stdin.read(1)
        if not key:
            # EOF: keep running, just without keyboard input
            asyncio.get_running_loop().remove_reader(sys.stdin.fileno())
            return
        if self.keybinding_handler is None:
            return

        handled, message = self.keybinding_handler.handle_key(key)
        if not handled:
            return
        if message == "quit":
            self.request_quit()
            return
        self.status_message = message
        self._refresh()

    def _install_loop_handlers(self, loop: asyncio.AbstractEventLoop) -> bool:
        """Register signal and keyboard handlers; return whether stdin is read."""
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self.request_quit)
            except (NotImplementedError, RuntimeError):
                logger.debug(f"Signal handlers unsupported for {signum}")

        try:
            loop.add_reader(sys.stdin.fileno(), self._on_stdin)
        except (NotImplementedError, OSError, ValueError) as err:
            logger.warning(f"Keyboard input unavailable: {err}")
            return False
        return True

    def _remove_loop_handlers(self, loop: asyncio.AbstractEventLoop, reading: bool) -> None:
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(signum)
            except (NotImplementedError, RuntimeError):
                pass
        if reading:
            loop.remove_reader(sys.stdin.fileno())

    async def _main(self) -> None:
        loop = asyncio.get_running_loop()
        self._quit = asyncio.Event()
        self.controller = IndicatorController(
            self.config,
            LoopScheduler(loop),
            source_factory=lambda: DirectoryChangeSource(self.config.state_dir, loop),
        )
        self.keybinding_handler = KeybindingHandler(self.controller)

        reading = self._install_loop_handlers(loop)
        try:
            with _cbreak_stdin(), Live(
                self._render(),
                console=self.console,
                auto_refresh=False,
                screen=True,
            ) as live:
                self._live = live
                self.controller.subscribe(self._refresh)
                self.controller.start()
                self._refresh()
                logger.info("Indicator main loop started")

                await self._quit.wait()
        finally:
            # Stop every timer and the watch before the display goes away
            self.controller.stop()
            self._live = None
            self._remove_loop_handlers(loop, reading)

    def run(self) -> int:
        """Run the indicator until asked to quit.

        Returns:
            Exit code (0 for success, 1 for error, 130 when interrupted)
        """
        try:
            asyncio.run(self._main())
        except KeyboardInterrupt:
            logger.info("Indicator interrupted by user")
            return 130
        except Exception as err:
            logger.error(f"Indicator crashed: {err}", exc_info=True)
            self.console.print(f"[red]Error: {err}[/red]")
            return 1
        logger.info("Indicator main loop exited")
        return 0
