"""Fetch progress indicator for the gh-fork-cleanup CLI.

ProgressIndicator animates a single spinner glyph next to a message while
the forks are being fetched. It runs as its own asyncio task, stops on
either ``stop()`` or the session's cancellation signal, and always blanks
its line on the way out.

Example:
    ```python
    async with ProgressIndicator(cancel_signal, message="Fetching forks"):
        forks = await race(client.fetch_forks(), cancel_signal)
    ```
"""

from __future__ import annotations

import asyncio
from types import TracebackType

from rich.console import Console
from rich.spinner import Spinner

from gh_fork_cleanup.cancel import CancelSignal
from gh_fork_cleanup.cli.console import (
    detect_terminal_capabilities,
    get_console,
    get_spinner,
)

__all__ = ["TICK_INTERVAL", "ProgressIndicator"]

TICK_INTERVAL = 0.1


class ProgressIndicator:
    """Non-blocking spinner bound to a cancellation signal.

    While running, the indicator is the only writer to the console's
    stream; callers stop it before printing anything else.
    """

    def __init__(
        self,
        cancel_signal: CancelSignal,
        *,
        console: Console | None = None,
        message: str | None = None,
        spinner_name: str | None = None,
        interval: float = TICK_INTERVAL,
    ) -> None:
        """Initialize the indicator.

        Args:
            cancel_signal: Session cancellation signal; firing it stops the
                animation at the next tick.
            console: Console whose stream receives the frames.
            message: Text shown after the glyph.
            spinner_name: Spinner configuration name. Defaults to a unicode
                or ASCII spinner depending on the terminal.
            interval: Seconds between frames.
        """
        if spinner_name is None:
            caps = detect_terminal_capabilities()
            spinner_name = "fetching" if caps.unicode_support else "fetching.ascii"
        config = get_spinner(spinner_name)

        self.cancel_signal = cancel_signal
        self.console = console or get_console()
        self.message = message or config.text
        self.interval = interval
        self.frames: list[str] = list(Spinner(config.spinner).frames)
        self._stopped: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the animation task. Returns immediately."""
        if self._task is not None:
            raise RuntimeError("Progress indicator already started")
        self._stopped = asyncio.Event()
        self._task = asyncio.create_task(self._animate())

    async def stop(self) -> None:
        """Stop the animation and wait for the line to be cleared."""
        if self._task is None:
            return
        if self._stopped is not None:
            self._stopped.set()
        try:
            await self._task
        finally:
            self._task = None

    async def _animate(self) -> None:
        stream = self.console.file
        # Redirected output gets no frames, only the final line clear.
        animate = self.console.is_terminal
        width = 0
        index = 0
        assert self._stopped is not None

        try:
            while not self._stopped.is_set() and not self.cancel_signal.fired:
                if animate:
                    line = f"{self.frames[index % len(self.frames)]} {self.message}"
                    stream.write(f"\r{line}")
                    stream.flush()
                    width = max(width, len(line))
                    index += 1
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            stream.write("\r" + " " * width + "\r")
            stream.flush()

    async def __aenter__(self) -> ProgressIndicator:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()
