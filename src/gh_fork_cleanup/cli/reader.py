"""Cancellable line reader for operator confirmations.

``readline()`` on a terminal cannot be interrupted by an asyncio signal,
so each read runs on a daemon thread and its result is delivered through
a ``concurrent.futures.Future``. The caller races that future against the
session's cancellation signal and sees exactly one of: an answer, a
cancellation, or a read failure.

Abandonment is best-effort. A thread blocked in ``readline()`` is never
killed; it stays parked until input arrives or the process exits, and as a
daemon it does not hold up interpreter shutdown. The abandoned read is
kept as the pending read, so the next ``read_line`` call picks up its line
instead of starting a second thread on the same stream.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from concurrent.futures import Future
from typing import TextIO

from gh_fork_cleanup.cancel import CancelSignal
from gh_fork_cleanup.logging import get_logger
from gh_fork_cleanup.models import PromptResult

__all__ = ["LineReader"]

logger = get_logger("cli.reader")


class LineReader:
    """Reads operator answers one line at a time."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the reader.

        Args:
            stream: Line-based input. Defaults to ``sys.stdin`` at read time.
        """
        self._stream = stream
        self._pending: Future[str] | None = None

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdin

    def _start_read(self) -> Future[str]:
        """Start a background readline, or reuse the one still in flight."""
        if self._pending is not None:
            return self._pending

        future: Future[str] = Future()
        future.set_running_or_notify_cancel()
        stream = self.stream

        def _read() -> None:
            try:
                line = stream.readline()
            except Exception as e:
                future.set_exception(e)
                return
            if not line:
                future.set_exception(EOFError("end of input"))
                return
            future.set_result(line)

        thread = threading.Thread(target=_read, name="gh-fork-cleanup-stdin", daemon=True)
        thread.start()
        self._pending = future
        return future

    async def read_line(self, cancel_signal: CancelSignal) -> PromptResult:
        """Read one line unless cancellation fires first.

        Args:
            cancel_signal: Session cancellation signal.

        Returns:
            PromptResult with an answer (trimmed, lower-cased), a
            cancellation, or a failure carrying the underlying error.
        """
        if cancel_signal.fired:
            return PromptResult.cancelled()

        future = self._start_read()
        read = asyncio.wrap_future(future)
        waiter = asyncio.ensure_future(cancel_signal.wait())
        try:
            await asyncio.wait({read, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if cancel_signal.fired:
            # The thread keeps running; its line is delivered to the next read.
            read.cancel()
            if future.done():
                logger.debug("Line arrived together with cancellation; cancellation wins")
            return PromptResult.cancelled()

        self._pending = None
        error = future.exception()
        if error is not None:
            logger.debug(f"Input read failed: {error!r}")
            return PromptResult.failed(error)
        return PromptResult.answer(future.result())
