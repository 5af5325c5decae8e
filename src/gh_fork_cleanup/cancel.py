"""One-shot cancellation signal shared by every waiter in a session.

The signal fires at most once and stays fired. Operator interrupts
(SIGINT, SIGTERM) are translated into the same signal, so the progress
indicator, the line reader and the session runner all observe one
mechanism.

Example:
    ```python
    signal = CancelSignal()
    loop = asyncio.get_running_loop()
    with signal.install_signal_handlers(loop):
        forks = await race(client.fetch_forks(), signal)
    ```
"""

from __future__ import annotations

import asyncio
import signal as _signal
from collections.abc import Awaitable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from gh_fork_cleanup.errors import SessionCancelled
from gh_fork_cleanup.logging import get_logger

__all__ = ["CancelSignal", "race"]

logger = get_logger("cancel")

T = TypeVar("T")

INTERRUPT_SIGNALS = (_signal.SIGINT, _signal.SIGTERM)


class CancelSignal:
    """Broadcast, idempotent cancellation signal.

    Backed by an ``asyncio.Event``. ``fire`` must be called from the event
    loop thread; signal handlers installed through
    ``install_signal_handlers`` run there.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def fired(self) -> bool:
        """Whether the signal has fired."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Reason given by the first ``fire`` call, if any."""
        return self._reason

    def fire(self, reason: str = "interrupt") -> None:
        """Fire the signal. Later calls are no-ops."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.debug(f"Cancellation fired: {reason}")

    async def wait(self) -> None:
        """Wait until the signal fires."""
        await self._event.wait()

    @contextmanager
    def install_signal_handlers(
        self,
        loop: asyncio.AbstractEventLoop,
    ) -> Iterator[None]:
        """Route SIGINT/SIGTERM to ``fire`` for the duration of the block.

        On platforms without ``loop.add_signal_handler`` nothing is
        installed and the default KeyboardInterrupt behaviour applies.
        """
        installed: list[_signal.Signals] = []
        for signum in INTERRUPT_SIGNALS:
            try:
                loop.add_signal_handler(signum, self.fire, signum.name.lower())
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.debug(f"Cannot install handler for {signum.name}: {e}")
                continue
            installed.append(signum)
        try:
            yield
        finally:
            for signum in installed:
                loop.remove_signal_handler(signum)


async def race(awaitable: Awaitable[T], cancel_signal: CancelSignal) -> T:
    """Await ``awaitable`` unless ``cancel_signal`` fires first.

    The awaitable is wrapped in a task; if the signal wins, the task is
    cancelled and awaited before ``SessionCancelled`` is raised.

    Raises:
        SessionCancelled: If the signal fired before the awaitable finished.
    """
    if cancel_signal.fired:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise SessionCancelled(cancel_signal.reason or "interrupt")

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_signal.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if cancel_signal.fired:
        if not work.done():
            work.cancel()
            try:
                await work
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Cancelled work raised during cleanup: {e}")
        elif not work.cancelled():
            # Retrieve the exception so it is not reported as unhandled.
            work.exception()
        raise SessionCancelled(cancel_signal.reason or "interrupt")

    return work.result()
