"""Session runner for the gh-fork-cleanup CLI.

SessionRunner fetches the forks under a progress indicator, walks them in
fetch order through the DecisionEngine, and turns whatever happened into
a SessionReport. Operator cancellation (Ctrl-C, SIGTERM) fires one
CancelSignal that every suspension point observes; it always takes
precedence over an error seen at the same time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

from rich.console import Console
from rich.text import Text

from gh_fork_cleanup.cancel import CancelSignal, race
from gh_fork_cleanup.cli.console import get_console, print_error, print_info
from gh_fork_cleanup.cli.interactive import DecisionEngine, ForkPreview, open_in_browser
from gh_fork_cleanup.cli.progress import ProgressIndicator
from gh_fork_cleanup.cli.reader import LineReader
from gh_fork_cleanup.cli.summary import SessionOutcome, SessionReport, SessionSummary
from gh_fork_cleanup.config import SessionConfig
from gh_fork_cleanup.errors import (
    ComparisonError,
    FetchError,
    ForkCleanupError,
    SessionCancelled,
)
from gh_fork_cleanup.github import GitHubClient, build_items
from gh_fork_cleanup.logging import get_logger
from gh_fork_cleanup.models import CANCELLED_REASON, Decision, ForkItem

__all__ = ["SessionRunner"]

logger = get_logger("cli.session")

AUTH_HINT = "Check that gh is installed and logged in with `gh auth status`."


class SessionRunner:
    """Drives one cleanup session from fetch to summary."""

    def __init__(
        self,
        config: SessionConfig,
        client: GitHubClient,
        *,
        cancel_signal: CancelSignal | None = None,
        console: Console | None = None,
        reader: LineReader | None = None,
        opener: Callable[[str], bool] = open_in_browser,
        handle_signals: bool = True,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Behaviour flags for this session.
            client: GitHub access.
            cancel_signal: Shared cancellation signal. A fresh one is
                created when omitted.
            console: Console for all session output.
            reader: Operator input reader.
            opener: Browser launcher used by the "o" answer.
            handle_signals: Route SIGINT/SIGTERM to the cancellation signal
                while running.
        """
        self.config = config
        self.client = client
        self.cancel_signal = cancel_signal or CancelSignal()
        self.console = console or get_console()
        self.handle_signals = handle_signals
        self.engine = DecisionEngine(
            self.cancel_signal,
            deleter=client.delete,
            reader=reader,
            opener=opener,
            console=self.console,
            force=config.force,
            skip_confirmation=config.skip_confirmation,
        )

    async def _fetch_items(self) -> list[ForkItem]:
        async with ProgressIndicator(self.cancel_signal, console=self.console):
            logger.info("Fetching repositories with open pull requests")
            pull_requests = await race(self.client.fetch_open_pull_requests(), self.cancel_signal)
            logger.info("Fetching forks")
            forks = await race(self.client.fetch_forks(), self.cancel_signal)
        return build_items(forks, pull_requests)

    async def _with_comparison(self, item: ForkItem) -> ForkItem:
        """Attach ahead/behind counts; a failed comparison is omitted."""
        try:
            comparison = await race(self.client.compare(item.repository), self.cancel_signal)
        except ComparisonError as e:
            logger.debug(f"No comparison for {item.key}: {e}")
            return item
        return item.with_comparison(comparison)

    def _skip_remaining(self, items: Sequence[ForkItem], report: SessionReport) -> None:
        for item in items:
            report.decisions.append(Decision.skipped(item.key, reason=CANCELLED_REASON))

    async def _process(self, items: Sequence[ForkItem], report: SessionReport) -> None:
        for index, item in enumerate(items):
            if self.cancel_signal.fired:
                self._skip_remaining(items[index:], report)
                return

            try:
                item = await self._with_comparison(item)
            except SessionCancelled:
                self._skip_remaining(items[index:], report)
                return

            self.console.print(ForkPreview(item))
            decision = await self.engine.review(item)
            report.decisions.append(decision)

            if decision.cancelled:
                self._skip_remaining(items[index + 1 :], report)
                return

    async def _run(self, report: SessionReport) -> None:
        try:
            items = await self._fetch_items()
        except SessionCancelled:
            self.console.print(SessionSummary(self._finalize(report)))
            return

        if not items:
            print_info("No forked repositories found.", console=self.console)
            report.outcome = SessionOutcome.NOTHING_TO_DO
            return

        self.console.print(Text(f"📦 Found {len(items)} forks", style="brand"))
        try:
            await self._process(items, report)
        except ForkCleanupError as e:
            self._record_error(report, e)
        self.console.print(SessionSummary(self._finalize(report)))

    def _record_error(self, report: SessionReport, error: ForkCleanupError) -> None:
        report.error = error
        if not self.cancel_signal.fired:
            hint = AUTH_HINT if isinstance(error, FetchError) else None
            print_error(str(error), hint=hint, console=self.console)

    def _finalize(self, report: SessionReport) -> SessionReport:
        if self.cancel_signal.fired:
            report.outcome = SessionOutcome.INTERRUPTED
        elif report.error is not None:
            report.outcome = SessionOutcome.FAILED
        return report

    async def run(self) -> SessionReport:
        """Run the session.

        Returns:
            The session report. Errors are captured in the report rather
            than raised; ``report.exit_code`` gives the process exit status.
        """
        report = SessionReport()
        loop = asyncio.get_running_loop()

        try:
            if self.handle_signals:
                with self.cancel_signal.install_signal_handlers(loop):
                    await self._run(report)
            else:
                await self._run(report)
        except ForkCleanupError as e:
            # Only fetch failures reach here; later errors are handled in _run.
            self._record_error(report, e)
            self.console.print(SessionSummary(self._finalize(report)))

        return self._finalize(report)
