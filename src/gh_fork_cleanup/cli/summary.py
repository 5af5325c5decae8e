"""Completion summary for the gh-fork-cleanup CLI.

This module provides:
- SessionOutcome: How a session ended, and the exit code it maps to
- SessionReport: Decisions and outcome of one session
- SessionSummary: Rich renderable printed when the session ends

Example:
    ```python
    report = SessionReport(outcome=SessionOutcome.COMPLETED, decisions=decisions)
    console.print(SessionSummary(report))
    raise typer.Exit(report.exit_code)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rich.console import Console, ConsoleOptions, RenderResult
from rich.table import Table
from rich.text import Text

from gh_fork_cleanup.models import Decision, DecisionKind

__all__ = [
    "EXIT_FAILURE",
    "EXIT_INTERRUPTED",
    "EXIT_OK",
    "SessionOutcome",
    "SessionReport",
    "SessionSummary",
]

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class SessionOutcome(str, Enum):
    """How a session ended."""

    COMPLETED = "completed"
    NOTHING_TO_DO = "nothing_to_do"
    INTERRUPTED = "interrupted"
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        if self == SessionOutcome.INTERRUPTED:
            return EXIT_INTERRUPTED
        if self == SessionOutcome.FAILED:
            return EXIT_FAILURE
        return EXIT_OK


@dataclass
class SessionReport:
    """Result of one session.

    Attributes:
        outcome: How the session ended.
        decisions: One decision per fork, in fetch order.
        error: The error that ended a failed session.
    """

    outcome: SessionOutcome = SessionOutcome.COMPLETED
    decisions: list[Decision] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code

    def count(self, kind: DecisionKind) -> int:
        return sum(1 for decision in self.decisions if decision.kind == kind)

    @property
    def deleted(self) -> int:
        return self.count(DecisionKind.DELETED)

    @property
    def skipped(self) -> int:
        return self.count(DecisionKind.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(DecisionKind.FAILED)


class SessionSummary:
    """Renders the counts and closing line for a session."""

    def __init__(self, report: SessionReport) -> None:
        self.report = report

    def _render_counts(self) -> Table:
        table = Table(show_header=False, show_edge=False, box=None, padding=(0, 2))
        table.add_column("label", style="muted")
        table.add_column("value", justify="right")

        table.add_row("Deleted", Text(str(self.report.deleted), style="status.deleted"))
        table.add_row("Skipped", Text(str(self.report.skipped), style="status.skipped"))
        if self.report.failed:
            table.add_row("Failed", Text(str(self.report.failed), style="status.failed"))
        return table

    def __rich_console__(
        self,
        console: Console,
        options: ConsoleOptions,
    ) -> RenderResult:
        yield Text()
        if self.report.decisions:
            yield self._render_counts()
            yield Text()

        if self.report.outcome == SessionOutcome.INTERRUPTED:
            yield Text("Interrupted by user", style="warning")
        elif self.report.outcome == SessionOutcome.FAILED:
            yield Text("Stopped after an error", style="error")
        else:
            yield Text("✨ Process complete!", style="brand")
