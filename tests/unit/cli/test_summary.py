"""Tests for the completion summary."""

from __future__ import annotations

import pytest

from gh_fork_cleanup.cli.summary import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    SessionOutcome,
    SessionReport,
    SessionSummary,
)
from gh_fork_cleanup.models import Decision


class TestSessionOutcome:
    """Tests for outcome exit codes."""

    @pytest.mark.parametrize(
        ("outcome", "code"),
        [
            (SessionOutcome.COMPLETED, EXIT_OK),
            (SessionOutcome.NOTHING_TO_DO, EXIT_OK),
            (SessionOutcome.INTERRUPTED, EXIT_INTERRUPTED),
            (SessionOutcome.FAILED, EXIT_FAILURE),
        ],
    )
    def test_exit_codes(self, outcome: SessionOutcome, code: int) -> None:
        """Test each outcome maps to its exit code."""
        assert outcome.exit_code == code
        assert SessionReport(outcome=outcome).exit_code == code


class TestSessionReport:
    """Tests for SessionReport counts."""

    def test_counts(self) -> None:
        """Test decisions are counted by kind."""
        report = SessionReport(
            decisions=[
                Decision.deleted("me/a"),
                Decision.skipped("me/b"),
                Decision.skipped("me/c", reason="cancelled"),
                Decision.failed("me/d", "HTTP 403"),
            ]
        )

        assert report.deleted == 1
        assert report.skipped == 2
        assert report.failed == 1

    def test_defaults(self) -> None:
        """Test a fresh report is an empty completed session."""
        report = SessionReport()
        assert report.outcome == SessionOutcome.COMPLETED
        assert report.decisions == []
        assert report.error is None


class TestSessionSummary:
    """Tests for the summary renderable."""

    def test_completed(self, console, output) -> None:
        """Test a completed session shows counts and the closing line."""
        report = SessionReport(decisions=[Decision.deleted("me/a"), Decision.skipped("me/b")])

        console.print(SessionSummary(report))
        text = output.getvalue()

        assert "Deleted" in text
        assert "Skipped" in text
        assert "Failed" not in text
        assert "Process complete!" in text

    def test_failed_row(self, console, output) -> None:
        """Test the failed row appears only when a deletion failed."""
        report = SessionReport(decisions=[Decision.failed("me/a", "HTTP 403")])
        console.print(SessionSummary(report))
        assert "Failed" in output.getvalue()

    def test_no_decisions(self, console, output) -> None:
        """Test a session without decisions shows no counts."""
        console.print(SessionSummary(SessionReport()))
        text = output.getvalue()

        assert "Deleted" not in text
        assert "Process complete!" in text

    def test_interrupted(self, console, output) -> None:
        """Test an interrupted session says so instead of completing."""
        console.print(SessionSummary(SessionReport(outcome=SessionOutcome.INTERRUPTED)))
        text = output.getvalue()

        assert "Interrupted by user" in text
        assert "Process complete!" not in text

    def test_failed(self, console, output) -> None:
        """Test a failed session says it stopped."""
        console.print(SessionSummary(SessionReport(outcome=SessionOutcome.FAILED)))
        assert "Stopped after an error" in output.getvalue()
