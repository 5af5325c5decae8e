"""Tests for the gh-fork-cleanup command line."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from gh_fork_cleanup import __version__
from gh_fork_cleanup.cli import app
from gh_fork_cleanup.cli.console import reset_console
from gh_fork_cleanup.cli.summary import SessionOutcome, SessionReport
from gh_fork_cleanup.config import SessionConfig

runner = CliRunner()


@pytest.fixture(autouse=True)
def fresh_console() -> Iterator[None]:
    reset_console()
    yield
    reset_console()


@pytest.fixture
def session_runner() -> Iterator[MagicMock]:
    """Patch SessionRunner so no gh calls or prompts happen."""
    with patch("gh_fork_cleanup.cli.SessionRunner") as mock_cls:
        mock_cls.return_value.run = AsyncMock(return_value=SessionReport())
        yield mock_cls


def invoke(tmp_path: Path, *args: str):
    return runner.invoke(app, ["--config", str(tmp_path / "config"), *args])


class TestCleanupCommand:
    """Tests for the cleanup command."""

    def test_version(self) -> None:
        """Test --version prints the version and exits 0."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self) -> None:
        """Test --help documents the flags."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "--force" in result.output
        assert "--skip-confirmation" in result.output

    def test_defaults(self, tmp_path: Path, session_runner: MagicMock) -> None:
        """Test no flags runs an interactive session."""
        result = invoke(tmp_path)

        assert result.exit_code == 0
        config = session_runner.call_args.args[0]
        assert config == SessionConfig(force=False, skip_confirmation=False)
        session_runner.return_value.run.assert_awaited_once()

    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            (["--force"], SessionConfig(force=True)),
            (["-f"], SessionConfig(force=True)),
            (["--skip-confirmation"], SessionConfig(skip_confirmation=True)),
            (["-s", "-f"], SessionConfig(force=True, skip_confirmation=True)),
        ],
    )
    def test_flags(
        self,
        args: list[str],
        expected: SessionConfig,
        tmp_path: Path,
        session_runner: MagicMock,
    ) -> None:
        """Test flags reach the session config."""
        result = invoke(tmp_path, *args)

        assert result.exit_code == 0
        assert session_runner.call_args.args[0] == expected

    def test_settings_file(self, tmp_path: Path, session_runner: MagicMock) -> None:
        """Test settings file values feed the session and client."""
        (tmp_path / "config").write_text(
            "[cleanup]\ngh_path = /opt/gh\npage_size = 25\nskip_confirmation = yes\n"
        )

        result = invoke(tmp_path)

        assert result.exit_code == 0
        config, client = session_runner.call_args.args
        assert config.skip_confirmation is True
        assert client.gh_path == "/opt/gh"
        assert client.page_size == 25

    @pytest.mark.parametrize(
        ("outcome", "code"),
        [
            (SessionOutcome.COMPLETED, 0),
            (SessionOutcome.NOTHING_TO_DO, 0),
            (SessionOutcome.FAILED, 1),
            (SessionOutcome.INTERRUPTED, 130),
        ],
    )
    def test_exit_code(
        self,
        outcome: SessionOutcome,
        code: int,
        tmp_path: Path,
        session_runner: MagicMock,
    ) -> None:
        """Test the process exit status follows the session outcome."""
        session_runner.return_value.run.return_value = SessionReport(outcome=outcome)

        result = invoke(tmp_path)

        assert result.exit_code == code

    def test_keyboard_interrupt(self, tmp_path: Path, session_runner: MagicMock) -> None:
        """Test a KeyboardInterrupt escaping the loop exits 130."""
        session_runner.return_value.run = MagicMock(return_value=None)

        with patch("gh_fork_cleanup.cli.asyncio.run", side_effect=KeyboardInterrupt):
            result = invoke(tmp_path)

        assert result.exit_code == 130
        assert "Interrupted by user" in result.output
