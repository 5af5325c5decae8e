"""Tests for the fetch progress indicator."""

from __future__ import annotations

import asyncio

import pytest
from rich.console import Console

from gh_fork_cleanup.cancel import CancelSignal
from gh_fork_cleanup.cli.console import FORK_THEME
from gh_fork_cleanup.cli.progress import ProgressIndicator


def make_indicator(console, signal=None, **kwargs) -> ProgressIndicator:
    kwargs.setdefault("spinner_name", "fetching.ascii")
    kwargs.setdefault("interval", 0.01)
    return ProgressIndicator(signal or CancelSignal(), console=console, **kwargs)


@pytest.fixture
def terminal_console(output) -> Console:
    return Console(file=output, theme=FORK_THEME, width=120, color_system=None, force_terminal=True)


class TestProgressIndicator:
    """Tests for ProgressIndicator."""

    def test_defaults_from_spinner_config(self, console) -> None:
        """Test the message defaults to the spinner's text."""
        indicator = make_indicator(console)
        assert indicator.message == "Fetching forks"
        assert indicator.frames
        assert not indicator.running

    def test_unknown_spinner(self, console) -> None:
        """Test an unknown spinner name raises KeyError."""
        with pytest.raises(KeyError):
            make_indicator(console, spinner_name="nope")

    @pytest.mark.asyncio
    async def test_animates_and_clears(self, terminal_console, output) -> None:
        """Test frames are written and the line is blanked on stop."""
        indicator = make_indicator(terminal_console, message="Working")

        indicator.start()
        assert indicator.running
        await asyncio.sleep(0.05)
        await indicator.stop()

        text = output.getvalue()
        assert "Working" in text
        assert text.startswith("\r")
        width = len(f"{indicator.frames[0]} Working")
        assert text.endswith("\r" + " " * width + "\r")
        assert not indicator.running

    @pytest.mark.asyncio
    async def test_frames_cycle(self, terminal_console, output) -> None:
        """Test successive ticks show successive frames."""
        indicator = make_indicator(terminal_console, message="Working")

        indicator.start()
        await asyncio.sleep(0.08)
        await indicator.stop()

        text = output.getvalue()
        assert f"{indicator.frames[0]} Working" in text
        assert f"{indicator.frames[1]} Working" in text

    @pytest.mark.asyncio
    async def test_stops_on_cancel(self, console, output) -> None:
        """Test firing the signal ends the animation within a tick."""
        signal = CancelSignal()
        indicator = make_indicator(console, signal)

        indicator.start()
        await asyncio.sleep(0.02)
        signal.fire("sigint")
        await asyncio.sleep(0.05)

        assert not indicator.running
        assert output.getvalue().endswith("\r")
        await indicator.stop()

    @pytest.mark.asyncio
    async def test_already_cancelled(self, console, output) -> None:
        """Test an indicator started after cancellation writes no frames."""
        signal = CancelSignal()
        signal.fire()
        indicator = make_indicator(console, signal)

        indicator.start()
        await indicator.stop()

        assert output.getvalue() == "\r\r"

    @pytest.mark.asyncio
    async def test_no_frames_when_redirected(self, console, output) -> None:
        """Test a non-terminal console gets only the line clear."""
        indicator = make_indicator(console, message="Working")

        indicator.start()
        await asyncio.sleep(0.05)
        assert indicator.running
        await indicator.stop()

        assert output.getvalue() == "\r\r"

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, console) -> None:
        """Test stop without start, and a second stop, are no-ops."""
        indicator = make_indicator(console)
        await indicator.stop()

        indicator.start()
        await indicator.stop()
        await indicator.stop()

    @pytest.mark.asyncio
    async def test_double_start(self, console) -> None:
        """Test starting twice raises RuntimeError."""
        indicator = make_indicator(console)
        indicator.start()
        try:
            with pytest.raises(RuntimeError):
                indicator.start()
        finally:
            await indicator.stop()

    @pytest.mark.asyncio
    async def test_context_manager(self, terminal_console, output) -> None:
        """Test async with starts and stops the indicator."""
        async with make_indicator(terminal_console, message="Working") as indicator:
            assert indicator.running
            await asyncio.sleep(0.02)

        assert not indicator.running
        assert "Working" in output.getvalue()
