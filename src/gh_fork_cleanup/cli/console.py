"""Centralized console management for the gh-fork-cleanup CLI.

This module provides:
- FORK_THEME: Consistent color theming across all CLI output
- get_console(): Factory function for the themed console instance
- Semantic output helpers: print_success, print_error, etc.
- Spinner configurations for the fetch progress indicator

Example:
    ```python
    from gh_fork_cleanup.cli.console import get_console, print_error

    console = get_console()
    console.print("[fork.name]my-fork[/fork.name]")

    print_error("Error deleting my-fork", hint="Check `gh auth status`")
    ```
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

# =============================================================================
# Theme Definition
# =============================================================================

BRAND_ACCENT = "cyan"

FORK_THEME = Theme(
    {
        "brand": f"bold {BRAND_ACCENT}",
        # Semantic colors
        "info": "blue",
        "success": "green",
        "warning": "yellow",
        "error": "bold red",
        # Fork preview
        "fork.name": "bold green",
        "fork.parent": "blue",
        "fork.archived": "red",
        "fork.stats": "blue",
        "fork.updated": "yellow",
        "fork.risk": "red",
        "pr.title": "yellow",
        "pr.url": "blue",
        # Prompts and outcomes
        "prompt": "magenta",
        "prompt.danger": "bold red",
        "status.skipped": "blue",
        "status.deleting": "red",
        "status.deleted": "green",
        "status.failed": "bold red",
        "hint": "dim italic",
        "muted": "dim",
    }
)


# =============================================================================
# Terminal Capabilities
# =============================================================================


@dataclass(frozen=True)
class TerminalCapabilities:
    """Detected terminal capabilities.

    Attributes:
        color: Whether color output should be used.
        unicode_support: Whether unicode glyphs render.
    """

    color: bool
    unicode_support: bool


def _detect_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    term = os.environ.get("TERM", "").lower()
    if term == "dumb":
        return False
    return sys.stdout.isatty()


def _detect_unicode_support() -> bool:
    """Detect if the terminal supports unicode."""
    encoding = sys.stdout.encoding or ""
    if "utf" in encoding.lower():
        return True

    for var in ("LC_ALL", "LC_CTYPE", "LANG"):
        value = os.environ.get(var, "").lower()
        if "utf-8" in value or "utf8" in value:
            return True

    # Windows Terminal
    return bool(os.environ.get("WT_SESSION"))


@lru_cache(maxsize=1)
def detect_terminal_capabilities() -> TerminalCapabilities:
    """Detect terminal capabilities (cached)."""
    return TerminalCapabilities(
        color=_detect_color(),
        unicode_support=_detect_unicode_support(),
    )


# =============================================================================
# Console Factory
# =============================================================================

_console: Console | None = None


def get_console(*, force_terminal: bool | None = None) -> Console:
    """Get the themed console singleton.

    Args:
        force_terminal: Force terminal mode (for testing).

    Returns:
        Themed Console instance.
    """
    global _console

    if _console is None:
        caps = detect_terminal_capabilities()
        color_system: Literal["auto"] | None = "auto" if caps.color else None
        _console = Console(
            theme=FORK_THEME,
            force_terminal=force_terminal,
            color_system=color_system,
            highlight=False,
        )

    return _console


def reset_console() -> None:
    """Reset the console singleton.

    Useful for testing or when terminal capabilities change.
    """
    global _console
    _console = None
    detect_terminal_capabilities.cache_clear()


# =============================================================================
# Spinner Configurations
# =============================================================================


@dataclass(frozen=True)
class SpinnerConfig:
    """Configuration for a spinner.

    Attributes:
        spinner: Rich spinner name (e.g., "dots", "line").
        text: Default text to display.
    """

    spinner: str
    text: str


SPINNERS: dict[str, SpinnerConfig] = {
    "fetching": SpinnerConfig(spinner="dots", text="Fetching forks"),
    "fetching.ascii": SpinnerConfig(spinner="line", text="Fetching forks"),
}


def get_spinner(name: str) -> SpinnerConfig:
    """Get spinner configuration by name.

    Raises:
        KeyError: If spinner name is not found.
    """
    if name not in SPINNERS:
        raise KeyError(f"Unknown spinner: {name}. Available: {list(SPINNERS.keys())}")
    return SPINNERS[name]


# =============================================================================
# Semantic Output Helpers
# =============================================================================


def print_success(message: str, console: Console | None = None) -> None:
    """Print a success line."""
    console = console or get_console()
    console.print(Text(f"✅ {message}", style="status.deleted"))


def print_error(message: str, hint: str | None = None, console: Console | None = None) -> None:
    """Print an error message.

    Args:
        message: Error message.
        hint: Optional hint for resolution.
        console: Console to print to. Defaults to the singleton.
    """
    console = console or get_console()
    text = Text()
    text.append(message, style="error")

    if hint:
        text.append("\n    ")
        text.append("Hint: ", style="muted")
        text.append(hint, style="hint")

    console.print(text)


def print_warning(message: str, console: Console | None = None) -> None:
    """Print a warning message."""
    console = console or get_console()
    console.print(Text(message, style="warning"))


def print_info(message: str, console: Console | None = None) -> None:
    """Print an info message."""
    console = console or get_console()
    console.print(Text(message, style="info"))


__all__ = [
    "BRAND_ACCENT",
    "FORK_THEME",
    "SPINNERS",
    "SpinnerConfig",
    "TerminalCapabilities",
    "detect_terminal_capabilities",
    "get_console",
    "get_spinner",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "reset_console",
]
