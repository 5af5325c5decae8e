"""Exception taxonomy for gh-fork-cleanup.

Errors from session-wide setup (fetching forks or pull requests, reading
operator input) abort the run. Errors from single-fork operations
(comparison, deletion) are contained at the fork level by the session.

Cancellation is not a ``ForkCleanupError``. It is an outcome, not a
failure, and it wins over any error observed at the same time.
"""

from __future__ import annotations

__all__ = [
    "ComparisonError",
    "DeletionError",
    "FetchError",
    "ForkCleanupError",
    "GitHubCLIError",
    "InputReadError",
    "SessionCancelled",
]


class ForkCleanupError(Exception):
    """Base class for all recoverable gh-fork-cleanup errors."""


class GitHubCLIError(ForkCleanupError):
    """Raised when a gh CLI command fails."""

    def __init__(self, command: str, stderr: str, returncode: int) -> None:
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"gh failed (exit {returncode}): {stderr}")


class FetchError(ForkCleanupError):
    """Fetching forks or open pull requests failed."""


class ComparisonError(ForkCleanupError):
    """Comparing a fork against its parent failed."""


class DeletionError(ForkCleanupError):
    """Deleting a fork failed."""

    def __init__(self, repository: str, message: str) -> None:
        self.repository = repository
        super().__init__(f"Error deleting {repository}: {message}")


class InputReadError(ForkCleanupError):
    """Operator input could not be read (end of input or device error)."""


class SessionCancelled(Exception):
    """The operator cancelled the session (Ctrl-C or SIGTERM)."""

    def __init__(self, reason: str = "interrupt") -> None:
        self.reason = reason
        super().__init__(f"Session cancelled ({reason})")
