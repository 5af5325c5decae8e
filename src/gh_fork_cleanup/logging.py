"""Logging setup for gh-fork-cleanup.

Loggers are namespaced under ``gh_fork_cleanup`` so a single handler on the
package logger controls everything. Log records go to stderr through a
Rich handler; operator-facing prompts and results are printed through the
console helpers instead.

Example:
    ```python
    from gh_fork_cleanup.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    logger = get_logger("github")
    logger.debug("Fetching page %d", 2)
    ```
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging", "get_logger"]

ROOT_LOGGER = "gh_fork_cleanup"


def get_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under the package logger.

    Args:
        name: Dotted logger suffix (e.g., "cli.session").

    Returns:
        Logger named ``gh_fork_cleanup.<name>``.
    """
    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(verbose: bool = False, level: str | int = logging.WARNING) -> None:
    """Attach a Rich stderr handler to the package logger.

    Calling this more than once replaces the previous handler.

    Args:
        verbose: Force DEBUG level.
        level: Level used when not verbose (name or number).
    """
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else level)
    logger.propagate = False
