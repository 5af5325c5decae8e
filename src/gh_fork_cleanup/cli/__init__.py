from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from gh_fork_cleanup import __version__
from gh_fork_cleanup.cli.console import get_console
from gh_fork_cleanup.cli.session import SessionRunner
from gh_fork_cleanup.cli.summary import EXIT_INTERRUPTED
from gh_fork_cleanup.config import SessionConfig, load_settings
from gh_fork_cleanup.github import GitHubClient
from gh_fork_cleanup.logging import configure_logging, get_logger

logger = get_logger("cli")


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        get_console().print(f"gh-fork-cleanup [dim]v{__version__}[/dim]")
        raise typer.Exit()


_TYPER_HELP = """Clean up your GitHub forks.

Shows every fork you own, with how far it has drifted from its parent and
any open pull requests opened from it, and asks whether to delete each one.

**Answers:** `y` delete, `n` skip (default), `o` open in the browser first.
Forks with open pull requests need an extra `yes`.
"""

app = typer.Typer(
    add_completion=False,
    help=_TYPER_HELP,
    rich_markup_mode="markdown",
)


@app.command()
def cleanup(
    skip_confirmation: bool = typer.Option(
        False,
        "--skip-confirmation",
        "-s",
        help="Skip confirmation for forks with open pull requests.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Delete all forks without asking. Be careful when using this option.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings file (default: ~/.config/gh-fork-cleanup/config).",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Review your forks one by one and delete the ones you no longer need."""
    settings = load_settings(config)
    configure_logging(verbose=verbose, level=settings.log_level)

    session_config = SessionConfig(
        force=force,
        skip_confirmation=skip_confirmation or settings.skip_confirmation,
    )
    client = GitHubClient(settings.gh_path, page_size=settings.page_size)
    runner = SessionRunner(session_config, client)

    logger.debug(f"Starting session: {session_config}")
    try:
        report = asyncio.run(runner.run())
    except KeyboardInterrupt:
        # Only reached where SIGINT cannot be routed to the cancel signal.
        get_console().print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(EXIT_INTERRUPTED)

    raise typer.Exit(report.exit_code)


def main():
    app()


if __name__ == "__main__":
    main()
