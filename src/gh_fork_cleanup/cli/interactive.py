"""Interactive fork review for the gh-fork-cleanup CLI.

This module provides:
- ForkPreview: Rich renderable summarizing one fork
- DecisionEngine: Per-fork confirm-then-delete state machine
- open_in_browser: Best-effort browser launcher

Example:
    ```python
    engine = DecisionEngine(
        cancel_signal,
        deleter=client.delete,
        reader=LineReader(),
        skip_confirmation=False,
    )
    console.print(ForkPreview(item))
    decision = await engine.review(item)
    ```
"""

from __future__ import annotations

import webbrowser
from collections.abc import Awaitable, Callable
from enum import Enum

from rich.console import Console, ConsoleOptions, RenderResult
from rich.text import Text

from gh_fork_cleanup.cancel import CancelSignal
from gh_fork_cleanup.cli.console import (
    get_console,
    print_error,
    print_success,
    print_warning,
)
from gh_fork_cleanup.cli.reader import LineReader
from gh_fork_cleanup.errors import DeletionError, InputReadError, SessionCancelled
from gh_fork_cleanup.logging import get_logger
from gh_fork_cleanup.models import (
    CANCELLED_REASON,
    Decision,
    ForkItem,
    PromptStatus,
    Repository,
)

__all__ = [
    "DELETE_PROMPT",
    "REPROMPT",
    "RISK_PROMPT",
    "DecisionEngine",
    "ForkPreview",
    "ReviewState",
    "open_in_browser",
]

logger = get_logger("cli.interactive")

DELETE_PROMPT = "❔ Delete this repository? (y/n/o to open in browser, default n): "
REPROMPT = "❔ Delete this repository? (y/n, default n): "
RISK_PROMPT = "❗ This fork has open PRs. Are you ABSOLUTELY sure you want to delete it? (yes/N): "

DELETE_SCOPE_HINT = "Deleting needs the delete_repo scope: `gh auth refresh -s delete_repo`."


class ReviewState(str, Enum):
    """States of the per-fork review."""

    PROMPTED = "prompted"
    BROWSER_OPENED = "browser_opened"
    REPROMPTED = "reprompted"
    AWAITING_RISK_CONFIRM = "awaiting_risk_confirm"
    DELETE = "delete"
    SKIP = "skip"


# =============================================================================
# Fork Preview
# =============================================================================


class ForkPreview:
    """Rich renderable for the fork summary shown before each prompt."""

    def __init__(self, item: ForkItem) -> None:
        self.item = item

    def __rich_console__(
        self,
        console: Console,
        options: ConsoleOptions,
    ) -> RenderResult:
        repo = self.item.repository
        yield Text()
        yield Text(f"📂 Repository: {self.item.name}", style="fork.name")

        parent = repo.parent.name_with_owner if repo.parent else "unknown"
        yield Text(f"   🔄 Forked from: {parent}", style="fork.parent")

        if repo.is_archived:
            yield Text("   📦 This repository is archived", style="fork.archived")

        comparison = self.item.comparison
        if comparison is not None and comparison.diverged:
            yield Text(
                f"   📊 Commits: {comparison.ahead_by} ahead, {comparison.behind_by} behind",
                style="fork.stats",
            )

        if self.item.risky:
            yield Text(
                f"   ⚠️ Has {len(self.item.pull_requests)} open pull request(s):",
                style="fork.risk",
            )
            for pr in self.item.pull_requests:
                yield Text(f"      #{pr.number}: {pr.title}", style="pr.title")
                yield Text(f"      URL: {pr.url}", style="pr.url")

        yield Text(f"   📅 Last updated: {repo.updated_at}", style="fork.updated")


# =============================================================================
# Browser
# =============================================================================


def open_in_browser(url: str) -> bool:
    """Open ``url`` in the default browser.

    Returns:
        True if a browser accepted the URL. Failures are logged, never raised.
    """
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        logger.warning(f"Error opening URL {url}: {e}")
        return False
    if not opened:
        logger.warning(f"No browser available to open {url}")
    return opened


# =============================================================================
# Decision Engine
# =============================================================================


class DecisionEngine:
    """Asks the operator what to do with each fork and carries it out.

    Every prompt goes through the LineReader, so cancellation is observed
    at each prompt boundary. A cancelled review resolves to a skipped
    decision with reason ``"cancelled"``; the caller stops processing
    further forks when it sees one.
    """

    def __init__(
        self,
        cancel_signal: CancelSignal,
        *,
        deleter: Callable[[Repository], Awaitable[str]],
        reader: LineReader | None = None,
        opener: Callable[[str], bool] = open_in_browser,
        console: Console | None = None,
        force: bool = False,
        skip_confirmation: bool = False,
    ) -> None:
        """Initialize the engine.

        Args:
            cancel_signal: Session cancellation signal.
            deleter: Deletes a fork, returning gh's confirmation output.
            reader: Operator input reader.
            opener: Opens a URL in a browser, returning success.
            console: Console for prompts and results.
            force: Delete without prompting.
            skip_confirmation: Skip the "yes" confirmation for forks with
                open pull requests.
        """
        self.cancel_signal = cancel_signal
        self.deleter = deleter
        self.reader = reader or LineReader()
        self.opener = opener
        self.console = console or get_console()
        self.force = force
        self.skip_confirmation = skip_confirmation

    async def _ask(self, prompt: str, style: str = "prompt") -> str:
        """Prompt once and return the normalized answer.

        Raises:
            SessionCancelled: If cancellation fired before an answer arrived.
            InputReadError: If input could not be read.
        """
        self.console.print(Text(prompt, style=style), end="")
        result = await self.reader.read_line(self.cancel_signal)

        if result.status == PromptStatus.CANCELLED:
            self.console.print()
            raise SessionCancelled(self.cancel_signal.reason or "interrupt")
        if result.status == PromptStatus.FAILED:
            self.console.print()
            raise InputReadError(f"Error reading input: {result.error}") from result.error
        return result.text

    async def _resolve(self, item: ForkItem) -> ReviewState:
        """Run the prompt chain until it reaches DELETE or SKIP."""
        state = ReviewState.PROMPTED
        answer = ""

        while state not in (ReviewState.DELETE, ReviewState.SKIP):
            logger.debug(f"{item.key}: {state.value}")

            if state == ReviewState.PROMPTED:
                answer = await self._ask(DELETE_PROMPT)
                state = ReviewState.BROWSER_OPENED if answer == "o" else self._after_yes(item, answer)

            elif state == ReviewState.BROWSER_OPENED:
                if not self.opener(item.url):
                    print_warning(f"Could not open {item.url}", console=self.console)
                state = ReviewState.REPROMPTED

            elif state == ReviewState.REPROMPTED:
                answer = await self._ask(REPROMPT)
                state = self._after_yes(item, answer)

            elif state == ReviewState.AWAITING_RISK_CONFIRM:
                answer = await self._ask(RISK_PROMPT, style="prompt.danger")
                state = ReviewState.DELETE if answer == "yes" else ReviewState.SKIP

        return state

    def _after_yes(self, item: ForkItem, answer: str) -> ReviewState:
        if answer != "y":
            return ReviewState.SKIP
        if item.risky and not self.skip_confirmation:
            return ReviewState.AWAITING_RISK_CONFIRM
        return ReviewState.DELETE

    async def _delete(self, item: ForkItem) -> Decision:
        self.console.print(Text(f"🗑️  Deleting {item.key}...", style="status.deleting"))
        try:
            detail = await self.deleter(item.repository)
        except DeletionError as e:
            hint = DELETE_SCOPE_HINT if "403" in str(e) or "delete_repo" in str(e) else None
            print_error(str(e), hint=hint, console=self.console)
            return Decision.failed(item.key, str(e))

        print_success(f"Successfully deleted {item.key}.", console=self.console)
        return Decision.deleted(item.key, detail=detail)

    async def review(self, item: ForkItem) -> Decision:
        """Review one fork and return its decision.

        Raises:
            InputReadError: If operator input could not be read.
        """
        if self.force:
            return await self._delete(item)

        try:
            state = await self._resolve(item)
        except SessionCancelled:
            logger.debug(f"{item.key}: review cancelled")
            return Decision.skipped(item.key, reason=CANCELLED_REASON)

        if state == ReviewState.DELETE:
            return await self._delete(item)

        self.console.print(Text(f"⏭️  Skipping {item.key}...", style="status.skipped"))
        return Decision.skipped(item.key)
