"""Shared fixtures for CLI tests."""

from __future__ import annotations

import io
from collections.abc import Callable
from typing import Any

import pytest
from rich.console import Console

from gh_fork_cleanup.cancel import CancelSignal
from gh_fork_cleanup.cli.console import FORK_THEME
from gh_fork_cleanup.models import ForkItem, PromptResult, PullRequestInfo, Repository

# Scripted answer that fires the cancellation signal, like Ctrl-C at a prompt.
CANCEL = "<cancel>"
# Scripted answer that simulates end of input.
EOF = "<eof>"


class ScriptedReader:
    """Stands in for LineReader, answering prompts from a script."""

    def __init__(self, answers: list[Any]) -> None:
        self.answers = list(answers)
        self.prompts = 0

    async def read_line(self, cancel_signal: CancelSignal) -> PromptResult:
        self.prompts += 1
        if cancel_signal.fired:
            return PromptResult.cancelled()
        if not self.answers:
            raise AssertionError("Unexpected prompt: script exhausted")

        answer = self.answers.pop(0)
        if answer == CANCEL:
            cancel_signal.fire("sigint")
            return PromptResult.cancelled()
        if answer == EOF:
            return PromptResult.failed(EOFError("end of input"))
        return PromptResult.answer(answer)


def build_repository(name: str = "proj", owner: str = "me", **overrides: Any) -> Repository:
    node: dict[str, Any] = {
        "name": name,
        "nameWithOwner": f"{owner}/{name}",
        "updatedAt": "2024-05-01T10:00:00Z",
        "isArchived": False,
        "owner": {"login": owner, "id": "U_1"},
        "parent": {
            "nameWithOwner": f"upstream/{name}",
            "defaultBranchRef": {"name": "main", "target": {"oid": "abc"}},
        },
        "defaultBranchRef": {"name": "main", "target": {"oid": "def"}},
    }
    node.update(overrides)
    return Repository.model_validate(node)


def build_fork(name: str = "proj", owner: str = "me", prs: int = 0, **overrides: Any) -> ForkItem:
    pull_requests = tuple(
        PullRequestInfo(
            number=i + 1,
            title=f"Fix number {i + 1}",
            url=f"https://github.com/upstream/{name}/pull/{i + 1}",
        )
        for i in range(prs)
    )
    return ForkItem(
        repository=build_repository(name, owner, **overrides),
        pull_requests=pull_requests,
    )


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> Console:
    return Console(file=output, theme=FORK_THEME, width=120, color_system=None, force_terminal=False)


@pytest.fixture
def make_fork() -> Callable[..., ForkItem]:
    return build_fork


@pytest.fixture
def make_reader() -> Callable[[list[Any]], ScriptedReader]:
    return ScriptedReader


@pytest.fixture
def make_repository() -> Callable[..., Repository]:
    return build_repository
