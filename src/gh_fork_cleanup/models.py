"""Records used across gh-fork-cleanup.

GitHub payloads are parsed into pydantic models (camelCase aliases match
the GraphQL field names). Session-side records (forks under review,
decisions, prompt results) are plain frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "CANCELLED_REASON",
    "BranchRef",
    "CommitComparison",
    "Decision",
    "DecisionKind",
    "ForkItem",
    "Owner",
    "ParentRepository",
    "PromptResult",
    "PromptStatus",
    "PullRequestInfo",
    "Repository",
]

CANCELLED_REASON = "cancelled"


# =============================================================================
# GitHub Payloads
# =============================================================================


class _GitHubModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Owner(_GitHubModel):
    id: str = ""
    login: str = ""


class CommitTarget(_GitHubModel):
    oid: str = ""


class BranchRef(_GitHubModel):
    """A repository's default branch and the commit it points at."""

    name: str = ""
    target: CommitTarget | None = None


class ParentRepository(_GitHubModel):
    name_with_owner: str = Field(default="", alias="nameWithOwner")
    default_branch_ref: BranchRef | None = Field(default=None, alias="defaultBranchRef")


class Repository(_GitHubModel):
    """A fork as returned by the ``viewer.repositories`` query."""

    name: str
    name_with_owner: str = Field(alias="nameWithOwner")
    owner: Owner = Field(default_factory=Owner)
    is_archived: bool = Field(default=False, alias="isArchived")
    updated_at: str = Field(default="", alias="updatedAt")
    parent: ParentRepository | None = None
    default_branch_ref: BranchRef | None = Field(default=None, alias="defaultBranchRef")


class HeadRepository(_GitHubModel):
    name_with_owner: str = Field(default="", alias="nameWithOwner")


class PullRequestInfo(_GitHubModel):
    """An open pull request authored by the viewer."""

    number: int
    title: str = ""
    url: str = ""
    head_repository: HeadRepository | None = Field(default=None, alias="headRepository")

    @property
    def head_name_with_owner(self) -> str:
        return self.head_repository.name_with_owner if self.head_repository else ""


class CommitComparison(_GitHubModel):
    """Divergence between a fork's default branch and its parent's."""

    ahead_by: int = 0
    behind_by: int = 0

    @property
    def diverged(self) -> bool:
        return self.ahead_by > 0 or self.behind_by > 0


# =============================================================================
# Session Records
# =============================================================================


@dataclass(frozen=True)
class ForkItem:
    """One fork under review.

    Attributes:
        repository: Fork metadata.
        pull_requests: Open pull requests whose head is this fork.
        comparison: Ahead/behind counts, when the comparison succeeded.
    """

    repository: Repository
    pull_requests: tuple[PullRequestInfo, ...] = ()
    comparison: CommitComparison | None = None

    @property
    def key(self) -> str:
        """Unique ``owner/name`` identifier."""
        return self.repository.name_with_owner

    @property
    def name(self) -> str:
        return self.repository.name

    @property
    def risky(self) -> bool:
        """True when the fork has open pull requests."""
        return len(self.pull_requests) > 0

    @property
    def url(self) -> str:
        return f"https://github.com/{self.key}"

    def with_comparison(self, comparison: CommitComparison | None) -> ForkItem:
        """Return a copy with ``comparison`` attached."""
        return replace(self, comparison=comparison)


class DecisionKind(str, Enum):
    """Terminal outcome of reviewing one fork."""

    DELETED = "deleted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Decision:
    """Final per-fork outcome.

    Attributes:
        item_key: ``owner/name`` of the fork.
        kind: Deleted, skipped or failed.
        reason: Why the fork was skipped or why deletion failed.
        detail: Confirmation output from a successful deletion.
    """

    item_key: str
    kind: DecisionKind
    reason: str | None = None
    detail: str = ""

    @property
    def cancelled(self) -> bool:
        return self.kind == DecisionKind.SKIPPED and self.reason == CANCELLED_REASON

    @classmethod
    def deleted(cls, item_key: str, detail: str = "") -> Decision:
        return cls(item_key=item_key, kind=DecisionKind.DELETED, detail=detail)

    @classmethod
    def skipped(cls, item_key: str, reason: str | None = None) -> Decision:
        return cls(item_key=item_key, kind=DecisionKind.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, item_key: str, reason: str) -> Decision:
        return cls(item_key=item_key, kind=DecisionKind.FAILED, reason=reason)


class PromptStatus(str, Enum):
    ANSWER = "answer"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class PromptResult:
    """Outcome of one line read.

    Attributes:
        status: Answer, cancelled or failed.
        text: Trimmed, lower-cased answer (empty unless status is ANSWER).
        error: The read failure, when status is FAILED.
    """

    status: PromptStatus
    text: str = ""
    error: BaseException | None = field(default=None, compare=False)

    @classmethod
    def answer(cls, raw: str) -> PromptResult:
        return cls(status=PromptStatus.ANSWER, text=raw.strip().lower())

    @classmethod
    def cancelled(cls) -> PromptResult:
        return cls(status=PromptStatus.CANCELLED)

    @classmethod
    def failed(cls, error: BaseException) -> PromptResult:
        return cls(status=PromptStatus.FAILED, error=error)
