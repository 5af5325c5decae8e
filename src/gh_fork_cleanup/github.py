"""GitHub access through the gh CLI.

Every call runs ``gh`` as an asyncio subprocess, so fetches are ordinary
awaits that the session can race against cancellation. Authentication is
whatever ``gh auth`` already has.

Example:
    ```python
    client = GitHubClient()
    pull_requests = await client.fetch_open_pull_requests()
    forks = await client.fetch_forks()
    items = build_items(forks, pull_requests)
    ```
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from gh_fork_cleanup.errors import (
    ComparisonError,
    DeletionError,
    FetchError,
    GitHubCLIError,
)
from gh_fork_cleanup.logging import get_logger
from gh_fork_cleanup.models import (
    CommitComparison,
    ForkItem,
    PullRequestInfo,
    Repository,
)

__all__ = ["GitHubClient", "build_items"]

logger = get_logger("github")

PAGE_SIZE = 100
MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0


# =============================================================================
# GraphQL Queries
# =============================================================================

FORKS_QUERY = """
query($first: Int!, $after: String) {
  viewer {
    repositories(first: $first, after: $after, isFork: true,
                 orderBy: {field: UPDATED_AT, direction: DESC}) {
      nodes {
        name
        nameWithOwner
        updatedAt
        isArchived
        owner { login id }
        parent {
          nameWithOwner
          defaultBranchRef { name target { oid } }
        }
        defaultBranchRef { name target { oid } }
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

OPEN_PULL_REQUESTS_QUERY = """
query($first: Int!, $after: String) {
  viewer {
    pullRequests(states: [OPEN], first: $first, after: $after) {
      nodes {
        headRepository { nameWithOwner }
        number
        title
        url
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""


def _is_retryable(stderr: str) -> tuple[bool, bool]:
    """Return (is_rate_limit, is_server_error) for a failed call."""
    is_rate_limit = "rate limit" in stderr.lower()
    is_server_error = any(code in stderr for code in ("500", "502", "503"))
    return is_rate_limit, is_server_error


class GitHubClient:
    """Thin async wrapper around the gh CLI."""

    def __init__(
        self,
        gh_path: str = "gh",
        *,
        page_size: int = PAGE_SIZE,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = RETRY_BASE_DELAY,
    ) -> None:
        self.gh_path = gh_path
        self.page_size = page_size
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    async def _exec(self, *args: str) -> tuple[int, str, str]:
        """Run gh once. Returns (returncode, stdout, stderr)."""
        try:
            process = await asyncio.create_subprocess_exec(
                self.gh_path,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise GitHubCLIError(
                " ".join([self.gh_path, *args[:2]]),
                f"{self.gh_path} not found; install the GitHub CLI",
                127,
            ) from e
        except OSError as e:
            raise GitHubCLIError(
                " ".join([self.gh_path, *args[:2]]),
                f"cannot run {self.gh_path}: {e}",
                126,
            ) from e

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        return (
            process.returncode or 0,
            stdout.decode(errors="replace").strip(),
            stderr.decode(errors="replace").strip(),
        )

    async def run(self, *args: str) -> str:
        """Run ``gh <args>`` with retry and rate-limit backoff.

        Returns:
            Stripped stdout.

        Raises:
            GitHubCLIError: If the command fails after retries.
        """
        command = " ".join([self.gh_path, *args[:2]])
        last_error: GitHubCLIError | None = None

        for attempt in range(self.max_retries):
            returncode, stdout, stderr = await self._exec(*args)
            if returncode == 0:
                return stdout

            last_error = GitHubCLIError(command, stderr or stdout, returncode)
            is_rate_limit, is_server_error = _is_retryable(stderr)
            if not (is_rate_limit or is_server_error) or attempt == self.max_retries - 1:
                break

            delay = self.retry_base_delay * (2**attempt)
            reason = "Rate limited" if is_rate_limit else "Server error"
            # The fetch spinner owns the terminal line during retries.
            logger.debug(f"{reason}. Retrying in {delay:.0f}s...")
            await asyncio.sleep(delay)

        if last_error is not None:
            raise last_error

        raise RuntimeError("Unexpected: no attempts were made")

    async def _graphql_pages(self, query: str, connection: str) -> list[dict[str, Any]]:
        """Collect every node of a paginated ``viewer.<connection>`` query."""
        nodes: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            args = [
                "api",
                "graphql",
                "-f",
                f"query={query}",
                "-F",
                f"first={self.page_size}",
            ]
            if cursor:
                args.extend(["-f", f"after={cursor}"])

            raw = await self.run(*args)
            try:
                data = json.loads(raw)
                page = data["data"]["viewer"][connection]
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                raise FetchError(f"Error parsing GraphQL response: {e}") from e

            nodes.extend(node for node in page.get("nodes") or [] if node)
            page_info = page.get("pageInfo") or {}
            logger.debug(f"Fetched {len(nodes)} {connection} so far")

            if not page_info.get("hasNextPage"):
                return nodes
            cursor = page_info.get("endCursor")
            if not cursor:
                return nodes

    async def fetch_forks(self) -> list[Repository]:
        """Fetch all of the viewer's forks, most recently updated first.

        Raises:
            FetchError: If the query or parsing fails.
        """
        try:
            nodes = await self._graphql_pages(FORKS_QUERY, "repositories")
            return [Repository.model_validate(node) for node in nodes]
        except GitHubCLIError as e:
            raise FetchError(f"Error fetching forks: {e}") from e
        except ValidationError as e:
            raise FetchError(f"Unexpected fork payload: {e}") from e

    async def fetch_open_pull_requests(self) -> dict[str, list[PullRequestInfo]]:
        """Fetch the viewer's open PRs grouped by head repository.

        Returns:
            Mapping of ``owner/name`` to the PRs opened from that repository.
            PRs whose head repository no longer exists are dropped.

        Raises:
            FetchError: If the query or parsing fails.
        """
        try:
            nodes = await self._graphql_pages(OPEN_PULL_REQUESTS_QUERY, "pullRequests")
            pull_requests = [PullRequestInfo.model_validate(node) for node in nodes]
        except GitHubCLIError as e:
            raise FetchError(f"Error fetching open PRs: {e}") from e
        except ValidationError as e:
            raise FetchError(f"Unexpected pull request payload: {e}") from e

        grouped: dict[str, list[PullRequestInfo]] = {}
        for pr in pull_requests:
            if pr.head_name_with_owner:
                grouped.setdefault(pr.head_name_with_owner, []).append(pr)
        return grouped

    async def compare(self, repository: Repository) -> CommitComparison:
        """Compare a fork's default branch with its parent's.

        Raises:
            ComparisonError: If branch information is missing or the call fails.
        """
        parent = repository.parent
        if (
            parent is None
            or not parent.name_with_owner
            or parent.default_branch_ref is None
            or not parent.default_branch_ref.name
            or repository.default_branch_ref is None
            or not repository.default_branch_ref.name
        ):
            raise ComparisonError("missing required repository information")

        endpoint = (
            f"repos/{parent.name_with_owner}/compare/"
            f"{parent.default_branch_ref.name}..."
            f"{repository.owner.login}:{repository.default_branch_ref.name}"
        )
        try:
            raw = await self.run("api", endpoint)
            return CommitComparison.model_validate_json(raw)
        except GitHubCLIError as e:
            raise ComparisonError(f"Error comparing repositories: {e}") from e
        except ValidationError as e:
            raise ComparisonError(f"Error parsing comparison response: {e}") from e

    async def delete(self, repository: Repository) -> str:
        """Delete a fork.

        Returns:
            gh's confirmation output (may be empty).

        Raises:
            DeletionError: If gh reports a failure.
        """
        try:
            return await self.run("repo", "delete", repository.name_with_owner, "--yes")
        except GitHubCLIError as e:
            raise DeletionError(repository.name_with_owner, e.stderr or str(e)) from e


def build_items(
    repositories: Sequence[Repository],
    pull_requests: dict[str, list[PullRequestInfo]],
) -> list[ForkItem]:
    """Pair each fork with its open PRs, preserving fetch order."""
    return [
        ForkItem(
            repository=repo,
            pull_requests=tuple(pull_requests.get(repo.name_with_owner, ())),
        )
        for repo in repositories
    ]
