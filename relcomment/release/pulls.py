"""Commit -> pull request -> issue resolution.

Each commit is resolved independently (and concurrently) to the merged pull
request that introduced it, then to the issues that pull request closes.
Issues come from two sources, merged without duplicates:

- GitHub's `closingIssuesReferences` graph, which only covers pull requests
  merged into the default branch;
- closing keywords (`fixes #12`, `Resolves: #3`, ...) in the pull request body.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from relcomment.core.config import DEFAULT_MAX_WORKERS
from relcomment.core.result import Err, Ok, Result, collect
from relcomment.output.console import ConsoleProtocol
from relcomment.release.errors import ReleaseError
from relcomment.release.gh import ForgeProtocol
from relcomment.release.model import MergedPullRequest

# Version bump PRs opened by the release tooling itself.
RELEASE_PR_TITLES = (
    "chore: update version for release",
    "chore: update version for release (pre)",
)

_CLOSING_KEYWORD_RE = re.compile(
    r"(close|closes|closed|fix|fixes|fixed|resolve|resolves|resolved)(:)?\s#([0-9]+)",
    re.IGNORECASE,
)


def is_release_pr_title(title: str) -> bool:
    return title.lower() in RELEASE_PR_TITLES


def issues_closed_via_body(body: str) -> list[int]:
    """Issue numbers referenced with a closing keyword, in order of appearance."""
    if not body:
        return []
    return [int(m.group(3)) for m in _CLOSING_KEYWORD_RE.finditer(body)]


def unique_issues(*sources: Iterable[int]) -> tuple[int, ...]:
    seen: dict[int, None] = {}
    for source in sources:
        for number in source:
            seen.setdefault(number, None)
    return tuple(seen)


def resolve_commit(
    commit: str,
    *,
    forge: ForgeProtocol,
    console: ConsoleProtocol,
) -> Result[MergedPullRequest | None, ReleaseError]:
    """Resolve one commit; Ok(None) when it has no notifiable pull request."""
    found = forge.search_merged_pull_request(commit)
    if isinstance(found, Err):
        return found
    pr = found.value
    if pr is None:
        console.debug(f"no PR found for commit {commit}")
        return Ok(None)

    if is_release_pr_title(pr.title):
        console.debug(f"skipping changeset PR {pr.number}")
        return Ok(None)

    linked = forge.closing_issue_references(pr.url)
    if isinstance(linked, Err):
        return linked
    from_body = issues_closed_via_body(pr.body)
    console.debug(f"#{pr.number}: linked={linked.value} body={from_body}")

    return Ok(MergedPullRequest(number=pr.number, issues=unique_issues(linked.value, from_body)))


def find_merged_pull_requests(
    commits: Sequence[str],
    *,
    forge: ForgeProtocol,
    console: ConsoleProtocol,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Result[list[MergedPullRequest], ReleaseError]:
    """Resolve every commit, keeping commit order.

    One record per commit that maps to a pull request; several commits of the
    same pull request yield several records. Any forge failure fails the
    whole call once all commits have settled.
    """
    if not commits:
        return Ok([])

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        settled = list(
            executor.map(lambda c: resolve_commit(c, forge=forge, console=console), commits)
        )

    resolved = collect(settled)
    if isinstance(resolved, Err):
        return resolved
    return Ok([pr for pr in resolved.value if pr is not None])


def merge_by_number(prs: Iterable[MergedPullRequest]) -> list[MergedPullRequest]:
    """Collapse records of the same pull request, unioning their issues."""
    merged: dict[int, tuple[int, ...]] = {}
    for pr in prs:
        merged[pr.number] = unique_issues(merged.get(pr.number, ()), pr.issues)
    return [MergedPullRequest(number=n, issues=issues) for n, issues in merged.items()]
