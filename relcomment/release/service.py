from __future__ import annotations

from dataclasses import dataclass

from relcomment.core.config import RunConfig
from relcomment.core.result import Err, Ok, Result
from relcomment.output.console import ConsoleProtocol
from relcomment.release.boundary import resolve_release_delta
from relcomment.release.errors import ReleaseError
from relcomment.release.gh import ForgeProtocol
from relcomment.release.git import VcsProtocol
from relcomment.release.model import MergedPullRequest, ReleaseDelta
from relcomment.release.notify import NotifySummary, notify_release
from relcomment.release.pulls import find_merged_pull_requests, merge_by_number


@dataclass(frozen=True, slots=True)
class RunOutcome:
    delta: ReleaseDelta
    commit_count: int
    pull_requests: tuple[MergedPullRequest, ...]
    summary: NotifySummary


def resolve_delta(
    config: RunConfig,
    *,
    vcs: VcsProtocol,
    console: ConsoleProtocol,
) -> Result[ReleaseDelta, ReleaseError]:
    if not config.package_name:
        console.warning("package name is not set, we'll get all tags")

    tags = vcs.list_tags(config.package_name, config.include_nightly)
    if isinstance(tags, Err):
        return tags

    delta = resolve_release_delta(tags.value)
    if isinstance(delta, Err):
        return delta

    d = delta.value
    console.debug(f"{d.kind}: {d.latest.clean}")
    console.debug(f"previous: {d.previous.raw} latest: {d.latest.raw}")
    return delta


def _count_label(n: int) -> str:
    return "1 merged PR" if n == 1 else f"{n} merged PRs"


def collect_pull_requests(
    config: RunConfig,
    delta: ReleaseDelta,
    *,
    vcs: VcsProtocol,
    forge: ForgeProtocol,
    console: ConsoleProtocol,
) -> Result[tuple[int, list[MergedPullRequest]], ReleaseError]:
    """Commits in the delta and the per-commit pull request records."""
    commits = vcs.list_commits(delta.previous, delta.latest, config.directory)
    if isinstance(commits, Err):
        return commits

    prs = find_merged_pull_requests(
        commits.value,
        forge=forge,
        console=console,
        max_workers=config.max_workers,
    )
    if isinstance(prs, Err):
        return prs

    where = config.directory or "the repository"
    console.info(f"found {_count_label(len(prs.value))} that changed {where}")
    return Ok((len(commits.value), prs.value))


def run_release_comment(
    config: RunConfig,
    *,
    vcs: VcsProtocol,
    forge: ForgeProtocol,
    console: ConsoleProtocol,
) -> Result[RunOutcome, ReleaseError]:
    """Resolve the release, find its pull requests and issues, and notify them."""
    delta = resolve_delta(config, vcs=vcs, console=console)
    if isinstance(delta, Err):
        return delta

    found = collect_pull_requests(config, delta.value, vcs=vcs, forge=forge, console=console)
    if isinstance(found, Err):
        return found
    commit_count, records = found.value

    # Several commits may belong to one PR; notify it once.
    prs = merge_by_number(records)

    summary = notify_release(
        prs,
        version=delta.value.latest.clean,
        is_stable=delta.value.is_stable,
        config=config,
        forge=forge,
        console=console,
    )
    if isinstance(summary, Err):
        return summary

    return Ok(
        RunOutcome(
            delta=delta.value,
            commit_count=commit_count,
            pull_requests=tuple(prs),
            summary=summary.value,
        )
    )
