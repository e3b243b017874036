from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Literal

from relcomment.core.config import RunConfig
from relcomment.core.result import Err, Ok, Result
from relcomment.output.console import ConsoleProtocol, Style
from relcomment.release.errors import ReleaseError
from relcomment.release.gh import ForgeProtocol, Target
from relcomment.release.model import MergedPullRequest

ActionKind = Literal["comment", "close", "remove_label"]

_COMMENT_TEMPLATE = (
    "🤖 Hello there,\n\n"
    "We just published version `{version}` which {relation}. "
    "If you'd like to take it for a test run please try it out and let us know what you think!\n\n"
    "Thanks!"
)


def pull_request_comment(version: str) -> str:
    return _COMMENT_TEMPLATE.format(version=version, relation="includes this pull request")


def issue_comment(version: str) -> str:
    return _COMMENT_TEMPLATE.format(version=version, relation="involves this issue")


@dataclass(frozen=True, slots=True)
class ForgeAction:
    """One mutating gh call."""

    kind: ActionKind
    target: Target
    number: int
    body: str | None = None
    label: str | None = None

    def describe(self) -> str:
        where = f"{self.target} #{self.number}"
        match self.kind:
            case "comment":
                return f"comment on {where}"
            case "close":
                return f"close {where}"
            case "remove_label":
                return f"remove label '{self.label}' from {where}"

    def apply(self, forge: ForgeProtocol) -> Result[None, ReleaseError]:
        match self.kind:
            case "comment":
                return forge.comment(self.target, self.number, self.body or "")
            case "close":
                return forge.close_issue(self.number)
            case "remove_label":
                return forge.remove_label(self.target, self.number, self.label or "")


@dataclass(frozen=True, slots=True)
class NotifySummary:
    pull_requests: int
    issues: int
    actions: int
    dry_run: bool


def should_keep_open(
    issue: int,
    *,
    keep_open_label: str | None,
    forge: ForgeProtocol,
    console: ConsoleProtocol,
) -> bool:
    if not keep_open_label:
        return False
    labels = forge.issue_labels(issue)
    if isinstance(labels, Err):
        # Unreadable labels never block the release: fall back to closing.
        console.warning(f"could not read labels of issue #{issue}, it will be closed")
        console.debug(labels.error.hint or labels.error.message)
        return False
    return keep_open_label in labels.value


def plan_actions(
    pr: MergedPullRequest,
    *,
    version: str,
    is_stable: bool,
    config: RunConfig,
    forge: ForgeProtocol,
    console: ConsoleProtocol,
) -> list[ForgeAction]:
    """Mutations for one pull request and its issues (reads issue labels)."""
    actions = [ForgeAction("comment", "pr", pr.number, body=pull_request_comment(version))]
    if config.pr_label_to_remove and is_stable:
        actions.append(
            ForgeAction("remove_label", "pr", pr.number, label=config.pr_label_to_remove)
        )

    for issue in pr.issues:
        actions.append(ForgeAction("comment", "issue", issue, body=issue_comment(version)))
        keep_open = should_keep_open(
            issue, keep_open_label=config.issue_label_keep_open, forge=forge, console=console
        )
        if keep_open:
            console.debug(f"issue #{issue} has '{config.issue_label_keep_open}', leaving it open")
        else:
            actions.append(ForgeAction("close", "issue", issue))
        if config.issue_label_to_remove and is_stable:
            actions.append(
                ForgeAction("remove_label", "issue", issue, label=config.issue_label_to_remove)
            )
    return actions


def _apply_all(
    actions: Sequence[ForgeAction], *, forge: ForgeProtocol, max_workers: int
) -> list[tuple[ForgeAction, ReleaseError]]:
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        outcomes = list(executor.map(lambda a: a.apply(forge), actions))
    return [
        (action, outcome.error)
        for action, outcome in zip(actions, outcomes)
        if isinstance(outcome, Err)
    ]


def notify_release(
    prs: Sequence[MergedPullRequest],
    *,
    version: str,
    is_stable: bool,
    config: RunConfig,
    forge: ForgeProtocol,
    console: ConsoleProtocol,
) -> Result[NotifySummary, ReleaseError]:
    """Comment on each pull request and its issues, closing and unlabelling them.

    Calls for one pull request run concurrently and all of them settle before
    their outcomes are checked; the first pull request with a failed call
    ends the run with every failure of that batch reported. In dry-run mode
    only reads are issued and the planned calls are printed instead.
    """
    issue_count = sum(len(pr.issues) for pr in prs)

    if config.dry_run:
        console.newline()
        console.info("Exiting due to DRY_RUN - found the following PRs and linked issues:")

    total = 0
    for pr in prs:
        actions = plan_actions(
            pr,
            version=version,
            is_stable=is_stable,
            config=config,
            forge=forge,
            console=console,
        )
        total += len(actions)

        if config.dry_run:
            console.print(f" - {config.pull_url(pr.number)}")
            for issue in pr.issues:
                console.print(f"   - {config.issue_url(issue)}")
            for action in actions:
                console.debug(f"would {action.describe()}")
            continue

        console.print(config.pull_url(pr.number))
        for issue in pr.issues:
            console.print(config.issue_url(issue))

        failures = _apply_all(actions, forge=forge, max_workers=config.max_workers)
        if failures:
            console.error("the following commands failed:")
            for action, error in failures:
                console.print(f"  {action.describe()}: {error.hint or error.message}", Style.DIM)
            return Err(
                ReleaseError(
                    kind="notify_failed",
                    message="failed to comment on PRs and issues",
                    hint=f"{len(failures)} of {len(actions)} commands failed for PR #{pr.number}",
                )
            )

    return Ok(
        NotifySummary(
            pull_requests=len(prs),
            issues=issue_count,
            actions=total,
            dry_run=config.dry_run,
        )
    )
