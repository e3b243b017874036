from __future__ import annotations

from pathlib import Path

from relcomment.core.config import RunConfig
from relcomment.core.result import Err, Ok
from relcomment.output.console import MockConsole
from relcomment.release.model import MergedPullRequest
from relcomment.release.notify import (
    ForgeAction,
    issue_comment,
    notify_release,
    plan_actions,
    pull_request_comment,
)

from fakes import FakeForge


def _config(tmp_path: Path, **kwargs: object) -> RunConfig:
    return RunConfig(
        repository="remix-run/remix",
        workspace_root=tmp_path,
        **kwargs,  # type: ignore[arg-type]
    )


def test_comment_templates_name_the_version() -> None:
    assert "`2.0.1` which includes this pull request" in pull_request_comment("2.0.1")
    assert "`2.0.1` which involves this issue" in issue_comment("2.0.1")
    assert pull_request_comment("2.0.1").startswith("🤖 Hello there,")


def test_live_run_comments_and_closes(forge: FakeForge, tmp_path: Path) -> None:
    console = MockConsole()
    prs = [MergedPullRequest(number=10, issues=(5, 6))]

    result = notify_release(
        prs,
        version="2.0.1",
        is_stable=True,
        config=_config(tmp_path),
        forge=forge,
        console=console,
    )

    assert result.is_ok()
    assert sorted(forge.mutations) == sorted(
        [
            ("comment", "pr", 10, pull_request_comment("2.0.1")),
            ("comment", "issue", 5, issue_comment("2.0.1")),
            ("close", "issue", 5),
            ("comment", "issue", 6, issue_comment("2.0.1")),
            ("close", "issue", 6),
        ]
    )
    assert "https://github.com/remix-run/remix/pull/10" in console.messages
    assert "https://github.com/remix-run/remix/issues/6" in console.messages


def test_labels_removed_only_for_stable_releases(forge: FakeForge, tmp_path: Path) -> None:
    config = _config(
        tmp_path, pr_label_to_remove="awaiting release", issue_label_to_remove="awaiting release"
    )
    pr = MergedPullRequest(number=10, issues=(5,))

    stable = plan_actions(
        pr, version="2.0.1", is_stable=True, config=config, forge=forge, console=MockConsole()
    )
    pre = plan_actions(
        pr,
        version="2.1.0-pre.1",
        is_stable=False,
        config=config,
        forge=forge,
        console=MockConsole(),
    )

    assert ForgeAction("remove_label", "pr", 10, label="awaiting release") in stable
    assert ForgeAction("remove_label", "issue", 5, label="awaiting release") in stable
    assert all(a.kind != "remove_label" for a in pre)


def test_keep_open_label_prevents_close(forge: FakeForge, tmp_path: Path) -> None:
    forge.labels = {5: ["bug", "keep open"], 6: ["bug"]}
    config = _config(tmp_path, issue_label_keep_open="keep open")

    actions = plan_actions(
        MergedPullRequest(number=10, issues=(5, 6)),
        version="2.0.1",
        is_stable=True,
        config=config,
        forge=forge,
        console=MockConsole(),
    )

    closes = [a.number for a in actions if a.kind == "close"]
    comments = [a.number for a in actions if a.kind == "comment" and a.target == "issue"]
    assert closes == [6]
    assert comments == [5, 6]


def test_label_fetch_failure_defaults_to_close(forge: FakeForge, tmp_path: Path) -> None:
    forge.fail_labels = {5}
    console = MockConsole()

    actions = plan_actions(
        MergedPullRequest(number=10, issues=(5,)),
        version="2.0.1",
        is_stable=True,
        config=_config(tmp_path, issue_label_keep_open="keep open"),
        forge=forge,
        console=console,
    )

    assert ForgeAction("close", "issue", 5) in actions
    assert console.has_warning()


def test_labels_not_fetched_without_keep_open_label(forge: FakeForge, tmp_path: Path) -> None:
    plan_actions(
        MergedPullRequest(number=10, issues=(5,)),
        version="2.0.1",
        is_stable=True,
        config=_config(tmp_path),
        forge=forge,
        console=MockConsole(),
    )
    assert not any(c[0] == "labels" for c in forge.calls)


def test_dry_run_never_mutates(forge: FakeForge, tmp_path: Path) -> None:
    forge.labels = {5: ["keep open"]}
    console = MockConsole()
    config = _config(
        tmp_path,
        dry_run=True,
        pr_label_to_remove="awaiting release",
        issue_label_keep_open="keep open",
    )

    result = notify_release(
        [MergedPullRequest(number=10, issues=(5, 6))],
        version="2.0.1",
        is_stable=True,
        config=config,
        forge=forge,
        console=console,
    )

    assert isinstance(result, Ok)
    assert result.value.dry_run
    assert result.value.issues == 2
    assert forge.mutations == []
    assert " - https://github.com/remix-run/remix/pull/10" in console.messages
    assert "   - https://github.com/remix-run/remix/issues/5" in console.messages
    assert console.find("would close issue #6")
    assert not console.find("would close issue #5")


def test_failures_are_collected_and_reported(forge: FakeForge, tmp_path: Path) -> None:
    forge.fail_actions = {("comment", "issue", 5), ("close", "issue", 6)}
    console = MockConsole()

    result = notify_release(
        [MergedPullRequest(number=10, issues=(5, 6)), MergedPullRequest(number=11, issues=())],
        version="2.0.1",
        is_stable=True,
        config=_config(tmp_path),
        forge=forge,
        console=console,
    )

    assert isinstance(result, Err)
    assert result.error.kind == "notify_failed"
    assert "2 of 5" in (result.error.hint or "")
    # every call of the failing batch still ran
    assert len(forge.mutations) == 5
    assert console.find("comment on issue #5")
    assert console.find("close issue #6")
    # the next pull request is not notified
    assert not any(m[2] == 11 for m in forge.mutations)
