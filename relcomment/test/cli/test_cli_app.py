from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from relcomment import __version__
from relcomment.cli.app import app
from relcomment.core.errors import ErrorCode
from relcomment.core.result import Err, Ok, Result
from relcomment.platform.process import ProcessError
from relcomment.release.errors import ReleaseError

runner = CliRunner()

_ENV_VARS = (
    "GITHUB_REPOSITORY",
    "INPUT_GITHUB_REPOSITORY",
    "INPUT_PACKAGE_NAME",
    "INPUT_DIRECTORY_TO_CHECK",
    "INPUT_INCLUDE_NIGHTLY",
    "INPUT_DRY_RUN",
    "INPUT_PR_LABELS_TO_REMOVE",
    "INPUT_ISSUE_LABELS_TO_REMOVE",
    "INPUT_ISSUE_LABEL_KEEP_OPEN",
    "INPUT_GH_TOKEN",
    "RUNNER_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _fake_process(
    responses: dict[tuple[str, str], str], calls: list[list[str]]
):
    def fake_run(
        cmd: list[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        strict_stderr: bool = False,
    ) -> Result[str, ProcessError]:
        del cwd, env, timeout, strict_stderr
        calls.append(cmd)
        return Ok(responses[(cmd[0], cmd[1])])

    return fake_run


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_repository_is_a_config_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["delta", "--workspace", str(tmp_path)])
    assert result.exit_code == int(ErrorCode.CONFIG_ERROR)


def test_missing_config_file_is_a_config_error(tmp_path: Path) -> None:
    args = ["delta", "--workspace", str(tmp_path), "--config", str(tmp_path / "none.toml")]
    result = runner.invoke(app, args)
    assert result.exit_code == int(ErrorCode.CONFIG_ERROR)


def test_delta(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    from relcomment.release import git as git_mod

    calls: list[list[str]] = []
    responses = {("git", "tag"): "remix@2.1.0-pre.1\nremix@2.1.0-pre.0\nremix@2.0.0\n"}
    monkeypatch.setattr(git_mod, "run_process", _fake_process(responses, calls))

    result = runner.invoke(
        app,
        [
            "delta",
            "--workspace", str(tmp_path),
            "--repository", "remix-run/remix",
            "--package-name", "remix",
            "--no-include-nightly",
        ],
    )  # fmt: skip

    assert result.exit_code == 0, result.output
    assert "latest:   remix@2.1.0-pre.1" in result.output
    assert "previous: remix@2.1.0-pre.0" in result.output
    assert calls[0][:4] == ["git", "tag", "-l", "remix@*"]


def test_config_file_and_env_are_layered(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    from relcomment.release import git as git_mod

    config = tmp_path / "release-comment.toml"
    config.write_text(
        '[release-comment]\nrepository = "remix-run/remix"\npackage-name = "other"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("INPUT_PACKAGE_NAME", "remix")
    calls: list[list[str]] = []
    responses = {("git", "tag"): "remix@2.0.1\nremix@2.0.0\n"}
    monkeypatch.setattr(git_mod, "run_process", _fake_process(responses, calls))

    result = runner.invoke(
        app, ["delta", "--workspace", str(tmp_path), "--config", str(config)]
    )

    assert result.exit_code == 0, result.output
    assert calls[0][3] == "remix@*"


def test_unresolvable_release_exit_code(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    from relcomment.release import git as git_mod

    responses = {("git", "tag"): "remix@2.0.1\n"}
    monkeypatch.setattr(git_mod, "run_process", _fake_process(responses, []))

    result = runner.invoke(
        app,
        ["delta", "--workspace", str(tmp_path), "--repository", "a/b", "--package-name", "remix"],
    )

    assert result.exit_code == int(ErrorCode.RESOLVE_ERROR)


def test_run_requires_gh(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    import relcomment.cli.commands.run_cmd as run_cmd

    def missing_gh() -> Result[None, ReleaseError]:
        return Err(ReleaseError(kind="command_failed", message="gh: missing"))

    monkeypatch.setattr(run_cmd, "ensure_gh_available", missing_gh)

    result = runner.invoke(app, ["run", "--workspace", str(tmp_path), "--repository", "a/b"])

    assert result.exit_code == int(ErrorCode.COMMAND_ERROR)


def test_run_dry_run_from_action_inputs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    import relcomment.cli.commands.run_cmd as run_cmd
    from relcomment.release import gh as gh_mod
    from relcomment.release import git as git_mod

    def gh_present() -> Result[None, ReleaseError]:
        return Ok(None)

    pr = {
        "number": 10,
        "title": "fix: loaders",
        "url": "https://github.com/remix-run/remix/pull/10",
        "body": "Closes #5",
    }
    page = {
        "data": {
            "resource": {
                "closingIssuesReferences": {
                    "nodes": [{"number": 6}],
                    "pageInfo": {"hasNextPage": False, "endCursor": None},
                }
            }
        }
    }
    calls: list[list[str]] = []
    responses = {
        ("git", "tag"): "remix@2.0.1\nremix@2.0.0\n",
        ("git", "log"): "c1\n",
        ("gh", "pr"): json.dumps([pr]),
        ("gh", "api"): json.dumps(page),
    }
    monkeypatch.setattr(run_cmd, "ensure_gh_available", gh_present)
    monkeypatch.setattr(git_mod, "run_process", _fake_process(responses, calls))
    monkeypatch.setattr(gh_mod, "run_process", _fake_process(responses, calls))
    monkeypatch.setenv("GITHUB_REPOSITORY", "remix-run/remix")
    monkeypatch.setenv("INPUT_PACKAGE_NAME", "remix")
    monkeypatch.setenv("INPUT_DRY_RUN", "true")
    monkeypatch.setenv("INPUT_ISSUE_LABEL_KEEP_OPEN", "")

    result = runner.invoke(app, ["run", "--workspace", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "https://github.com/remix-run/remix/pull/10" in result.output
    assert "https://github.com/remix-run/remix/issues/6" in result.output
    assert "https://github.com/remix-run/remix/issues/5" in result.output
    assert not any(c[2] in ("comment", "close", "edit") for c in calls if c[0] == "gh")
    assert not any(c[:3] == ["gh", "issue", "view"] for c in calls)
