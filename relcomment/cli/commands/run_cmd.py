from __future__ import annotations

from pathlib import Path

import typer

from relcomment.cli.commands._helpers import unwrap_or_exit
from relcomment.cli.context import build_context
from relcomment.output.console import Style
from relcomment.release.gh import ensure_gh_available
from relcomment.release.service import resolve_delta, run_release_comment

# Env var names follow GitHub Actions inputs (INPUT_<NAME>).


def _config_option() -> Path | None:
    return typer.Option(None, "--config", help="TOML file with a [release-comment] table")


def _workspace_option() -> Path | None:
    return typer.Option(None, "--workspace", help="Git checkout to inspect (default: cwd)")


def _repository_option() -> str | None:
    return typer.Option(
        None,
        "--repository",
        envvar=["INPUT_GITHUB_REPOSITORY", "GITHUB_REPOSITORY"],
        help="GitHub repository (owner/name)",
    )


def _package_option() -> str | None:
    return typer.Option(
        None,
        "--package-name",
        envvar="INPUT_PACKAGE_NAME",
        help="Follow <name>@<version> tags (default: all tags)",
    )


def _nightly_option() -> bool | None:
    return typer.Option(
        None,
        "--include-nightly/--no-include-nightly",
        envvar="INPUT_INCLUDE_NIGHTLY",
        help="Also follow v0.0.0-nightly-* tags (with --package-name)",
    )


def _verbose_option() -> bool | None:
    return typer.Option(None, "--verbose/--quiet", envvar="RUNNER_DEBUG", help="Debug output")


def _max_workers_option() -> int | None:
    return typer.Option(None, "--max-workers", help="Concurrent gh calls")


def run(
    config: Path | None = _config_option(),
    workspace: Path | None = _workspace_option(),
    repository: str | None = _repository_option(),
    package_name: str | None = _package_option(),
    directory: str | None = typer.Option(
        None,
        "--directory",
        envvar="INPUT_DIRECTORY_TO_CHECK",
        help="Only consider commits touching this path",
    ),
    include_nightly: bool | None = _nightly_option(),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", envvar="INPUT_DRY_RUN", help="Print actions only"
    ),
    pr_label_to_remove: str | None = typer.Option(
        None,
        "--pr-label-to-remove",
        envvar="INPUT_PR_LABELS_TO_REMOVE",
        help="Label to remove from PRs on stable releases",
    ),
    issue_label_to_remove: str | None = typer.Option(
        None,
        "--issue-label-to-remove",
        envvar="INPUT_ISSUE_LABELS_TO_REMOVE",
        help="Label to remove from issues on stable releases",
    ),
    issue_label_keep_open: str | None = typer.Option(
        None,
        "--issue-label-keep-open",
        envvar="INPUT_ISSUE_LABEL_KEEP_OPEN",
        help="Comment on but do not close issues with this label",
    ),
    gh_token: str | None = typer.Option(
        None, "--gh-token", envvar="INPUT_GH_TOKEN", help="Token exported to gh as GH_TOKEN"
    ),
    verbose: bool | None = _verbose_option(),
    max_workers: int | None = _max_workers_option(),
) -> None:
    """Comment on (and close) the PRs and issues shipped in the latest release."""
    ctx = build_context(
        config_path=config,
        workspace=workspace,
        options={
            "repository": repository,
            "package-name": package_name,
            "directory": directory,
            "include-nightly": include_nightly,
            "dry-run": dry_run,
            "pr-label-to-remove": pr_label_to_remove,
            "issue-label-to-remove": issue_label_to_remove,
            "issue-label-keep-open": issue_label_keep_open,
            "gh-token": gh_token,
            "verbose": verbose,
            "max-workers": max_workers,
        },
    )
    unwrap_or_exit(ensure_gh_available(), ctx.console)

    outcome = unwrap_or_exit(
        run_release_comment(ctx.config, vcs=ctx.vcs, forge=ctx.forge, console=ctx.console),
        ctx.console,
    )

    s = outcome.summary
    version = outcome.delta.latest.clean
    if s.dry_run:
        ctx.console.success(
            f"dry run: {s.pull_requests} PRs and {s.issues} issues would be notified for {version}"
        )
    else:
        ctx.console.success(f"notified {s.pull_requests} PRs and {s.issues} issues for {version}")


def delta(
    config: Path | None = _config_option(),
    workspace: Path | None = _workspace_option(),
    repository: str | None = _repository_option(),
    package_name: str | None = _package_option(),
    include_nightly: bool | None = _nightly_option(),
    verbose: bool | None = _verbose_option(),
) -> None:
    """Show the tags bounding the latest release (no GitHub access)."""
    ctx = build_context(
        config_path=config,
        workspace=workspace,
        options={
            "repository": repository,
            "package-name": package_name,
            "include-nightly": include_nightly,
            "verbose": verbose,
        },
    )
    d = unwrap_or_exit(resolve_delta(ctx.config, vcs=ctx.vcs, console=ctx.console), ctx.console)

    ctx.console.print(f"kind:     {d.kind}")
    ctx.console.print(f"latest:   {d.latest.raw}")
    ctx.console.print(f"previous: {d.previous.raw}")
    ctx.console.print(f"range:    {d.range_spec}", Style.DIM)
