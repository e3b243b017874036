"""Git collaborator: version tags and commit ranges.

`VcsProtocol` is what the pipeline depends on; `GitCli` implements it by
shelling out to git in the workspace checkout.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

from relcomment.core.result import Err, Ok, Result
from relcomment.output.console import ConsoleProtocol
from relcomment.platform.process import run as run_process
from relcomment.release.errors import ReleaseError, command_failed
from relcomment.release.model import Tag
from relcomment.release.semver import NIGHTLY_PREFIX
from relcomment.release.timeouts import GIT_TIMEOUT_SECONDS


class VcsProtocol(Protocol):
    def list_tags(
        self, package_name: str | None, include_nightly: bool
    ) -> Result[list[Tag], ReleaseError]:
        """Version tags, newest first by creation date."""
        ...

    def list_commits(
        self, previous: Tag, latest: Tag, directory: str | None
    ) -> Result[list[str], ReleaseError]:
        """Commit SHAs in `previous...latest`, optionally limited to a path."""
        ...


def tag_list_args(package_name: str | None, include_nightly: bool) -> list[str]:
    args = ["git", "tag", "-l"]
    if package_name:
        args.append(f"{package_name}@*")
        if include_nightly:
            args.append(f"{NIGHTLY_PREFIX}*")
    args += ["--sort", "-creatordate", "--format", "%(refname:strip=2)"]
    return args


def parse_tag_lines(stdout: str, package_name: str | None) -> list[Tag]:
    prefix = re.compile(rf"^{re.escape(package_name)}@") if package_name else None
    tags: list[Tag] = []
    for line in stdout.splitlines():
        raw = line.strip()
        if not raw:
            continue
        clean = prefix.sub("", raw, count=1) if prefix is not None else raw
        tags.append(Tag(raw=raw, clean=clean))
    return tags


def commit_log_args(previous: Tag, latest: Tag, directory: str | None) -> list[str]:
    args = ["git", "log", "--pretty=format:%H", f"{previous.raw}...{latest.raw}"]
    if directory:
        args += ["--", directory]
    return args


class GitCli:
    """`VcsProtocol` backed by the git executable."""

    def __init__(self, *, workspace_root: Path, console: ConsoleProtocol) -> None:
        self._root = workspace_root
        self._console = console

    def _run(self, cmd: list[str], *, message: str) -> Result[str, ReleaseError]:
        self._console.debug(f"> {' '.join(cmd)}")
        result = run_process(cmd, cwd=self._root, timeout=GIT_TIMEOUT_SECONDS, strict_stderr=True)
        if isinstance(result, Err):
            self._console.error(result.error.detail)
            return Err(command_failed(result.error, message=message))
        return Ok(result.value)

    def list_tags(
        self, package_name: str | None, include_nightly: bool
    ) -> Result[list[Tag], ReleaseError]:
        out = self._run(tag_list_args(package_name, include_nightly), message="git tag failed")
        if isinstance(out, Err):
            return out
        return Ok(parse_tag_lines(out.value, package_name))

    def list_commits(
        self, previous: Tag, latest: Tag, directory: str | None
    ) -> Result[list[str], ReleaseError]:
        out = self._run(commit_log_args(previous, latest, directory), message="git log failed")
        if isinstance(out, Err):
            return out

        commits = [line.strip() for line in out.value.splitlines() if line.strip()]
        self._console.debug(f"> commitCount: {len(commits)}")
        if not commits:
            return Err(
                ReleaseError(
                    kind="empty_range",
                    message=f"no commits between {previous.raw} and {latest.raw}",
                    hint=f"directory: {directory}" if directory else None,
                )
            )
        return Ok(commits)
