"""Typed run configuration.

A `RunConfig` is built exactly once at process entry (from an optional TOML
file, the environment and CLI flags) and handed to every component. Nothing
in the package reads configuration from module globals.

TOML layout (all keys optional except `repository`):

    [release-comment]
    repository = "remix-run/remix"
    package-name = "remix"
    directory = "./packages"
    include-nightly = true
    dry-run = false
    pr-label-to-remove = "awaiting release"
    issue-label-to-remove = "awaiting release"
    issue-label-keep-open = "keep open"
    max-workers = 8
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_table

__all__ = [
    "CONFIG_TABLE",
    "DEFAULT_MAX_WORKERS",
    "ConfigError",
    "RunConfig",
    "config_from_mapping",
    "load_config_table",
    "merge_overrides",
]

CONFIG_TABLE = "release-comment"
DEFAULT_MAX_WORKERS = 8

_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration is missing or invalid."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Options for one release-comment run.

    Attributes:
        repository: GitHub repository as owner/name.
        package_name: Tag namespace to follow (`<name>@<version>` tags);
            None tracks every tag in the repository.
        directory: Restrict commit scanning to this path; None scans the
            whole repository.
        include_nightly: Also follow `v0.0.0-nightly-*` tags (only applies
            when package_name is set).
        dry_run: Report what would be notified without mutating anything.
        verbose: Show debug output.
        pr_label_to_remove: Label removed from pull requests on stable releases.
        issue_label_to_remove: Label removed from issues on stable releases.
        issue_label_keep_open: Issues carrying this label are commented on
            but not closed.
        gh_token: Token exported to `gh` as GH_TOKEN, if given.
        max_workers: Upper bound on concurrent gh invocations.
        workspace_root: Git checkout the tool runs against.
    """

    repository: str
    package_name: str | None = None
    directory: str | None = None
    include_nightly: bool = True
    dry_run: bool = False
    verbose: bool = False
    pr_label_to_remove: str | None = None
    issue_label_to_remove: str | None = None
    issue_label_keep_open: str | None = None
    gh_token: str | None = field(default=None, repr=False)
    max_workers: int = DEFAULT_MAX_WORKERS
    workspace_root: Path = field(default_factory=Path.cwd)

    def pull_url(self, number: int) -> str:
        return f"https://github.com/{self.repository}/pull/{number}"

    def issue_url(self, number: int) -> str:
        return f"https://github.com/{self.repository}/issues/{number}"


def config_from_mapping(
    data: Mapping[str, object],
    *,
    workspace_root: Path,
    path: Path | None = None,
) -> Result[RunConfig, ConfigError]:
    """Validate a flat option mapping (kebab-case keys) into a RunConfig."""
    repository = get_str(data, "repository")
    if repository is None:
        return Err(
            ConfigError(
                "repository is required (--repository, GITHUB_REPOSITORY or config file)",
                path=path,
            )
        )
    if not _REPOSITORY_RE.match(repository):
        return Err(ConfigError(f"repository must be owner/name, got: {repository}", path=path))

    max_workers = get_int(data, "max-workers")
    if max_workers is None:
        max_workers = DEFAULT_MAX_WORKERS
    if max_workers < 1:
        return Err(ConfigError(f"max-workers must be >= 1, got: {max_workers}", path=path))

    include_nightly = get_bool(data, "include-nightly")

    return Ok(
        RunConfig(
            repository=repository,
            package_name=get_str(data, "package-name"),
            directory=get_str(data, "directory"),
            include_nightly=True if include_nightly is None else include_nightly,
            dry_run=bool(get_bool(data, "dry-run")),
            verbose=bool(get_bool(data, "verbose")),
            pr_label_to_remove=get_str(data, "pr-label-to-remove"),
            issue_label_to_remove=get_str(data, "issue-label-to-remove"),
            issue_label_keep_open=get_str(data, "issue-label-keep-open"),
            gh_token=get_str(data, "gh-token"),
            max_workers=max_workers,
            workspace_root=workspace_root,
        )
    )


def load_config_table(path: Path) -> Result[StrDict, ConfigError]:
    """Read the `[release-comment]` table from a TOML file."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))

    table = get_table(data, CONFIG_TABLE)
    if table is None:
        return Err(ConfigError(f"Missing [{CONFIG_TABLE}] table", path=path))
    return Ok(table)


def merge_overrides(base: Mapping[str, object], overrides: Mapping[str, object | None]) -> StrDict:
    """Layer explicitly given options over a base table.

    None and empty strings mean "not given": GitHub Actions passes unset
    inputs as empty environment variables.
    """
    merged: StrDict = dict(base)
    for key, value in overrides.items():
        if value is None or value == "":
            continue
        merged[key] = value
    return merged
