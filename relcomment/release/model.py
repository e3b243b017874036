from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ReleaseKind = Literal["stable", "prerelease", "nightly"]


@dataclass(frozen=True, slots=True)
class Tag:
    """A version tag as listed by git.

    `raw` is the tag name (e.g. `remix@2.0.1`); `clean` has the package
    namespace stripped (e.g. `2.0.1`) and is what gets parsed as a version.
    """

    raw: str
    clean: str


@dataclass(frozen=True, slots=True)
class ReleaseDelta:
    """The pair of tags bounding the changes being announced."""

    previous: Tag
    latest: Tag
    kind: ReleaseKind

    @property
    def is_stable(self) -> bool:
        return self.kind == "stable"

    @property
    def range_spec(self) -> str:
        return f"{self.previous.raw}...{self.latest.raw}"


@dataclass(frozen=True, slots=True)
class PullRequest:
    """First merged pull request returned by a commit search."""

    number: int
    title: str
    url: str
    body: str


@dataclass(frozen=True, slots=True)
class MergedPullRequest:
    """A pull request to notify, with the issues it closes (unique, first-seen order)."""

    number: int
    issues: tuple[int, ...]
