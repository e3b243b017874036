from __future__ import annotations

import re
from dataclasses import dataclass

from relcomment.core.result import Err, Ok, Result
from relcomment.release.errors import ReleaseError
from relcomment.release.model import ReleaseKind


NIGHTLY_PREFIX = "v0.0.0-nightly-"
FIRST_PRERELEASE = ("pre", 0)

_IDENT = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
_SEMVER_RE = re.compile(
    r"^[v=]?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_IDENT}(?:\.{_IDENT})*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str | int, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def is_major_boundary(self) -> bool:
        """True for x.0.0 (and its pre-releases)."""
        return self.minor == 0 and self.patch == 0

    @property
    def prerelease_text(self) -> str:
        return ".".join(str(p) for p in self.prerelease)


def parse_version(text: str) -> Version | None:
    """Parse a semantic version; a leading `v` or `=` is tolerated."""
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    pre: tuple[str | int, ...] = ()
    if m.group(4):
        pre = tuple(int(p) if p.isdigit() else p for p in m.group(4).split("."))
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre)


def is_nightly(clean: str) -> bool:
    return clean.startswith(NIGHTLY_PREFIX)


def is_stable(clean: str) -> bool:
    """True for a valid version without pre-release identifiers."""
    v = parse_version(clean)
    return v is not None and not v.is_prerelease


def classify(clean: str) -> Result[ReleaseKind, ReleaseError]:
    # Nightly tags are also valid pre-release versions, so check them first.
    if is_nightly(clean):
        return Ok("nightly")
    v = parse_version(clean)
    if v is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"not a semantic version: {clean}",
            )
        )
    return Ok("prerelease" if v.is_prerelease else "stable")


def prerelease_ordinal(version: Version) -> Result[tuple[str, int], ReleaseError]:
    """Split `label.N` pre-release identifiers, e.g. `pre.3` -> ("pre", 3)."""
    pre = version.prerelease
    if len(pre) != 2 or not isinstance(pre[0], str) or not isinstance(pre[1], int):
        return Err(
            ReleaseError(
                kind="invalid_prerelease",
                message=f"unable to parse pre-release: {version.prerelease_text or '<none>'}",
                hint="expected <label>.<number>, e.g. pre.2",
            )
        )
    return Ok((pre[0], pre[1]))
