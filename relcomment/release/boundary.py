"""Release boundary resolution.

Tags from the nightly, pre-release and stable trains interleave, and
semantic-version ordering alone does not give a linear history across them.
Only creation order is reliable, so each train gets its own rule for which
tag counts as the predecessor of `latest` (the newest tag):

- nightly: the tag right before it in creation order.
- stable, and the first pre-release `pre.0`: the newest other stable tag of
  the same major version, or of the previous major for an x.0.0 release.
- later pre-releases `<label>.N`: the tag named identically but ending in
  `<label>.N-1`, matched by exact name.
"""

from __future__ import annotations

from collections.abc import Sequence

from relcomment.core.result import Err, Ok, Result
from relcomment.release.errors import ReleaseError
from relcomment.release.model import ReleaseDelta, Tag
from relcomment.release.semver import (
    FIRST_PRERELEASE,
    Version,
    classify,
    parse_version,
    prerelease_ordinal,
)


def stable_tags(tags: Sequence[Tag]) -> list[Tag]:
    """Tags whose clean name is a version without pre-release identifiers.

    Tags that do not parse as versions are skipped.
    """
    out: list[Tag] = []
    for tag in tags:
        v = parse_version(tag.clean)
        if v is not None and not v.is_prerelease:
            out.append(tag)
    return out


def expected_previous_major(version: Version) -> int:
    return version.major - 1 if version.is_major_boundary else version.major


def find_previous_stable(
    latest: Tag, version: Version, tags: Sequence[Tag]
) -> Result[Tag, ReleaseError]:
    expected_major = expected_previous_major(version)
    for tag in stable_tags(tags):
        if tag.raw == latest.raw:
            continue
        v = parse_version(tag.clean)
        if v is not None and v.major == expected_major:
            return Ok(tag)

    return Err(
        ReleaseError(
            kind="no_previous_release",
            message=f"no previous stable release found for major version {expected_major}",
            hint=f"latest: {latest.raw}",
        )
    )


def prior_prerelease_name(latest: Tag, label: str, ordinal: int) -> str:
    """Literal rename of the trailing `<label>.N` to `<label>.N-1`."""
    current = f"{label}.{ordinal}"
    head, sep, tail = latest.raw.rpartition(current)
    if not sep:
        return latest.raw
    return f"{head}{label}.{ordinal - 1}{tail}"


def find_prior_prerelease(
    latest: Tag, version: Version, tags: Sequence[Tag]
) -> Result[Tag, ReleaseError]:
    parsed = prerelease_ordinal(version)
    if isinstance(parsed, Err):
        return parsed
    label, ordinal = parsed.value

    wanted = prior_prerelease_name(latest, label, ordinal)
    for tag in tags:
        if tag.raw == wanted:
            return Ok(tag)

    return Err(
        ReleaseError(
            kind="prior_prerelease_missing",
            message=f"unable to find prior pre-release tag {wanted}",
            hint=f"latest: {latest.raw}",
        )
    )


def resolve_release_delta(tags: Sequence[Tag]) -> Result[ReleaseDelta, ReleaseError]:
    """Pick (previous, latest) from tags sorted newest first."""
    if len(tags) < 2:
        return Err(
            ReleaseError(
                kind="no_previous_release",
                message=f"need at least 2 tags to compute a release, found {len(tags)}",
                hint="check the package name and that tags were fetched (git fetch --tags)",
            )
        )

    latest = tags[0]
    kind = classify(latest.clean)
    if isinstance(kind, Err):
        return kind

    if kind.value == "nightly":
        return Ok(ReleaseDelta(previous=tags[1], latest=latest, kind="nightly"))

    version = parse_version(latest.clean)
    if version is None:
        return Err(
            ReleaseError(kind="invalid_version", message=f"not a semantic version: {latest.clean}")
        )

    if kind.value == "stable":
        previous = find_previous_stable(latest, version, tags)
    else:
        ordinal = prerelease_ordinal(version)
        if isinstance(ordinal, Err):
            return ordinal
        if ordinal.value == FIRST_PRERELEASE:
            previous = find_previous_stable(latest, version, tags)
        else:
            previous = find_prior_prerelease(latest, version, tags)

    if isinstance(previous, Err):
        return previous
    return Ok(ReleaseDelta(previous=previous.value, latest=latest, kind=kind.value))
