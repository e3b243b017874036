"""Release resolution and notification."""

from relcomment.release.boundary import resolve_release_delta
from relcomment.release.errors import ReleaseError
from relcomment.release.model import MergedPullRequest, PullRequest, ReleaseDelta, Tag
from relcomment.release.service import RunOutcome, resolve_delta, run_release_comment

__all__ = [
    "MergedPullRequest",
    "PullRequest",
    "ReleaseDelta",
    "ReleaseError",
    "RunOutcome",
    "Tag",
    "resolve_delta",
    "resolve_release_delta",
    "run_release_comment",
]
