"""GitHub collaborator (via the `gh` CLI).

`ForgeProtocol` is what the pipeline depends on; `GhCli` implements it.
Every JSON payload is validated here; callers only ever see typed values,
an `invalid_shape` error, or a `command_failed` error.
"""

from __future__ import annotations

import json
import os
import shutil
from collections.abc import Iterator
from pathlib import Path
from typing import Literal, Protocol

from relcomment.core.result import Err, Ok, Result
from relcomment.core.structured import (
    as_obj_list,
    as_str_dict,
    get_int,
    get_list,
    get_raw_str,
    get_str,
    get_table,
)
from relcomment.output.console import ConsoleProtocol
from relcomment.platform.process import run as run_process
from relcomment.release.errors import ReleaseError, command_failed, invalid_shape
from relcomment.release.model import PullRequest
from relcomment.release.timeouts import GH_TIMEOUT_SECONDS

Target = Literal["pr", "issue"]

CLOSING_ISSUES_QUERY = """\
query ($prHtmlUrl: URI!, $endCursor: String) {
  resource(url: $prHtmlUrl) {
    ... on PullRequest {
      closingIssuesReferences(first: 100, after: $endCursor) {
        nodes {
          number
        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
    }
  }
}"""


class ForgeProtocol(Protocol):
    def search_merged_pull_request(self, commit: str) -> Result[PullRequest | None, ReleaseError]:
        """First merged pull request containing the commit, if any."""
        ...

    def closing_issue_references(self, pr_url: str) -> Result[list[int], ReleaseError]:
        """Issue numbers GitHub links to the pull request as closed by it."""
        ...

    def issue_labels(self, number: int) -> Result[list[str], ReleaseError]: ...

    def comment(self, target: Target, number: int, body: str) -> Result[None, ReleaseError]: ...

    def close_issue(self, number: int) -> Result[None, ReleaseError]: ...

    def remove_label(
        self, target: Target, number: int, label: str
    ) -> Result[None, ReleaseError]: ...


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="command_failed",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def iter_json_documents(text: str) -> Iterator[object]:
    """Yield each JSON value of a stream of concatenated documents.

    `gh api --paginate` prints one document per page back to back.

    Raises:
        json.JSONDecodeError: If the stream is not valid JSON.
    """
    decoder = json.JSONDecoder()
    idx = 0
    end = len(text)
    while True:
        while idx < end and text[idx].isspace():
            idx += 1
        if idx >= end:
            return
        obj, idx = decoder.raw_decode(text, idx)
        yield obj


def parse_pull_request_search(obj: object) -> Result[PullRequest | None, ReleaseError]:
    items = as_obj_list(obj)
    if items is None:
        return Err(invalid_shape("unexpected payload from gh pr list (expected a list)"))
    if not items:
        return Ok(None)

    first = as_str_dict(items[0])
    if first is None:
        return Err(invalid_shape("unexpected pull request entry from gh pr list"))

    number = get_int(first, "number")
    title = get_raw_str(first, "title")
    url = get_str(first, "url")
    body = get_raw_str(first, "body")
    if number is None or title is None or url is None or body is None:
        return Err(
            invalid_shape(
                "pull request entry is missing number/title/url/body",
                hint=", ".join(sorted(first.keys())),
            )
        )
    return Ok(PullRequest(number=number, title=title, url=url, body=body))


def parse_closing_issues_page(obj: object) -> Result[list[int], ReleaseError]:
    root = as_str_dict(obj)
    data = get_table(root, "data") if root is not None else None
    resource = get_table(data, "resource") if data is not None else None
    refs = get_table(resource, "closingIssuesReferences") if resource is not None else None
    if refs is None:
        return Err(invalid_shape("unexpected result from graphql query"))

    nodes = get_list(refs, "nodes")
    page_info = get_table(refs, "pageInfo")
    if nodes is None or page_info is None:
        return Err(invalid_shape("graphql result is missing nodes/pageInfo"))

    has_next = page_info.get("hasNextPage")
    cursor = page_info.get("endCursor")
    if not isinstance(has_next, bool) or not (cursor is None or isinstance(cursor, str)):
        return Err(invalid_shape("graphql result has an invalid pageInfo"))

    numbers: list[int] = []
    for node in nodes:
        d = as_str_dict(node)
        n = get_int(d, "number") if d is not None else None
        if n is None:
            return Err(invalid_shape("graphql node without an issue number"))
        numbers.append(n)
    return Ok(numbers)


def parse_issue_labels(obj: object) -> Result[list[str], ReleaseError]:
    data = as_str_dict(obj)
    labels = get_list(data, "labels") if data is not None else None
    if labels is None:
        return Err(invalid_shape("unexpected payload from gh issue view"))

    names: list[str] = []
    for label in labels:
        d = as_str_dict(label)
        name = get_str(d, "name") if d is not None else None
        if name is None:
            return Err(invalid_shape("issue label without a name"))
        names.append(name)
    return Ok(names)


class GhCli:
    """`ForgeProtocol` backed by the GitHub CLI."""

    def __init__(
        self,
        *,
        workspace_root: Path,
        repository: str,
        console: ConsoleProtocol,
        token: str | None = None,
    ) -> None:
        self._root = workspace_root
        self._repo = repository
        self._console = console
        self._env = {**os.environ, "GH_TOKEN": token} if token else None

    def _run(
        self, args: list[str], *, message: str, strict_stderr: bool
    ) -> Result[str, ReleaseError]:
        cmd = ["gh", *args]
        self._console.debug(f"> {' '.join(cmd)}")
        result = run_process(
            cmd,
            cwd=self._root,
            env=self._env,
            timeout=GH_TIMEOUT_SECONDS,
            strict_stderr=strict_stderr,
        )
        if isinstance(result, Err):
            return Err(command_failed(result.error, message=message))
        return Ok(result.value)

    def _read_json(self, args: list[str], *, message: str) -> Result[object, ReleaseError]:
        out = self._run(args, message=message, strict_stderr=True)
        if isinstance(out, Err):
            self._console.error(out.error.hint or out.error.message)
            return out
        try:
            obj: object = json.loads(out.value)
        except json.JSONDecodeError as e:
            return Err(invalid_shape(f"{message}: invalid JSON ({e})"))
        return Ok(obj)

    def search_merged_pull_request(self, commit: str) -> Result[PullRequest | None, ReleaseError]:
        # fmt: off
        args = [
            "pr", "list",
            "--repo", self._repo,
            "--search", commit,
            "--state", "merged",
            "--json", "number,title,url,body",
        ]
        # fmt: on
        obj = self._read_json(args, message=f"gh pr list failed for {commit}")
        if isinstance(obj, Err):
            return obj
        return parse_pull_request_search(obj.value)

    def closing_issue_references(self, pr_url: str) -> Result[list[int], ReleaseError]:
        # fmt: off
        args = [
            "api", "graphql", "--paginate",
            "--field", f"prHtmlUrl={pr_url}",
            "--raw-field", f"query={CLOSING_ISSUES_QUERY}",
        ]
        # fmt: on
        message = f"gh api graphql failed for {pr_url}"
        out = self._run(args, message=message, strict_stderr=True)
        if isinstance(out, Err):
            self._console.error(out.error.hint or out.error.message)
            return out
        self._console.debug(out.value)

        try:
            pages = list(iter_json_documents(out.value))
        except json.JSONDecodeError as e:
            return Err(invalid_shape(f"{message}: invalid JSON ({e})"))

        numbers: list[int] = []
        for page in pages:
            parsed = parse_closing_issues_page(page)
            if isinstance(parsed, Err):
                return parsed
            numbers.extend(parsed.value)
        return Ok(numbers)

    def issue_labels(self, number: int) -> Result[list[str], ReleaseError]:
        args = ["issue", "view", str(number), "--repo", self._repo, "--json", "labels"]
        obj = self._read_json(args, message=f"gh issue view failed for #{number}")
        if isinstance(obj, Err):
            return obj
        return parse_issue_labels(obj.value)

    def comment(self, target: Target, number: int, body: str) -> Result[None, ReleaseError]:
        args = [target, "comment", str(number), "--repo", self._repo, "--body", body]
        out = self._run(
            args, message=f"gh {target} comment failed for #{number}", strict_stderr=False
        )
        return out.map(lambda _: None)

    def close_issue(self, number: int) -> Result[None, ReleaseError]:
        args = ["issue", "close", str(number), "--repo", self._repo]
        out = self._run(args, message=f"gh issue close failed for #{number}", strict_stderr=False)
        return out.map(lambda _: None)

    def remove_label(self, target: Target, number: int, label: str) -> Result[None, ReleaseError]:
        args = [target, "edit", str(number), "--repo", self._repo, "--remove-label", label]
        out = self._run(
            args, message=f"gh {target} edit failed for #{number}", strict_stderr=False
        )
        return out.map(lambda _: None)
