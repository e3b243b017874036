from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from relcomment.core.config import (
    RunConfig,
    config_from_mapping,
    load_config_table,
    merge_overrides,
)
from relcomment.core.errors import ErrorCode
from relcomment.core.result import Err
from relcomment.core.structured import StrDict
from relcomment.output.console import ConsoleProtocol, RichConsole
from relcomment.output.errors import print_config_error
from relcomment.release.gh import ForgeProtocol, GhCli
from relcomment.release.git import GitCli, VcsProtocol


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: RunConfig
    console: ConsoleProtocol
    vcs: VcsProtocol
    forge: ForgeProtocol


def build_context(
    *,
    config_path: Path | None,
    workspace: Path | None,
    options: Mapping[str, object | None],
) -> CLIContext:
    """Build the run configuration once and wire the collaborators to it."""
    err_console = RichConsole(stderr=True)

    table: StrDict = {}
    if config_path is not None:
        loaded = load_config_table(config_path)
        if isinstance(loaded, Err):
            print_config_error(loaded.error, err_console)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
        table = loaded.value

    try:
        root = (workspace or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --workspace: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
    if not root.is_dir():
        typer.echo(f"error: workspace is not a directory: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    config_result = config_from_mapping(
        merge_overrides(table, options), workspace_root=root, path=config_path
    )
    if isinstance(config_result, Err):
        print_config_error(config_result.error, err_console)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
    config = config_result.value

    console = RichConsole(verbose=config.verbose or config.dry_run)
    return CLIContext(
        config=config,
        console=console,
        vcs=GitCli(workspace_root=root, console=console),
        forge=GhCli(
            workspace_root=root,
            repository=config.repository,
            console=console,
            token=config.gh_token,
        ),
    )
