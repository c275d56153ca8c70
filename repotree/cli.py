"""CLI entry point for repotree."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from repotree.config import RepoTreeConfig, load_config
from repotree.config.loader import DEFAULT_CONFIG_TEMPLATE
from repotree.log import configure_logging
from repotree.service import RepoService
from repotree.tree import EntryStat, TreeError
from repotree.vcs import create_repo_handle

app = typer.Typer(
    name="repotree",
    help="Browse a hosted git repository as a read-only filesystem.",
)

config_app = typer.Typer(help="Manage repotree configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: RepoTreeConfig | None = None

T = TypeVar("T")

RefOption = Annotated[
    str | None, typer.Option("--ref", "-r", help="Branch or tag (default branch if omitted)")
]
TagOption = Annotated[bool, typer.Option("--tag", help="Treat --ref as a tag name")]


def _get_config() -> RepoTreeConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to repotree.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_logging(_config.log_level, _config.log_format)


def _validate_repo_id(repo_id: str) -> tuple[str, str]:
    """Validate and split a repo identifier into (owner, repo_name).

    Raises ValueError if format is invalid.
    """
    parts = repo_id.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid repo identifier '{repo_id}': expected 'owner/repo'")
    return parts[0], parts[1]


def _run_query(
    repo: str,
    ref: str | None,
    is_tag: bool,
    query: Callable[[RepoService], Awaitable[T]],
) -> T:
    """Open *repo* and run one query against its tree, exiting 1 on failure."""
    cfg = _get_config()
    try:
        _validate_repo_id(repo)
        handle = create_repo_handle(cfg.vcs, repo)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    service = RepoService(handle, cfg.tree)

    async def _go() -> T:
        await service.open(ref, is_tag=is_tag)
        return await query(service)

    try:
        return asyncio.run(_go())
    except TreeError as e:
        rprint(f"[red]{e.code}:[/red] {e.path}")
        raise typer.Exit(1)
    except Exception as e:
        rprint(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _type_label(st: EntryStat) -> str:
    if st.is_submodule:
        return "submodule"
    if st.is_directory():
        return "dir"
    if st.is_symlink():
        return "symlink"
    return "file"


def _join(path: str, name: str) -> str:
    return path.rstrip("/") + "/" + name


@app.command("ls")
def ls(
    repo: str = typer.Argument(..., help="Repository as owner/repo"),
    path: str = typer.Argument("/", help="Absolute path inside the repository"),
    ref: RefOption = None,
    tag: TagOption = False,
) -> None:
    """List a directory."""

    async def _query(service: RepoService) -> list[tuple[str, EntryStat]]:
        names = await service.cache.readdir(path)
        return [(n, await service.cache.lstat(_join(path, n))) for n in sorted(names)]

    entries = _run_query(repo, ref, tag, _query)
    table = Table(title=f"{repo}:{path} ({len(entries)})")
    table.add_column("Type", style="yellow")
    table.add_column("Size", justify="right")
    table.add_column("Name", style="cyan")
    for name, st in entries:
        label = name
        if st.is_symlink() and st.target:
            label = f"{name} -> {st.target}"
        table.add_row(_type_label(st), "-" if st.is_directory() else str(st.size), label)
    rprint(table)


@app.command("stat")
def stat(
    repo: str = typer.Argument(..., help="Repository as owner/repo"),
    path: str = typer.Argument(..., help="Absolute path inside the repository"),
    no_follow: bool = typer.Option(
        False, "--no-follow", "-L", help="Do not follow a symlink in the last component"
    ),
    ref: RefOption = None,
    tag: TagOption = False,
) -> None:
    """Show metadata for a path."""

    async def _query(service: RepoService) -> EntryStat:
        if no_follow:
            return await service.cache.lstat(path)
        return await service.cache.stat(path)

    st = _run_query(repo, ref, tag, _query)
    lines = [
        f"[dim]Type:[/dim]   {_type_label(st)}",
        f"[dim]Mode:[/dim]   {st.mode:06o}",
        f"[dim]Size:[/dim]   {st.size}",
        f"[dim]SHA:[/dim]    {st.sha or '-'}",
    ]
    if st.target:
        lines.append(f"[dim]Target:[/dim] {st.target}")
    if st.submodule_url:
        lines.append(f"[dim]Origin:[/dim] {st.submodule_url}")
    rprint(Panel("\n".join(lines), title=path, border_style="blue"))


@app.command("realpath")
def realpath(
    repo: str = typer.Argument(..., help="Repository as owner/repo"),
    path: str = typer.Argument(..., help="Absolute path inside the repository"),
    ref: RefOption = None,
    tag: TagOption = False,
) -> None:
    """Print where a symlink points."""
    rprint(_run_query(repo, ref, tag, lambda service: service.cache.realpath(path)))


@app.command("tree")
def tree(
    repo: str = typer.Argument(..., help="Repository as owner/repo"),
    path: str = typer.Argument("/", help="Absolute path inside the repository"),
    depth: int = typer.Option(3, "--depth", "-d", min=1, help="Maximum depth to show"),
    ref: RefOption = None,
    tag: TagOption = False,
) -> None:
    """Render a directory as a tree."""

    async def _query(service: RepoService) -> list[tuple[str, list[str], list[str]]]:
        return [step async for step in service.cache.walk(path)]

    steps = _run_query(repo, ref, tag, _query)
    base = steps[0][0] if steps else path
    base_depth = base.rstrip("/").count("/")
    root = Tree(f"[bold]{repo}[/bold]:{base}")
    nodes = {base: root}
    for dirpath, dirnames, filenames in steps:
        node = nodes.get(dirpath)
        if node is None:
            continue
        if dirpath.rstrip("/").count("/") - base_depth >= depth:
            continue
        for name in dirnames:
            nodes[_join(dirpath, name)] = node.add(f"[blue]{name}/[/blue]")
        for name in filenames:
            node.add(name)
    rprint(root)


# ── config subcommands ──────────────────────────────────────────────


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a default repotree.yaml in the current directory."""
    dest = Path("repotree.yaml")
    if dest.exists() and not force:
        rprint(f"[yellow]{dest} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    dest.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {dest}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.safe_dump(cfg.model_dump(), sort_keys=False), "yaml", theme="monokai"))
