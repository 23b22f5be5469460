"""
sftpdash tree - Show the remote directory tree.
"""

from pathlib import Path

import typer
from rich.tree import Tree

from sftpdash.cli.common import connected_client, console, load_settings
from sftpdash.tree.search import filter_tree
from sftpdash.tree.types import DirectoryItem

app = typer.Typer(name="tree", help="Show the remote directory tree", invoke_without_command=True)


def render_tree(root: DirectoryItem, items: list[DirectoryItem]) -> Tree:
    """Rich tree for ``items`` under a node labelled with ``root``'s path."""
    tree = Tree(f"[bold]{root.path}[/bold]")
    stack = [(item, tree) for item in reversed(items)]
    while stack:
        item, parent = stack.pop()
        if item.is_directory:
            node = parent.add(f"[bold blue]{item.name}/[/bold blue]")
            stack.extend((child, node) for child in reversed(item.children))
        else:
            parent.add(item.name)
    return tree


@app.callback()
def tree(
    ctx: typer.Context,
    path: str = typer.Argument("/", help="Remote directory to list"),
    query: str | None = typer.Option(None, "--filter", "-f", help="Only show names containing this text"),
    user: str | None = typer.Option(None, "--user", "-u", help="Username (or SFTPDASH_USER)"),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Directories listed in parallel"),
    env: str | None = typer.Option(None, help="Environment (config.<env>.yaml overlay)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Directory holding config.yaml"),
) -> None:
    """
    List PATH and everything below it.
    """
    if ctx.invoked_subcommand is None:
        settings = load_settings(project_dir, env, verbose)
        with connected_client(settings, user, max_workers=workers) as client:
            root = client.build_tree(path)

        items = filter_tree(root.children, query) if query else root.children
        if query and not items:
            console.print(f"[yellow]Nothing under {path} matches '{query}'[/yellow]")
            return
        console.print(render_tree(root, items))
