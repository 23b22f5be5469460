"""
sftpdash clean - Remove the local download directory.
"""

from pathlib import Path

import typer

from sftpdash.cli.common import console, load_settings
from sftpdash.transfer.storage import LocalStore

app = typer.Typer(name="clean", help="Remove downloaded files", invoke_without_command=True)


@app.callback()
def clean(
    ctx: typer.Context,
    env: str | None = typer.Option(None, help="Environment (config.<env>.yaml overlay)"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Directory holding config.yaml"),
) -> None:
    """
    Delete the application's local download directory.
    """
    if ctx.invoked_subcommand is None:
        settings = load_settings(project_dir, env)
        store = LocalStore(settings.app_name)
        if not store.directory.exists():
            console.print(f"[dim]Nothing to remove at {store.directory}[/dim]")
            return
        store.teardown()
        console.print(f"[green]Removed[/green] {store.directory}")
