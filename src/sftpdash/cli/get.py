"""
sftpdash get - Download a remote file, optionally opening it.
"""

from pathlib import Path, PurePosixPath

import typer

from sftpdash.cli.common import connected_client, console, err_console, keep_downloads, load_settings
from sftpdash.exceptions import DispatchFailed

app = typer.Typer(name="get", help="Download a remote file", invoke_without_command=True)


@app.callback()
def get(
    ctx: typer.Context,
    remote_path: str = typer.Argument(..., help="Full remote path of the file"),
    open_file: bool = typer.Option(False, "--open", "-o", help="Open the file with its handler afterwards"),
    retries: int | None = typer.Option(None, "--retries", "-r", min=0, help="Retry budget (default from config)"),
    user: str | None = typer.Option(None, "--user", "-u", help="Username (or SFTPDASH_USER)"),
    env: str | None = typer.Option(None, help="Environment (config.<env>.yaml overlay)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Directory holding config.yaml"),
) -> None:
    """
    Download REMOTE_PATH into the local application-data directory.
    """
    if ctx.invoked_subcommand is None:
        settings = keep_downloads(load_settings(project_dir, env, verbose))
        file_name = PurePosixPath(remote_path).name

        with connected_client(settings, user) as client:
            local = client.download(file_name, remote_path, retry_budget=retries)

        console.print(f"[green]Downloaded[/green] {remote_path} -> {local}")

        if open_file:
            try:
                handler = client.open_file(local)
            except DispatchFailed as e:
                err_console.print(f"[red]{e}[/red]")
                raise typer.Exit(1) from e
            console.print(f"[dim]Opened with {handler.name}[/dim]")
