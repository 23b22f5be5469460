"""
Main CLI entry point.
"""

import typer

from sftpdash import __version__
from sftpdash.cli import clean, get, tree


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"sftpdash version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="sftpdash",
    help="sftpdash - browse and fetch files from the dashboard SFTP servers",
    add_completion=False,
)

app.add_typer(tree.app, name="tree")
app.add_typer(get.app, name="get")
app.add_typer(clean.app, name="clean")


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    sftpdash - browse and fetch files from the dashboard SFTP servers.

    Run 'sftpdash <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
