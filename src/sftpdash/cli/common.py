"""
Shared CLI plumbing: config, credentials, client construction, error exits.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

import typer
from rich.console import Console

from sftpdash.client import SftpDashClient
from sftpdash.config.loader import load_config
from sftpdash.config.settings import Settings
from sftpdash.credentials import Credentials
from sftpdash.exceptions import AuthenticationFailed, SftpDashError
from sftpdash.utils.logging import setup_logging_from_config

PASSWORD_ENV = "SFTPDASH_PASSWORD"
USER_ENV = "SFTPDASH_USER"

console = Console()
err_console = Console(stderr=True)


def load_settings(project_dir: Path, env: str | None, verbose: bool = False) -> Settings:
    try:
        config = load_config(project_dir, env=env)
        if verbose:
            config.data.setdefault("logging", {})["level"] = "DEBUG"
        setup_logging_from_config(config.data, project_dir=project_dir if project_dir.is_dir() else None)
        return Settings.from_config(config)
    except SftpDashError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e


def resolve_username(user: str | None) -> str:
    user = user or os.environ.get(USER_ENV)
    if not user:
        user = typer.prompt("Username")
    return user


def resolve_password() -> str:
    password = os.environ.get(PASSWORD_ENV)
    if password is None:
        password = typer.prompt("Password", hide_input=True)
    return password


@contextmanager
def connected_client(settings: Settings, user: str | None, max_workers: int = 1) -> Iterator[SftpDashClient]:
    """
    Logged-in client for one command; maps sftpdash errors to exit codes.

    Exit code 2 for rejected credentials, 1 for every other failure.
    """
    username = resolve_username(user)
    password = resolve_password()

    def credentials() -> Credentials:
        return Credentials.from_plain(username, password)

    client = SftpDashClient(settings, credentials_provider=credentials, max_workers=max_workers)
    try:
        with client:
            host = client.login(credentials())
            console.print(f"[dim]Connected to {host}[/dim]")
            yield client
    except AuthenticationFailed as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(2) from e
    except SftpDashError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def keep_downloads(settings: Settings) -> Settings:
    """Settings that leave the download directory in place on exit."""
    return replace(settings, cleanup_on_close=False)
