"""
Client facade for an integrating layer (desktop UI, CLI, service).

Usage:
    settings = Settings.from_config(load_config())
    with SftpDashClient(settings, credentials_provider=ask_user) as client:
        client.login(ask_user())
        tree = client.build_tree("/")
        local = client.download("report.rpt", "/reports/report.rpt")
        client.open_file(local)

Leaving the ``with`` block closes the session and, when
``cleanup_on_close`` is set, deletes the local download directory.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from sftpdash.config.loader import Config
from sftpdash.config.settings import Settings
from sftpdash.connections.manager import ConnectionManager, SessionFactory
from sftpdash.credentials import Credentials
from sftpdash.dispatch.registry import FileDispatcher, build_default_dispatcher
from sftpdash.dispatch.types import FileHandler
from sftpdash.exceptions import SessionClosedError
from sftpdash.transfer.download import CredentialsProvider, DownloadManager
from sftpdash.transfer.policy import RetryPolicy
from sftpdash.transfer.storage import LocalStore
from sftpdash.tree.builder import DirectoryTreeBuilder
from sftpdash.tree.types import DirectoryItem
from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.client")


class SftpDashClient:
    """
    One connection, one tree builder, one download manager, one dispatcher.

    Not safe for concurrent use: run one login, listing or download at a
    time. The ``a*`` coroutines only move the blocking call off the event
    loop; they do not make concurrent calls safe.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        credentials_provider: CredentialsProvider | None = None,
        connection: ConnectionManager | None = None,
        store: LocalStore | None = None,
        dispatcher: FileDispatcher | None = None,
        session_factory: SessionFactory | None = None,
        max_workers: int = 1,
    ):
        self.settings = settings
        self.connection = connection or ConnectionManager(settings.sftp, session_factory=session_factory)
        self.store = store or LocalStore(settings.app_name)
        self.dispatcher = dispatcher or build_default_dispatcher(settings.handler_programs)
        self._credentials_provider = credentials_provider
        self.tree_builder = DirectoryTreeBuilder(self.connection, max_workers=max_workers)
        self.downloads = DownloadManager(
            self.connection,
            self.store,
            self._provide_credentials,
            policy=RetryPolicy(
                retry_budget=settings.retry_budget,
                initial_delay=settings.retry_delay_s,
                max_delay=max(30.0, settings.retry_delay_s),
            ),
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> SftpDashClient:
        return cls(Settings.from_config(config), **kwargs)

    def _provide_credentials(self) -> Credentials:
        if self._credentials_provider is None:
            raise SessionClosedError("reconnect (no credentials provider configured)")
        return self._credentials_provider()

    # --- session ------------------------------------------------------------

    def login(self, credentials: Credentials) -> str:
        """Log in and return the host that accepted the session."""
        session = self.connection.login(credentials)
        return session.host

    def is_open(self) -> bool:
        return self.connection.is_open()

    def close(self) -> None:
        self.connection.close()
        if self.settings.cleanup_on_close:
            self.store.teardown()

    # --- operations ---------------------------------------------------------

    def build_tree(self, path: str = "/") -> DirectoryItem:
        return self.tree_builder.build(path)

    def download(self, file_name: str, remote_path: str, retry_budget: int | None = None) -> Path:
        return self.downloads.download(file_name, remote_path, retry_budget=retry_budget)

    def open_file(self, path: str | Path) -> FileHandler:
        return self.dispatcher.dispatch(str(path))

    def download_and_open(self, item: DirectoryItem, retry_budget: int | None = None) -> Path:
        """Download a file item from a built tree, then hand it to its handler."""
        if item.is_directory:
            raise ValueError(f"{item.path} is a directory")
        local = self.download(item.name, item.path, retry_budget=retry_budget)
        self.open_file(local)
        return local

    # --- async wrappers -----------------------------------------------------

    async def alogin(self, credentials: Credentials) -> str:
        return await asyncio.to_thread(self.login, credentials)

    async def abuild_tree(self, path: str = "/") -> DirectoryItem:
        return await asyncio.to_thread(self.build_tree, path)

    async def adownload(self, file_name: str, remote_path: str, retry_budget: int | None = None) -> Path:
        return await asyncio.to_thread(self.download, file_name, remote_path, retry_budget)

    # --- lifecycle ----------------------------------------------------------

    def __enter__(self) -> SftpDashClient:
        self.store.ensure()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()
