"""
Eager remote directory tree builder.

The whole subtree under the requested path is listed before anything is
returned: one listing call per directory, no pagination. Large trees are slow
and memory-heavy; that is the accepted cost of handing the caller a complete
snapshot.
"""

from __future__ import annotations

import posixpath
import queue
import stat
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

from sftpdash.exceptions import ListingFailed, ServiceError
from sftpdash.tree.types import DirectoryItem
from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.tree.builder")

_SKIP_NAMES = frozenset({".", ".."})


class SupportsSFTP(Protocol):
    """
    Anything exposing a live paramiko ``SFTPClient`` as ``.sftp``.

    Fan-out additionally needs ``open_channel()`` returning a new
    ``SFTPClient`` on the same session.
    """

    @property
    def sftp(self) -> Any: ...

    def open_channel(self) -> Any: ...


def join_remote(directory: str, name: str) -> str:
    return posixpath.join(directory.rstrip("/") or "/", name)


class _ChannelPool:
    """SFTP channels handed out one per concurrent listing, closed together."""

    def __init__(self, connection: SupportsSFTP):
        self.connection = connection
        self._idle: queue.SimpleQueue = queue.SimpleQueue()
        self._opened: list[Any] = []
        self._lock = threading.Lock()

    def checkout(self) -> Any:
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            channel = self.connection.open_channel()
            with self._lock:
                self._opened.append(channel)
            return channel

    def checkin(self, channel: Any) -> None:
        self._idle.put(channel)

    @property
    def opened(self) -> int:
        return len(self._opened)

    def close(self) -> None:
        for channel in self._opened:
            try:
                channel.close()
            except Exception as e:
                logger.warning(f"Error while closing listing channel: {e}")
        self._opened.clear()


class DirectoryTreeBuilder:
    """
    Build a DirectoryItem tree from an open SFTP connection.

    Directories are resolved level by level from an explicit work-list, so
    tree depth never grows the call stack. With ``max_workers`` > 1 the
    directories of one level are listed concurrently, each worker on its own
    SFTP channel of the shared session; results are attached in listing
    order either way.
    """

    def __init__(self, connection: SupportsSFTP, max_workers: int = 1):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.connection = connection
        self.max_workers = max_workers
        self.listing_calls = 0
        self.channels_opened = 0
        self._count_lock = threading.Lock()

    def build(self, path: str = "/") -> DirectoryItem:
        """
        List ``path`` and every directory below it.

        Returns:
            A directory item for ``path`` whose children hold the full tree

        Raises:
            ListingFailed: Listing failed at some path; no partial tree is returned
        """
        self.listing_calls = 0
        self.channels_opened = 0
        root = DirectoryItem(name=posixpath.basename(path.rstrip("/")) or "/", path=path, is_directory=True)

        if self.max_workers == 1:
            self._build_levels(root, lambda directories: [self._list(d.path) for d in directories])
        else:
            pool = _ChannelPool(self.connection)
            try:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:

                    def list_level(directories: list[DirectoryItem]) -> list[list[DirectoryItem]]:
                        return list(executor.map(lambda d: self._list_on_channel(pool, d.path), directories))

                    self._build_levels(root, list_level)
            finally:
                self.channels_opened = pool.opened
                pool.close()

        logger.info(f"Listed {root.count()} entries under {path} in {self.listing_calls} call(s)")
        return root

    def _build_levels(
        self,
        root: DirectoryItem,
        list_level: Callable[[list[DirectoryItem]], list[list[DirectoryItem]]],
    ) -> None:
        frontier = [root]
        while frontier:
            listings = list_level(frontier)
            next_frontier: list[DirectoryItem] = []
            for parent, children in zip(frontier, listings):
                parent.children = children
                next_frontier.extend(child for child in children if child.is_directory)
            frontier = next_frontier

    def _list_on_channel(self, pool: _ChannelPool, path: str) -> list[DirectoryItem]:
        try:
            channel = pool.checkout()
        except ServiceError as e:
            raise ListingFailed(path, cause=e) from e
        except Exception as e:
            logger.error(f"Opening a listing channel for {path} failed: {e}")
            raise ListingFailed(path, cause=e) from e
        try:
            return self._list(path, channel)
        finally:
            pool.checkin(channel)

    def _list(self, path: str, client: Any = None) -> list[DirectoryItem]:
        with self._count_lock:
            self.listing_calls += 1
        try:
            sftp = client if client is not None else self.connection.sftp
            entries = sftp.listdir_attr(path)
        except ServiceError as e:
            raise ListingFailed(path, cause=e) from e
        except Exception as e:
            logger.error(f"Listing {path} failed: {e}")
            raise ListingFailed(path, cause=e) from e

        items = []
        for attr in entries:
            name = attr.filename
            if name in _SKIP_NAMES:
                continue
            items.append(
                DirectoryItem(
                    name=name,
                    path=join_remote(path, name),
                    is_directory=stat.S_ISDIR(attr.st_mode or 0),
                )
            )
        return items
