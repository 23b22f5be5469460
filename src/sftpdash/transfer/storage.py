"""
Local landing directory for downloads.

One flat directory named after the application under the per-user local
application-data root. It is scratch space, not a cache: the client removes
it on normal shutdown.
"""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path, PurePosixPath, PureWindowsPath

from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.transfer.storage")


def local_app_data_root() -> Path:
    """Per-user local application-data root for this platform."""
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        if local:
            return Path(local)
        return Path.home() / "AppData" / "Local"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".local" / "share"


def bare_name(file_name: str) -> str:
    """File name with any remote or local directory part removed."""
    name = PurePosixPath(file_name).name
    return PureWindowsPath(name).name


class LocalStore:
    """
    The application's download directory.

    Files are stored by bare name only, so two remote files with the same
    name in different directories land on the same local path and the later
    download overwrites the earlier one.
    """

    def __init__(self, app_name: str, root: Path | None = None):
        self.app_name = app_name
        self.directory = Path(root if root is not None else local_app_data_root()) / app_name

    def ensure(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def destination_for(self, file_name: str) -> Path:
        name = bare_name(file_name)
        if name in ("", ".", ".."):
            raise ValueError(f"Not a file name: {file_name!r}")
        return self.directory / name

    def teardown(self) -> None:
        """Delete the directory and everything in it, if it exists."""
        if self.directory.exists():
            shutil.rmtree(self.directory)
            logger.debug(f"Removed {self.directory}")
