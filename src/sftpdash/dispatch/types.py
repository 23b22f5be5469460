"""
Type definitions for downloaded-file handlers.
"""

from __future__ import annotations

from typing import Protocol

REPORT_VIEWER = "report_viewer"
SCRIPT_RUNNER = "script_runner"
DEFAULT_OPEN = "default_open"


class FileHandler(Protocol):
    """
    Something that can open a downloaded file.

    Handlers raise on failure; the dispatcher wraps whatever they raise.
    """

    name: str

    def open(self, path: str) -> None: ...
