"""
Built-in handlers that hand a file to an external program.
"""

from __future__ import annotations

import os
import subprocess
import sys

from sftpdash.dispatch.types import DEFAULT_OPEN
from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.dispatch.handlers")


class ChildProcesses:
    """
    Detached programs started by a handler.

    Finished children are reaped on every launch and on ``reap()``, so a
    long-running host process does not accumulate zombies.
    """

    def __init__(self) -> None:
        self._running: list[subprocess.Popen] = []

    def launch(self, command: list[str]) -> subprocess.Popen:
        self.reap()
        process = subprocess.Popen(command)
        self._running.append(process)
        return process

    def reap(self) -> int:
        """Collect finished children; returns how many are still running."""
        self._running = [p for p in self._running if p.poll() is None]
        return len(self._running)


class ExternalProgramHandler:
    """Runs ``<program> <path>``; optionally waits for the program to exit."""

    def __init__(self, name: str, program: str | None, wait: bool = False):
        self.name = name
        self.program = program
        self.wait = wait
        self.children = ChildProcesses()

    def open(self, path: str) -> None:
        if not self.program:
            raise RuntimeError(f"No program configured for handler '{self.name}'")
        command = [self.program, path]
        logger.debug(f"Launching {command}")
        if self.wait:
            subprocess.run(command, check=True)
        else:
            self.children.launch(command)

    def __repr__(self) -> str:
        return f"ExternalProgramHandler({self.name!r}, {self.program!r})"


class DefaultOpenHandler:
    """Opens the file with whatever the desktop associates with it."""

    name = DEFAULT_OPEN

    def __init__(self) -> None:
        self.children = ChildProcesses()

    def open(self, path: str) -> None:
        if sys.platform == "win32":
            os.startfile(path)  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            self.children.launch(["open", path])
        else:
            self.children.launch(["xdg-open", path])
