"""
Extension registry that routes downloaded files to handlers.
"""

from __future__ import annotations

from pathlib import PurePath

from sftpdash.dispatch.handlers import DefaultOpenHandler, ExternalProgramHandler
from sftpdash.dispatch.types import REPORT_VIEWER, SCRIPT_RUNNER, FileHandler
from sftpdash.exceptions import DispatchFailed
from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.dispatch.registry")

# extension -> handler name
DEFAULT_EXTENSIONS = {
    ".rpt": REPORT_VIEWER,
    ".sql": SCRIPT_RUNNER,
}


def _normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if not extension.startswith("."):
        extension = "." + extension
    return extension


class FileDispatcher:
    """
    Picks exactly one handler per file by extension and runs it.

    Unregistered extensions go to the default handler.
    """

    def __init__(self, default: FileHandler | None = None):
        self.default = default or DefaultOpenHandler()
        self._handlers: dict[str, FileHandler] = {}

    def register(self, extension: str, handler: FileHandler) -> None:
        self._handlers[_normalize_extension(extension)] = handler

    def extensions(self) -> dict[str, str]:
        """Registered extension -> handler name."""
        return {ext: handler.name for ext, handler in self._handlers.items()}

    def select(self, path: str) -> FileHandler:
        extension = PurePath(path).suffix.lower()
        return self._handlers.get(extension, self.default)

    def dispatch(self, path: str) -> FileHandler:
        """
        Open ``path`` with its handler.

        Returns:
            The handler that was used

        Raises:
            DispatchFailed: The handler raised; the original error is the cause
        """
        handler = self.select(path)
        logger.info(f"Opening {path} with {handler.name}")
        try:
            handler.open(path)
        except Exception as e:
            logger.error(f"Handler {handler.name} failed for {path}: {e}")
            raise DispatchFailed(path, handler.name, cause=e) from e
        return handler


def build_default_dispatcher(handler_programs: dict[str, str] | None = None) -> FileDispatcher:
    """
    Dispatcher with the built-in extension table.

    Args:
        handler_programs: handler name -> program path, e.g.
            ``{"report_viewer": "/opt/viewer/bin/viewer"}``
    """
    handler_programs = handler_programs or {}
    dispatcher = FileDispatcher()
    for extension, name in DEFAULT_EXTENSIONS.items():
        # the report viewer is modal: wait for it like the desktop app did
        handler = ExternalProgramHandler(name, handler_programs.get(name), wait=name == REPORT_VIEWER)
        dispatcher.register(extension, handler)
    return dispatcher
