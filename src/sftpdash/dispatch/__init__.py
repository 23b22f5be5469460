"""
Routing downloaded files to external handlers.
"""

from sftpdash.dispatch.handlers import ChildProcesses, DefaultOpenHandler, ExternalProgramHandler
from sftpdash.dispatch.registry import DEFAULT_EXTENSIONS, FileDispatcher, build_default_dispatcher
from sftpdash.dispatch.types import DEFAULT_OPEN, REPORT_VIEWER, SCRIPT_RUNNER, FileHandler

__all__ = [
    "ChildProcesses",
    "DefaultOpenHandler",
    "ExternalProgramHandler",
    "DEFAULT_EXTENSIONS",
    "FileDispatcher",
    "build_default_dispatcher",
    "DEFAULT_OPEN",
    "REPORT_VIEWER",
    "SCRIPT_RUNNER",
    "FileHandler",
]
