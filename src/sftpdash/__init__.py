"""
sftpdash - SFTP client core for a remote report/script dashboard.

Logs in against an ordered list of hosts, lists remote directory trees,
downloads files with retry and reconnection, and hands downloads to
extension-specific handlers.
"""

__version__ = "0.1.0"

from sftpdash.client import SftpDashClient
from sftpdash.config import Config, Settings, SFTPSettings, load_config
from sftpdash.connections import ConnectionManager, SessionState, SFTPSession
from sftpdash.credentials import Credentials, SecretPassword
from sftpdash.dispatch import FileDispatcher, build_default_dispatcher

# Exceptions
from sftpdash.exceptions import (
    AuthenticationFailed,
    ConfigurationError,
    DispatchFailed,
    DownloadFailed,
    ListingFailed,
    ServiceError,
    SessionClosedError,
    SftpConnectionError,
    SftpDashError,
)
from sftpdash.transfer import DownloadManager, LocalStore, RetryPolicy
from sftpdash.tree import DirectoryItem, DirectoryTreeBuilder, filter_tree, iter_files

# Logging utilities
from sftpdash.utils.logging import get_logger, setup_logging, setup_logging_from_config

__all__ = [
    "__version__",
    # Client
    "SftpDashClient",
    # Config
    "Config",
    "Settings",
    "SFTPSettings",
    "load_config",
    # Session
    "ConnectionManager",
    "SessionState",
    "SFTPSession",
    "Credentials",
    "SecretPassword",
    # Tree
    "DirectoryItem",
    "DirectoryTreeBuilder",
    "filter_tree",
    "iter_files",
    # Transfer
    "DownloadManager",
    "LocalStore",
    "RetryPolicy",
    # Dispatch
    "FileDispatcher",
    "build_default_dispatcher",
    # Exceptions
    "SftpDashError",
    "ConfigurationError",
    "ServiceError",
    "AuthenticationFailed",
    "SftpConnectionError",
    "SessionClosedError",
    "ListingFailed",
    "DownloadFailed",
    "DispatchFailed",
    # Logging
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
]
