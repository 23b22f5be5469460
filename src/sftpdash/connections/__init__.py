"""
Remote session handling.
"""

from sftpdash.connections.manager import ConnectionManager, default_session_factory
from sftpdash.connections.sftp import (
    HostKeyMismatchError,
    SessionState,
    SFTPSession,
    fingerprint_matches,
    md5_fingerprint,
    sha256_fingerprint,
)

__all__ = [
    "ConnectionManager",
    "default_session_factory",
    "HostKeyMismatchError",
    "SessionState",
    "SFTPSession",
    "fingerprint_matches",
    "md5_fingerprint",
    "sha256_fingerprint",
]
