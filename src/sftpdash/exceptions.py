"""
sftpdash exception hierarchy.

Every error that leaves the client is one of these. Transport-level errors
(paramiko, socket, OS) are caught where they happen and re-raised with the
original attached as ``__cause__``.

Hierarchy::

    SftpDashError
    ├── ConfigurationError        - config loading, parsing, validation
    └── ServiceError              - anything that went wrong talking to the server
        ├── AuthenticationFailed  - credentials rejected by a reachable host
        ├── ConnectionError_      - no host could be reached / handshaken
        ├── SessionClosedError    - operation needs an open session
        ├── ListingFailed         - directory enumeration failed at a path
        ├── DownloadFailed        - transfer failed after the retry budget
        └── DispatchFailed        - file handler could not open a download
"""

from __future__ import annotations


class SftpDashError(Exception):
    """Base exception for all sftpdash errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(SftpDashError):
    """Raised when configuration loading, parsing, or validation fails."""


# --- Service -----------------------------------------------------------------


class ServiceError(SftpDashError):
    """Raised when an operation against the remote file service fails."""

    def __init__(self, message: str, *, cause: BaseException | None = None, details: dict | None = None) -> None:
        super().__init__(message, details=details)
        if cause is not None:
            self.__cause__ = cause


class AuthenticationFailed(ServiceError):
    """Raised when a reachable host rejects the username or password.

    Terminal for the login flow: no other host is tried. The caller may ask
    the user for new credentials and log in again.
    """

    def __init__(self, host: str, *, cause: BaseException | None = None) -> None:
        super().__init__("Invalid username or password.", cause=cause, details={"host": host})
        self.host = host


class ConnectionError_(ServiceError):
    """Raised when no host in the list could be reached or handshaken.

    Named with trailing underscore to avoid shadowing the builtin
    ``ConnectionError``; ``SftpConnectionError`` is the public alias.
    """

    def __init__(self, hosts: list[str] | tuple[str, ...], *, cause: BaseException | None = None) -> None:
        tried = ", ".join(hosts) if hosts else "<none>"
        message = f"Could not connect to any SFTP host (tried: {tried})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, cause=cause, details={"hosts": list(hosts)})
        self.hosts = list(hosts)


SftpConnectionError = ConnectionError_


class SessionClosedError(ServiceError):
    """Raised when an operation needs an open session and there is none."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"No open SFTP session for {operation}; log in first", details={"operation": operation})
        self.operation = operation


class ListingFailed(ServiceError):
    """Raised when listing a remote directory fails.

    ``path`` is the directory whose listing failed, which may be nested deep
    below the path the caller asked for.
    """

    def __init__(self, path: str, *, cause: BaseException | None = None) -> None:
        message = f"Error loading directory {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, cause=cause, details={"path": path})
        self.path = path


class DownloadFailed(ServiceError):
    """Raised when a download still fails after the retry budget is spent."""

    def __init__(
        self,
        file_name: str,
        remote_path: str,
        *,
        attempts: int,
        reconnects: int = 0,
        cause: BaseException | None = None,
    ) -> None:
        message = (
            f"Download of '{file_name}' failed after {attempts} attempt(s). "
            f"Please contact support if the problem persists."
        )
        super().__init__(
            message,
            cause=cause,
            details={
                "file_name": file_name,
                "remote_path": remote_path,
                "attempts": attempts,
                "reconnects": reconnects,
            },
        )
        self.file_name = file_name
        self.remote_path = remote_path
        self.attempts = attempts
        self.reconnects = reconnects


class DispatchFailed(ServiceError):
    """Raised when the handler chosen for a downloaded file fails."""

    def __init__(self, path: str, handler: str, *, cause: BaseException | None = None) -> None:
        message = f"Error opening {path} with {handler}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, cause=cause, details={"path": path, "handler": handler})
        self.path = path
        self.handler = handler
