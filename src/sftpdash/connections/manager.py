"""
Connection manager.

Owns the one SFTP session of the client: logs in by trying the configured
hosts in order, and closes the session on request, on context-manager exit
and at interpreter shutdown.
"""

from __future__ import annotations

import atexit
from collections.abc import Callable
from typing import Any

import paramiko

from sftpdash.config.settings import SFTPSettings
from sftpdash.connections.sftp import SFTPSession
from sftpdash.credentials import Credentials
from sftpdash.exceptions import AuthenticationFailed, ConnectionError_, SessionClosedError
from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.connections.manager")

SessionFactory = Callable[[str, SFTPSettings], SFTPSession]


def default_session_factory(host: str, settings: SFTPSettings) -> SFTPSession:
    return SFTPSession(
        host=host,
        port=settings.port,
        host_key_fingerprint=settings.host_key_fingerprint,
        connect_timeout_s=settings.connect_timeout_s,
    )


class ConnectionManager:
    """
    Produces exactly one authenticated session from the host list, or fails.

    Access is not synchronised: callers must not run a login, listing and
    download against the same manager at the same time.
    """

    def __init__(self, settings: SFTPSettings, session_factory: SessionFactory | None = None):
        self.settings = settings
        self._session_factory = session_factory or default_session_factory
        self._session: SFTPSession | None = None
        self._shutdown_hook_registered = False

    @property
    def current_host(self) -> str | None:
        """Host of the open session, if any."""
        if self._session is not None and self._session.is_open:
            return self._session.host
        return None

    @property
    def sftp(self) -> paramiko.SFTPClient:
        """Live SFTP client of the open session."""
        if self._session is None or not self._session.is_open or self._session.client is None:
            raise SessionClosedError("SFTP access")
        return self._session.client

    def is_open(self) -> bool:
        return self._session is not None and self._session.is_open

    def open_channel(self) -> paramiko.SFTPClient:
        """Extra SFTP channel on the open session, for use from another thread."""
        if self._session is None or not self._session.is_open:
            raise SessionClosedError("opening an SFTP channel")
        return self._session.open_channel()

    def login(self, credentials: Credentials) -> SFTPSession:
        """
        Open a session against the first host that accepts the connection.

        Hosts are tried strictly in configuration order. A credential
        rejection stops immediately; any other failure moves on to the next
        host. The password is released when this returns or raises.

        Raises:
            AuthenticationFailed: A host rejected the username/password
            SftpConnectionError: Every host failed for non-credential reasons
            ValueError: The credentials were already released by an earlier login
        """
        if credentials.password.released:
            raise ValueError("Credentials have already been used for a login; pass fresh credentials")

        self.close()

        tried: list[str] = []
        last_error: BaseException | None = None
        try:
            for host in self.settings.hosts:
                tried.append(host)
                login_name = self.settings.login_name(host, credentials.username)
                logger.info(f"Connecting to {host}:{self.settings.port} as {login_name}")

                session = self._session_factory(host, self.settings)
                try:
                    session.open(login_name, credentials.password.reveal())
                except paramiko.AuthenticationException as e:
                    session.close()
                    logger.warning(f"Authentication rejected by {host}")
                    raise AuthenticationFailed(host, cause=e) from e
                except Exception as e:
                    session.close()
                    logger.warning(f"Connection to {host} failed: {e}")
                    last_error = e
                    continue

                self._session = session
                self._register_shutdown_hook()
                logger.info(f"Logged in to {host}")
                return session
        finally:
            credentials.release()

        logger.error(f"Could not connect to any of {len(tried)} host(s)")
        raise ConnectionError_(tried, cause=last_error) from last_error

    def close(self) -> None:
        """Close the session if one is open. Safe to call repeatedly."""
        session, self._session = self._session, None
        if session is not None:
            try:
                session.close()
            except Exception as e:
                logger.warning(f"Error while closing session to {session.host}: {e}")
            else:
                logger.debug(f"Closed session to {session.host}")
        self._unregister_shutdown_hook()

    def _register_shutdown_hook(self) -> None:
        if not self._shutdown_hook_registered:
            atexit.register(self.close)
            self._shutdown_hook_registered = True

    def _unregister_shutdown_hook(self) -> None:
        if self._shutdown_hook_registered:
            atexit.unregister(self.close)
            self._shutdown_hook_registered = False

    def __enter__(self) -> ConnectionManager:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()
