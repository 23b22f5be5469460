"""
Single-host SFTP session.

Opens a paramiko transport, checks the server's host key against the
configured fingerprint before any credentials are sent, then authenticates
with a password and opens the SFTP channel.
"""

from __future__ import annotations

import base64
import hashlib
import socket
from enum import Enum
from typing import Any

import paramiko

from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.connections.sftp")


class SessionState(Enum):
    CLOSED = "closed"
    OPEN = "open"


class HostKeyMismatchError(paramiko.SSHException):
    """The server presented a host key that does not match the fingerprint."""

    def __init__(self, host: str, expected: str, actual: str):
        super().__init__(f"Host key for {host} does not match (expected {expected}, got {actual})")
        self.host = host
        self.expected = expected
        self.actual = actual


def sha256_fingerprint(key: paramiko.PKey) -> str:
    """OpenSSH-style ``SHA256:<base64>`` fingerprint, unpadded."""
    digest = hashlib.sha256(key.asbytes()).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def md5_fingerprint(key: paramiko.PKey) -> str:
    """Legacy colon-separated MD5 hex fingerprint."""
    digest = hashlib.md5(key.asbytes(), usedforsecurity=False).digest()
    return ":".join(f"{b:02x}" for b in digest)


def fingerprint_matches(key: paramiko.PKey, expected: str) -> bool:
    """
    Check a server key against a configured fingerprint.

    Accepted forms, each optionally prefixed by key type and bit count
    (``ssh-ed25519 255 <fingerprint>``)::

        SHA256:<base64>      OpenSSH
        <base64>             SHA-256 without the prefix
        MD5:aa:bb:...        / aa:bb:...  legacy MD5
    """
    tokens = expected.strip().split()
    if not tokens:
        return False
    if len(tokens) > 1 and tokens[0] != key.get_name():
        return False

    value = tokens[-1]
    if value.upper().startswith("MD5:"):
        return value[4:].lower() == md5_fingerprint(key)
    if value.upper().startswith("SHA256:"):
        value = value[7:]
    if len(value) == 47 and value.count(":") == 15:
        return value.lower() == md5_fingerprint(key)
    return value.rstrip("=") == sha256_fingerprint(key)[7:]


class SFTPSession:
    """
    One authenticated SFTP connection to one host.

    Lifecycle is ``CLOSED`` -> ``open()`` -> ``OPEN`` -> ``close()`` -> ``CLOSED``.
    A session object is not reused after close; the connection manager
    creates a new one for every login.
    """

    def __init__(self, host: str, port: int, host_key_fingerprint: str, connect_timeout_s: float = 15.0):
        self.host = host
        self.port = port
        self.host_key_fingerprint = host_key_fingerprint
        self.connect_timeout_s = connect_timeout_s
        self._transport: paramiko.Transport | None = None
        self._client: paramiko.SFTPClient | None = None

    @property
    def state(self) -> SessionState:
        if self._client is not None and self._transport is not None and self._transport.is_active():
            return SessionState.OPEN
        return SessionState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    @property
    def client(self) -> paramiko.SFTPClient | None:
        return self._client

    def open_channel(self) -> paramiko.SFTPClient:
        """
        Open an additional SFTP channel on the authenticated transport.

        An ``SFTPClient`` must not be shared between threads; each worker
        thread gets its own channel. The caller closes it.
        """
        if not self.is_open:
            raise paramiko.SSHException(f"Session to {self.host} is not open")
        client = paramiko.SFTPClient.from_transport(self._transport)
        if client is None:
            raise paramiko.SSHException(f"Server {self.host} refused to open an SFTP channel")
        return client

    def open(self, username: str, password: str) -> paramiko.SFTPClient:
        """
        Connect, verify the host key, authenticate and open the SFTP channel.

        Raises:
            paramiko.AuthenticationException: Credentials rejected
            HostKeyMismatchError: Server key does not match the fingerprint
            paramiko.SSHException: Any other SSH-level failure
            OSError: Network failure (DNS, refused, timeout)
        """
        if self._client is not None:
            return self._client

        sock = socket.create_connection((self.host, self.port), timeout=self.connect_timeout_s)
        try:
            transport = paramiko.Transport(sock)
        except BaseException:
            sock.close()
            raise
        transport.banner_timeout = self.connect_timeout_s
        transport.auth_timeout = self.connect_timeout_s
        try:
            transport.start_client(timeout=self.connect_timeout_s)

            server_key = transport.get_remote_server_key()
            if not fingerprint_matches(server_key, self.host_key_fingerprint):
                raise HostKeyMismatchError(self.host, self.host_key_fingerprint, sha256_fingerprint(server_key))

            transport.auth_password(username, password)

            client = paramiko.SFTPClient.from_transport(transport)
            if client is None:
                raise paramiko.SSHException(f"Server {self.host} refused to open an SFTP channel")
        except BaseException:
            transport.close()
            raise

        self._transport = transport
        self._client = client
        logger.debug(f"SFTP session open to {self.host}:{self.port}")
        return client

    def close(self) -> None:
        """Close SFTP client + underlying transport."""
        try:
            if self._client is not None:
                self._client.close()
        finally:
            self._client = None
        try:
            if self._transport is not None:
                self._transport.close()
        finally:
            self._transport = None

    def __enter__(self) -> SFTPSession:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SFTPSession({self.host}:{self.port}, {self.state.value})"
