"""
Shared fixtures: an in-memory stand-in for the SFTP servers.

``FakeServer`` scripts how each host behaves on login, what each directory
lists, and how each transfer turns out; ``FakeSession`` plugs into
``ConnectionManager`` through its session factory. Everything the fakes see
is appended to ``server.events`` in order.
"""

import stat
from pathlib import Path

import paramiko
import pytest

from sftpdash.config.settings import SFTPSettings, Settings
from sftpdash.connections.manager import ConnectionManager
from sftpdash.connections.sftp import HostKeyMismatchError
from sftpdash.credentials import Credentials

HOST_A = "sftp-a.example.com"
HOST_B = "sftp-b.example.com"
HOST_C = "sftp-c.example.com"


def make_attr(name: str, is_dir: bool) -> paramiko.SFTPAttributes:
    attr = paramiko.SFTPAttributes()
    attr.filename = name
    attr.st_mode = (stat.S_IFDIR | 0o755) if is_dir else (stat.S_IFREG | 0o644)
    return attr


class FakeServer:
    def __init__(self):
        # host -> "ok" | "auth" | "down" | "hostkey"
        self.hosts: dict[str, str] = {}
        # directory -> [(name, is_dir), ...]
        self.listings: dict[str, list[tuple[str, bool]]] = {}
        self.failing_paths: set[str] = set()
        # consumed one per get(); True succeeds, an exception is raised,
        # a callable is called and its result used
        self.get_outcomes: list = []
        self.files: dict[str, bytes] = {}
        self.events: list[tuple] = []
        self.passwords_seen: list[str] = []
        self.channels: list[FakeSFTPClient] = []

    def behaviour(self, host: str) -> str:
        return self.hosts.get(host, "ok")

    def opened_hosts(self) -> list[str]:
        return [e[1] for e in self.events if e[0] == "open"]

    def count(self, kind: str) -> int:
        return sum(1 for e in self.events if e[0] == kind)


class FakeSFTPClient:
    def __init__(self, server: FakeServer, host: str):
        self.server = server
        self.host = host
        self.closed = False

    def listdir_attr(self, path="."):
        self.server.events.append(("list", path))
        if path in self.server.failing_paths:
            raise IOError(2, "No such file", path)
        return [make_attr(name, is_dir) for name, is_dir in self.server.listings.get(path, [])]

    def get(self, remotepath, localpath, callback=None, prefetch=True, max_concurrent_prefetch_requests=None):
        self.server.events.append(("get", remotepath))
        outcome = self.server.get_outcomes.pop(0) if self.server.get_outcomes else True
        if callable(outcome):
            outcome = outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        Path(localpath).write_bytes(self.server.files.get(remotepath, b"contents of " + remotepath.encode()))

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, host: str, server: FakeServer):
        self.host = host
        self.server = server
        self.client: FakeSFTPClient | None = None

    @property
    def is_open(self) -> bool:
        return self.client is not None

    def open(self, username: str, password: str):
        self.server.events.append(("open", self.host, username))
        self.server.passwords_seen.append(password)
        behaviour = self.server.behaviour(self.host)
        if behaviour == "auth":
            raise paramiko.AuthenticationException("Authentication failed.")
        if behaviour == "down":
            raise OSError(111, "Connection refused")
        if behaviour == "hostkey":
            raise HostKeyMismatchError(self.host, "SHA256:expected", "SHA256:actual")
        self.client = FakeSFTPClient(self.server, self.host)
        return self.client

    def open_channel(self):
        self.server.events.append(("channel", self.host))
        channel = FakeSFTPClient(self.server, self.host)
        self.server.channels.append(channel)
        return channel

    def close(self):
        if self.client is not None:
            self.server.events.append(("close", self.host))
        self.client = None


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def session_factory(server):
    def factory(host, settings):
        return FakeSession(host, server)

    return factory


@pytest.fixture
def sftp_settings():
    return SFTPSettings(
        hosts=(HOST_A, HOST_B, HOST_C),
        host_key_fingerprint="ssh-ed25519 255 SHA256:Zm9vYmFy",
        site_domain="example.com",
    )


@pytest.fixture
def settings(sftp_settings):
    return Settings(sftp=sftp_settings, app_name="TestDashboard")


@pytest.fixture
def make_credentials():
    def factory(username="alice", password="s3cret"):
        return Credentials.from_plain(username, password)

    return factory


@pytest.fixture
def connection(sftp_settings, session_factory):
    manager = ConnectionManager(sftp_settings, session_factory=session_factory)
    yield manager
    manager.close()


@pytest.fixture
def sample_tree(server):
    """
    /
    ├── reports/
    │   ├── 2024/
    │   │   └── q1.rpt
    │   └── summary.rpt
    ├── scripts/
    │   └── fix.sql
    └── readme.txt
    """
    server.listings = {
        "/": [(".", True), ("..", True), ("reports", True), ("scripts", True), ("readme.txt", False)],
        "/reports": [(".", True), ("..", True), ("2024", True), ("summary.rpt", False)],
        "/reports/2024": [(".", True), ("..", True), ("q1.rpt", False)],
        "/scripts": [("fix.sql", False)],
    }
    return server
