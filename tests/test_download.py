"""
Tests for the download manager, its retry policy and the local store.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sftpdash.exceptions import AuthenticationFailed, DownloadFailed, ServiceError, SftpConnectionError
from sftpdash.transfer import DownloadManager, LocalStore, RetryPolicy, bare_name, local_app_data_root


@pytest.fixture
def store(tmp_path):
    return LocalStore("TestDashboard", root=tmp_path)


@pytest.fixture
def credentials_calls():
    return []


@pytest.fixture
def manager(connection, store, make_credentials, credentials_calls):
    def provider():
        credentials_calls.append(1)
        return make_credentials()

    return DownloadManager(connection, store, provider, sleep=MagicMock())


def transfer_error():
    return OSError("Socket is closed")


class TestRetryPolicy:
    """Tests for RetryPolicy configuration."""

    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.retry_budget == 1
        assert policy.initial_delay == 0.0
        assert policy.max_total_attempts == 3

    def test_zero_budget_single_attempt(self):
        assert RetryPolicy(retry_budget=0).max_total_attempts == 1

    def test_budget_plus_final_attempt(self):
        assert RetryPolicy(retry_budget=3).max_total_attempts == 5

    def test_validation(self):
        with pytest.raises(ValueError, match="retry_budget must be >= 0"):
            RetryPolicy(retry_budget=-1)
        with pytest.raises(ValueError, match="max_delay must be >= initial_delay"):
            RetryPolicy(initial_delay=10.0, max_delay=5.0)
        with pytest.raises(ValueError, match="exponential_base"):
            RetryPolicy(exponential_base=0.5)

    def test_no_delay_by_default(self):
        assert RetryPolicy().get_delay(5) == 0.0

    def test_exponential_delay(self):
        policy = RetryPolicy(initial_delay=1.0, exponential_base=2.0, max_delay=5.0)
        assert [policy.get_delay(i) for i in range(4)] == [1.0, 2.0, 4.0, 5.0]

    def test_jitter_bounds(self):
        policy = RetryPolicy(initial_delay=10.0, max_delay=100.0, jitter=True)
        delays = [policy.get_delay(0) for _ in range(50)]
        assert min(delays) >= 7.5
        assert max(delays) <= 12.5


class TestDownloadRetries:
    """Total-attempt and reconnect contract."""

    def test_success_first_try(self, manager, connection, server, make_credentials, store, credentials_calls):
        connection.login(make_credentials())

        local = manager.download("q1.rpt", "/reports/2024/q1.rpt")

        assert local == store.directory / "q1.rpt"
        assert local.read_bytes() == b"contents of /reports/2024/q1.rpt"
        assert server.count("open") == 1
        assert credentials_calls == []

    def test_logs_in_when_not_open(self, manager, server, credentials_calls):
        manager.download("q1.rpt", "/reports/2024/q1.rpt")

        assert server.count("open") == 1
        assert credentials_calls == [1]

    def test_two_failures_then_success_with_budget_one(self, manager, connection, server, make_credentials):
        connection.login(make_credentials())
        server.events.clear()
        server.get_outcomes = [transfer_error(), transfer_error(), True]

        local = manager.download("q1.rpt", "/reports/2024/q1.rpt", retry_budget=1)

        assert local.exists()
        kinds = [e[0] for e in server.events]
        assert kinds == ["get", "close", "open", "get", "close", "open", "get"]

    def test_budget_one_exhausted(self, manager, connection, server, make_credentials):
        connection.login(make_credentials())
        server.get_outcomes = [transfer_error()] * 3

        with pytest.raises(DownloadFailed) as exc_info:
            manager.download("q1.rpt", "/reports/2024/q1.rpt", retry_budget=1)

        assert exc_info.value.attempts == 3
        assert server.count("get") == 3
        assert "contact support" in str(exc_info.value)
        assert exc_info.value.reconnects == 2
        assert exc_info.value.details["reconnects"] == 2

    def test_zero_budget_fails_without_retry(self, manager, connection, server, make_credentials):
        connection.login(make_credentials())
        server.events.clear()
        server.get_outcomes = [transfer_error(), True]

        with pytest.raises(DownloadFailed) as exc_info:
            manager.download("q1.rpt", "/reports/2024/q1.rpt", retry_budget=0)

        assert exc_info.value.attempts == 1
        assert [e[0] for e in server.events] == ["get"]
        assert exc_info.value.reconnects == 0
        assert isinstance(exc_info.value.__cause__, OSError)
        assert isinstance(exc_info.value, ServiceError)

    @pytest.mark.parametrize("budget", [2, 3])
    def test_larger_budgets(self, manager, connection, server, make_credentials, budget):
        connection.login(make_credentials())
        server.get_outcomes = [transfer_error()] * 10

        with pytest.raises(DownloadFailed) as exc_info:
            manager.download("q1.rpt", "/reports/2024/q1.rpt", retry_budget=budget)

        assert exc_info.value.attempts == budget + 2
        # one initial login plus one per retry
        assert server.count("open") == budget + 2

    def test_policy_budget_used_by_default(self, connection, store, make_credentials, server):
        manager = DownloadManager(connection, store, make_credentials, policy=RetryPolicy(retry_budget=0))
        connection.login(make_credentials())
        server.get_outcomes = [transfer_error()]

        with pytest.raises(DownloadFailed):
            manager.download("q1.rpt", "/reports/2024/q1.rpt")
        assert server.count("get") == 1

    def test_reconnect_failure_consumes_attempt(self, manager, connection, server, make_credentials, sftp_settings):
        connection.login(make_credentials())
        a, b, c = sftp_settings.hosts

        def drop_all_hosts():
            server.hosts = {h: "down" for h in sftp_settings.hosts}
            return transfer_error()

        server.get_outcomes = [drop_all_hosts]

        with pytest.raises(DownloadFailed) as exc_info:
            manager.download("q1.rpt", "/reports/2024/q1.rpt", retry_budget=1)

        # attempts 2 and 3 both fail while logging in again
        assert exc_info.value.attempts == 3
        assert server.count("get") == 1
        assert server.opened_hosts()[1:] == [a, b, c, a, b, c]
        assert isinstance(exc_info.value.__cause__, SftpConnectionError)
        assert exc_info.value.reconnects == 0

    def test_auth_rejection_on_reconnect_propagates(self, manager, connection, server, make_credentials, sftp_settings):
        connection.login(make_credentials())

        def revoke():
            server.hosts = {sftp_settings.hosts[0]: "auth"}
            return transfer_error()

        server.get_outcomes = [revoke]

        with pytest.raises(AuthenticationFailed):
            manager.download("q1.rpt", "/reports/2024/q1.rpt", retry_budget=3)
        assert server.count("get") == 1

    def test_delay_between_attempts(self, connection, store, make_credentials, server):
        sleep = MagicMock()
        policy = RetryPolicy(retry_budget=1, initial_delay=0.5, max_delay=10.0)
        manager = DownloadManager(connection, store, make_credentials, policy=policy, sleep=sleep)
        connection.login(make_credentials())
        server.get_outcomes = [transfer_error(), transfer_error(), True]

        manager.download("q1.rpt", "/reports/2024/q1.rpt")

        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]

    def test_failed_transfer_leaves_no_partial_file(self, manager, connection, server, make_credentials, store):
        connection.login(make_credentials())

        def partial_write():
            (store.directory / "q1.rpt.part").write_bytes(b"half")
            return transfer_error()

        server.get_outcomes = [partial_write]

        with pytest.raises(DownloadFailed):
            manager.download("q1.rpt", "/reports/2024/q1.rpt", retry_budget=0)

        assert list(store.directory.iterdir()) == []


class TestLocalDestination:
    """Destination paths in the local store."""

    def test_same_name_different_directories_collide(self, manager, store):
        first = manager.download("summary.rpt", "/reports/2023/summary.rpt")
        second = manager.download("summary.rpt", "/reports/2024/summary.rpt")

        assert first == second == store.directory / "summary.rpt"
        assert second.read_bytes() == b"contents of /reports/2024/summary.rpt"

    def test_directory_created(self, manager, store):
        assert not store.directory.exists()
        manager.download("a.txt", "/a.txt")
        assert store.directory.is_dir()

    def test_bare_name(self):
        assert bare_name("/reports/2024/q1.rpt") == "q1.rpt"
        assert bare_name("q1.rpt") == "q1.rpt"
        assert bare_name("C:\\temp\\q1.rpt") == "q1.rpt"

    def test_destination_rejects_non_file_names(self, store):
        with pytest.raises(ValueError):
            store.destination_for("/reports/..")

    def test_teardown(self, store):
        store.ensure()
        (store.directory / "x.txt").write_text("x")
        store.teardown()
        assert not store.directory.exists()
        store.teardown()

    def test_app_data_root_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setattr("sftpdash.transfer.storage.sys.platform", "linux")
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert local_app_data_root() == tmp_path

    def test_app_data_root_windows(self, monkeypatch, tmp_path):
        monkeypatch.setattr("sftpdash.transfer.storage.sys.platform", "win32")
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
        assert local_app_data_root() == Path(tmp_path)

    def test_default_store_location(self, monkeypatch, tmp_path):
        monkeypatch.setattr("sftpdash.transfer.storage.local_app_data_root", lambda: tmp_path)
        assert LocalStore("TSBDashboard").directory == tmp_path / "TSBDashboard"
