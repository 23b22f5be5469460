"""
Single-file download with bounded retry and forced reconnects.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from sftpdash.connections.manager import ConnectionManager
from sftpdash.credentials import Credentials
from sftpdash.exceptions import AuthenticationFailed, DownloadFailed
from sftpdash.transfer.policy import DEFAULT_RETRY_POLICY, DownloadState, RetryPolicy
from sftpdash.transfer.storage import LocalStore
from sftpdash.utils.logging import get_logger

logger = get_logger("sftpdash.transfer.download")

CredentialsProvider = Callable[[], Credentials]


class DownloadManager:
    """
    Transfers one remote file into the local store.

    Every retry runs against a freshly authenticated session: the stale
    session is closed and the connection manager logs in again with
    credentials fetched from ``credentials_provider``, which must return a
    new ``Credentials`` on each call since each login releases the secret
    it was given.

    Examples:
        >>> manager = DownloadManager(connection, LocalStore("TSBDashboard"), ask_for_credentials)
        >>> manager.download("report.rpt", "/reports/2024/report.rpt")
        PosixPath('/home/me/.local/share/TSBDashboard/report.rpt')
    """

    def __init__(
        self,
        connection: ConnectionManager,
        store: LocalStore,
        credentials_provider: CredentialsProvider,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.connection = connection
        self.store = store
        self.credentials_provider = credentials_provider
        self.policy = policy or DEFAULT_RETRY_POLICY
        self._sleep = sleep

    def download(self, file_name: str, remote_path: str, retry_budget: int | None = None) -> Path:
        """
        Download ``remote_path`` to ``<store>/<bare file_name>``.

        Args:
            file_name: Name used for the local file (directory parts dropped)
            remote_path: Full path of the file on the server
            retry_budget: Overrides the policy's budget for this call

        Returns:
            Local path of the downloaded file

        Raises:
            AuthenticationFailed: A reconnect was refused; not retried
            DownloadFailed: Every permitted attempt failed
        """
        policy = self.policy if retry_budget is None else replace(self.policy, retry_budget=retry_budget)
        destination = self.store.destination_for(file_name)
        self.store.ensure()

        state = DownloadState(file_name=file_name, remote_path=remote_path)
        remaining = policy.retry_budget
        final_attempt_pending = False

        while True:
            state.attempts += 1
            try:
                if state.attempts > 1 or not self.connection.is_open():
                    self._reconnect(state)
                self._transfer(remote_path, destination)
            except AuthenticationFailed:
                raise
            except Exception as e:
                state.record_failure(e)
                if remaining > 0:
                    remaining -= 1
                    # budget just ran out: one more try on a fresh session
                    final_attempt_pending = remaining == 0
                elif final_attempt_pending:
                    final_attempt_pending = False
                else:
                    logger.error(f"Download of {remote_path} failed after {state.attempts} attempt(s): {e}")
                    raise DownloadFailed(
                        file_name,
                        remote_path,
                        attempts=state.attempts,
                        reconnects=state.reconnects,
                        cause=state.last_error,
                    ) from e

                delay = policy.get_delay(state.attempts - 1)
                logger.warning(
                    f"Download of {remote_path} attempt {state.attempts} failed: {e}. "
                    f"Reconnecting and retrying" + (f" in {delay:.2f}s" if delay else "")
                )
                if delay:
                    self._sleep(delay)
                continue

            if state.attempts > 1:
                logger.info(f"Downloaded {remote_path} after {state.attempts} attempts")
            else:
                logger.info(f"Downloaded {remote_path} to {destination}")
            return destination

    def _reconnect(self, state: DownloadState) -> None:
        self.connection.close()
        self.connection.login(self.credentials_provider())
        state.reconnects += 1

    def _transfer(self, remote_path: str, destination: Path) -> None:
        sftp = self.connection.sftp
        partial = destination.with_name(destination.name + ".part")
        try:
            sftp.get(remote_path, str(partial))
            os.replace(partial, destination)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
