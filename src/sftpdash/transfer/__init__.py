"""
Downloading remote files into the local store.
"""

from sftpdash.transfer.download import CredentialsProvider, DownloadManager
from sftpdash.transfer.policy import DEFAULT_RETRY_POLICY, DownloadState, RetryPolicy
from sftpdash.transfer.storage import LocalStore, bare_name, local_app_data_root

__all__ = [
    "CredentialsProvider",
    "DownloadManager",
    "DEFAULT_RETRY_POLICY",
    "DownloadState",
    "RetryPolicy",
    "LocalStore",
    "bare_name",
    "local_app_data_root",
]
