"""
Typed settings built from a loaded Config.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sftpdash.config.loader import Config
from sftpdash.exceptions import ConfigurationError

DEFAULT_APP_NAME = "TSBDashboard"
DEFAULT_PORT = 22


@dataclass(frozen=True)
class SFTPSettings:
    """Remote side: ordered host list sharing one host-key fingerprint."""

    hosts: tuple[str, ...]
    host_key_fingerprint: str
    port: int = DEFAULT_PORT
    # Domain part of the "<domain>|<user>" login name; None = the host tried
    site_domain: str | None = None
    connect_timeout_s: float = 15.0

    def __post_init__(self):
        if not self.hosts:
            raise ConfigurationError("sftp.hosts must list at least one host")
        if any(not isinstance(h, str) or not h.strip() for h in self.hosts):
            raise ConfigurationError("sftp.hosts entries must be non-empty strings")
        if not self.host_key_fingerprint or not self.host_key_fingerprint.strip():
            raise ConfigurationError("sftp.host_key_fingerprint is required")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"sftp.port out of range: {self.port}")
        if self.connect_timeout_s <= 0:
            raise ConfigurationError("sftp.connect_timeout_s must be > 0")

    def login_name(self, host: str, username: str) -> str:
        """Username as sent to the server: ``<site-domain>|<username>``."""
        return f"{self.site_domain or host}|{username}"

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> SFTPSettings:
        hosts = cfg.get("hosts")
        if hosts is None and cfg.get("host"):
            hosts = [cfg["host"]]
        if isinstance(hosts, str):
            hosts = [hosts]
        try:
            return cls(
                hosts=tuple(hosts or ()),
                host_key_fingerprint=str(cfg.get("host_key_fingerprint") or ""),
                port=int(cfg.get("port", DEFAULT_PORT)),
                site_domain=cfg.get("site_domain"),
                connect_timeout_s=float(cfg.get("connect_timeout_s", 15.0)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid sftp configuration: {e}") from e


@dataclass(frozen=True)
class Settings:
    """Everything the client needs, grouped by config section."""

    sftp: SFTPSettings
    app_name: str = DEFAULT_APP_NAME
    cleanup_on_close: bool = True
    retry_budget: int = 1
    retry_delay_s: float = 0.0
    # handler name -> program path for external viewers
    handler_programs: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.retry_budget < 0:
            raise ConfigurationError("download.retry_budget must be >= 0")
        if self.retry_delay_s < 0:
            raise ConfigurationError("download.retry_delay_s must be >= 0")

    @classmethod
    def from_config(cls, config: Config) -> Settings:
        """
        Build settings from a loaded configuration.

        Raises:
            ConfigurationError: Missing ``sftp`` section or invalid values
        """
        sftp_cfg = config.section("sftp")
        if not sftp_cfg:
            raise ConfigurationError("Configuration is missing the 'sftp' section")

        app_cfg = config.section("app")
        download_cfg = config.section("download")
        handlers_cfg = config.section("handlers")

        try:
            return cls(
                sftp=SFTPSettings.from_dict(sftp_cfg),
                app_name=str(app_cfg.get("name", DEFAULT_APP_NAME)),
                cleanup_on_close=bool(app_cfg.get("cleanup_on_close", True)),
                retry_budget=int(download_cfg.get("retry_budget", 1)),
                retry_delay_s=float(download_cfg.get("retry_delay_s", 0.0)),
                handler_programs={str(k): str(v) for k, v in handlers_cfg.items() if v},
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
