"""
Configuration management.

YAML file loading, environment resolution and typed settings.
"""

from sftpdash.config.loader import Config, load_config
from sftpdash.config.resolver import resolve_config
from sftpdash.config.settings import SFTPSettings, Settings

__all__ = [
    "load_config",
    "Config",
    "resolve_config",
    "SFTPSettings",
    "Settings",
]
