"""
Configuration file loading.

Loads ``config.yaml`` (plus an optional ``config.{env}.yaml`` overlay) and
resolves environment placeholders.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from sftpdash.config.resolver import resolve_config
from sftpdash.exceptions import ConfigurationError


class Config:
    """Configuration container with dict-like and dotted-key access."""

    def __init__(self, data: dict[str, Any]):
        self.data = data

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        value = self.data
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def section(self, key: str) -> dict[str, Any]:
        """Return a top-level mapping section, or an empty dict."""
        value = self.data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(
                f"Configuration '{key}' must be a mapping, got {type(value).__name__}",
                details={"key": key},
            )
        return value

    def __getitem__(self, key: str) -> Any:
        if "." in key:
            return self.get(key)
        if key in self.data:
            value = self.data[key]
            if isinstance(value, dict):
                return Config(value)
            return value
        raise KeyError(f"Config key '{key}' not found")

    def __contains__(self, key: str) -> bool:
        value = self.data
        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return False
            value = value[k]
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)


def load_config(project_path: Path | None = None, env: str | None = None) -> Config:
    """
    Load sftpdash configuration.

    Args:
        project_path: Directory holding config.yaml, or the path of a YAML
            file (default: current directory)
        env: Environment name; ``config.{env}.yaml`` overrides the base file

    Returns:
        Config instance with merged configuration

    Raises:
        ConfigurationError: File missing, unreadable, or not valid YAML
    """
    if project_path is None:
        project_path = Path.cwd()
    project_path = Path(project_path)

    if project_path.suffix in (".yaml", ".yml"):
        base_config_path = project_path
        project_path = project_path.parent
    else:
        base_config_path = project_path / "config.yaml"

    if not base_config_path.is_file():
        raise ConfigurationError(
            f"Configuration file not found: {base_config_path}\n"
            f"  Suggestion: Create a config.yaml file with an 'sftp' section",
            details={"path": str(base_config_path)},
        )

    config_data = _read_yaml(base_config_path)

    if env:
        env_config_path = project_path / f"config.{env}.yaml"
        if env_config_path.exists():
            _merge_dict(config_data, _read_yaml(env_config_path))

    config_data = resolve_config(config_data, env or "dev")
    return Config(config_data)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        if hasattr(e, "problem_mark"):
            mark = e.problem_mark
            raise ConfigurationError(
                f"Error parsing {path.name} at line {mark.line + 1}, column {mark.column + 1}:\n"
                f"  {e}\n"
                f"  Suggestion: Check YAML syntax, ensure proper indentation and quotes",
                details={"path": str(path)},
            ) from e
        raise ConfigurationError(f"Error parsing {path.name}: {e}", details={"path": str(path)}) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}", details={"path": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(data).__name__}",
            details={"path": str(path)},
        )
    return data


def _merge_dict(base: dict, override: dict):
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value
