"""Read-only configuration lookups for providers.

Goals
-----
* Expose the two lookups providers need: ``get_param`` (plain values) and
  ``get_secret`` (credentials).
* Merge sources in a predictable order (first hit wins):
    1. Environment variables (key name upper-cased, e.g. ``PAEAN_AI_HOST``)
    2. YAML file (``config.yaml`` for params, ``secrets.yaml`` for secrets)
* Re-read files when they change on disk so rotated credentials take effect
  without restarting the process. Nothing here writes configuration.

YAML Files
----------
Both files are flat mappings::

    A8E_PROVIDER: paean_ai
    PAEAN_AI_HOST: https://api.paean.ai

The configuration directory is ``$A8E_CONFIG_DIR`` (default ``~/.config/a8e``).

Public API
----------
* Config(config_path=None, secrets_path=None, environ=None)
* Config.global_config() -> Config
* ConfigError, ConfigKeyMissing, ConfigParseError
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .defaults import CONFIG_DIR_ENV, CONFIG_YAML_NAME, DEFAULT_CONFIG_DIR, SECRETS_YAML_NAME


class ConfigError(Exception):
    """Base class for configuration failures."""


class ConfigKeyMissing(ConfigError, LookupError):
    """Raised when neither the environment nor the file defines a key."""


class ConfigParseError(ConfigError):
    """Raised when a config file exists but cannot be read as a YAML mapping."""


@dataclass
class _FileSnapshot:
    mtime_ns: int
    values: Dict[str, Any]


def config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the configuration directory honoring ``A8E_CONFIG_DIR``."""
    env = os.environ if environ is None else environ
    return Path(env.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR).expanduser()


class Config:
    """Environment-first configuration reader backed by optional YAML files.

    Parameters:
        config_path: YAML file holding plain params. ``None`` disables the
            file source.
        secrets_path: YAML file holding secrets. ``None`` disables it.
        environ: Mapping used instead of ``os.environ`` (tests).

    Thread-safety:
        Lookups never mutate shared state other than the per-file snapshot
        cache, which is replaced wholesale on change.
    """

    def __init__(
        self,
        config_path: Optional[os.PathLike | str] = None,
        secrets_path: Optional[os.PathLike | str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._config_path = Path(config_path) if config_path else None
        self._secrets_path = Path(secrets_path) if secrets_path else None
        self._environ = environ
        self._cache: Dict[Path, _FileSnapshot] = {}

    @classmethod
    def global_config(cls) -> "Config":
        """Return a config reading ``config.yaml``/``secrets.yaml`` from the config dir."""
        base = config_dir()
        return cls(base / CONFIG_YAML_NAME, base / SECRETS_YAML_NAME)

    @classmethod
    def in_dir(cls, directory: os.PathLike | str, environ: Optional[Mapping[str, str]] = None) -> "Config":
        base = Path(directory)
        return cls(base / CONFIG_YAML_NAME, base / SECRETS_YAML_NAME, environ=environ)

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    def _env(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def _load(self, path: Optional[Path]) -> Dict[str, Any]:
        """Return the parsed mapping for ``path``, re-reading when mtime changes."""
        if path is None:
            return {}
        try:
            mtime_ns = path.stat().st_mtime_ns
        except FileNotFoundError:
            self._cache.pop(path, None)
            return {}
        cached = self._cache.get(path)
        if cached is not None and cached.mtime_ns == mtime_ns:
            return cached.values
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigParseError(f"failed to parse {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigParseError(f"{path} must contain a mapping at the top level")
        self._cache[path] = _FileSnapshot(mtime_ns=mtime_ns, values=data)
        return data

    def _lookup(self, key: str, path: Optional[Path]) -> Tuple[Any, str]:
        env_val = self._env().get(key.upper())
        if env_val is not None:
            return env_val, "env"
        values = self._load(path)
        if key in values and values[key] is not None:
            return values[key], "file"
        raise ConfigKeyMissing(f"configuration key {key} not found")

    def get_param(self, key: str) -> Any:
        """Return a plain configuration value.

        Raises:
            ConfigKeyMissing: When neither the environment nor the config
                file defines ``key``.
            ConfigParseError: When the config file is malformed.
        """
        return self._lookup(key, self._config_path)[0]

    def get_secret(self, key: str) -> Any:
        """Return a secret value from the environment or the secrets file.

        Raises:
            ConfigKeyMissing: When the secret is not configured.
            ConfigParseError: When the secrets file is malformed.
        """
        return self._lookup(key, self._secrets_path)[0]

    def source_of(self, key: str, *, secret: bool = False) -> Optional[str]:
        """Return ``"env"``/``"file"`` for where ``key`` resolves, or ``None``."""
        try:
            return self._lookup(key, self._secrets_path if secret else self._config_path)[1]
        except ConfigKeyMissing:
            return None


__all__ = [
    "Config",
    "ConfigError",
    "ConfigKeyMissing",
    "ConfigParseError",
    "config_dir",
]
