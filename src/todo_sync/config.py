"""Configuration management for todo-sync."""

import logging
from pathlib import Path
from typing import Any

from todo_sync.exceptions import ConfigurationError
from todo_sync.models import ApplyPolicy
from todo_sync.utils.storage import StorageManager

logger = logging.getLogger(__name__)


class Config:
    """Settings from config.yaml, with defaults for anything left unset."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            config_dir: Directory for storing configuration.
        """
        self.storage = StorageManager(config_dir)
        self._config = self.storage.load_config()

    def get_config(self) -> dict[str, Any]:
        """Get the raw configuration."""
        return self._config

    def update(self, key: str, value: Any) -> None:
        """Set a top-level configuration value and save it.

        Args:
            key: Configuration key, e.g. "store_path".
            value: New value; None removes the key.
        """
        if value is None:
            self._config.pop(key, None)
        else:
            self._config[key] = value
        self.storage.save_config(self._config)

    def _path_setting(self, key: str, default_name: str) -> Path:
        value = self._config.get(key)
        if value:
            return Path(value).expanduser()

        default = self.storage.config_dir / default_name
        logger.warning(f"No {key} in {self.storage.config_file}, using {default}")
        return default

    @property
    def store_path(self) -> Path:
        """Local todo file being synchronized."""
        return self._path_setting("store_path", "todos.yaml")

    @property
    def ledger_path(self) -> Path:
        """Ledger file recording the mapped IDs seen by the last sync."""
        value = self._config.get("ledger_path")
        if value:
            return Path(value).expanduser()
        return self.storage.config_dir / "ledger.bin"

    @property
    def remote_url(self) -> str | None:
        """Base URL of the remote todo service, if one is configured."""
        remote = self._config.get("remote") or {}
        return remote.get("base_url") or None

    @property
    def mirror_path(self) -> Path | None:
        """YAML file to mirror todos into instead of a remote service."""
        value = self._config.get("mirror_path")
        return Path(value).expanduser() if value else None

    @property
    def apply_policy(self) -> ApplyPolicy:
        """Failure policy for pushing changes.

        Raises:
            ConfigurationError: If the configured value is not a known policy.
        """
        value = self._config.get("apply_policy", ApplyPolicy.BEST_EFFORT.value)
        try:
            return ApplyPolicy(value)
        except ValueError:
            choices = ", ".join(p.value for p in ApplyPolicy)
            raise ConfigurationError(
                f"Unknown apply_policy {value!r}, expected one of: {choices}"
            ) from None

    def set_remote_url(self, base_url: str) -> None:
        """Point synchronization at a remote todo service."""
        remote = dict(self._config.get("remote") or {})
        remote["base_url"] = base_url
        self.update("remote", remote)
