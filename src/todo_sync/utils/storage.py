"""Config, state and token files for todo-sync."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_DIR = Path.home() / ".todo-sync"


class StorageManager:
    """Manages config.yaml, state.json and tokens.json in the config directory."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize storage manager.

        Args:
            config_dir: Directory to store configuration. Defaults to ~/.todo-sync/
        """
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "config.yaml"
        self.state_file = self.config_dir / "state.json"
        self.tokens_file = self.config_dir / "tokens.json"

    def load_config(self) -> dict[str, Any]:
        """Load the YAML configuration, or an empty one if there is none."""
        if self.config_file.exists():
            with open(self.config_file) as f:
                return yaml.safe_load(f) or {}
        return {}

    def save_config(self, config: dict[str, Any]) -> None:
        """Save the YAML configuration."""
        with open(self.config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    def load_state(self) -> dict[str, Any]:
        """Load synchronization state.

        Returns:
            State dictionary with last sync timestamp, etc.
        """
        if self.state_file.exists():
            with open(self.state_file) as f:
                return json.load(f)
        return {}

    def save_state(self, state: dict[str, Any]) -> None:
        """Save synchronization state."""
        with open(self.state_file, "w") as f:
            json.dump(state, f, indent=2)

    def get_last_sync_date(self) -> datetime | None:
        """Get the cutoff recorded by the last successful sync.

        Returns:
            Last sync datetime or None if never synced.
        """
        state = self.load_state()
        if "last_sync_date" in state:
            return datetime.fromisoformat(state["last_sync_date"])
        return None

    def set_last_sync_date(self, date: datetime) -> None:
        """Record the cutoff for the next sync."""
        state = self.load_state()
        state["last_sync_date"] = date.isoformat()
        self.save_state(state)

    def clear_last_sync_date(self) -> None:
        """Forget the last sync date so the next sync starts from scratch."""
        state = self.load_state()
        state.pop("last_sync_date", None)
        self.save_state(state)

    def get_token(self, service: str) -> str | None:
        """Get a stored API token.

        Args:
            service: Service name, e.g. "remote".

        Returns:
            Token if available, None otherwise.
        """
        if not self.tokens_file.exists():
            return None
        with open(self.tokens_file) as f:
            tokens: dict[str, str] = json.load(f)
        return tokens.get(service)

    def set_token(self, service: str, token: str) -> None:
        """Store an API token, readable by the current user only."""
        tokens: dict[str, str] = {}
        if self.tokens_file.exists():
            with open(self.tokens_file) as f:
                tokens = json.load(f)
        tokens[service] = token
        with open(self.tokens_file, "w") as f:
            json.dump(tokens, f)
        self.tokens_file.chmod(0o600)
