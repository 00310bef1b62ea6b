"""Configuration service for managing Flow CLI configuration.

This module provides the ConfigService class, the single source of truth
for configuration in Flow CLI. It handles:

- Loading and saving config.json
- Config file initialization with sensible defaults
- The small mutations the interactive session makes (first-run flag,
  last chosen methodology, notification toggle)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

from flow_cli.models.config_models import AppConfig, MethodologyId


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("flow_cli"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("flow_cli"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config  # Return cached config if already loaded

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self):
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))

            self.config_path.chmod(0o600)
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self):
        """Reset configuration to defaults."""
        self._config = None
        if self.config_path.exists():
            self.config_path.unlink()
        self._config = AppConfig()
        self.save_config()

    def mark_first_run_done(self) -> None:
        """Record that the welcome screen has been shown."""
        if self.config.first_run:
            self.config.first_run = False
            self.save_config()

    def set_methodology(self, methodology: MethodologyId) -> None:
        """Remember the methodology picked in the mode picker."""
        self.config.methodology = methodology
        self.save_config()

    def set_notifications(self, enabled: bool) -> None:
        """Persist the notification toggle."""
        self.config.notifications.enabled = enabled
        self.save_config()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
