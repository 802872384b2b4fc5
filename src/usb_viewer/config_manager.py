"""
Configuration management for USB Viewer.

Handles loading and saving of the server and WMI query settings.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Optional
import yaml
from pydantic import ValidationError

from .models import AppConfig

logger = logging.getLogger(__name__)

# Use absolute path based on project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "config" / "viewer.yaml"


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load()
        return self._config  # type: ignore

    def load(self) -> AppConfig:
        """Load configuration from file."""
        if self.config_path.exists():
            try:
                with open(self.config_path) as f:
                    data = yaml.safe_load(f) or {}

                if not isinstance(data, dict):
                    raise ValueError(f"expected a mapping, got {type(data).__name__}")

                self._config = AppConfig(**data)
                logger.info(f"Loaded configuration from {self.config_path}")

            except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
                logger.exception(f"Error loading config from {self.config_path}: {e}")
                self._config = AppConfig()
        else:
            logger.info(f"No config file found at {self.config_path}, using defaults")
            self._config = AppConfig()

        return self._config

    def save(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        # Ensure directory exists
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self._config.model_dump()

        try:
            with open(self.config_path, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            logger.info(f"Saved configuration to {self.config_path}")
        except OSError as e:
            logger.exception(f"Error saving config to {self.config_path}: {e}")

    def update(self, **values: Any) -> AppConfig:
        """Validate and apply new settings, then save them."""
        merged = {**self.config.model_dump(), **values}
        self._config = AppConfig(**merged)
        self.save()
        return self._config


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[Path] = None) -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_path)
    return _config_manager
