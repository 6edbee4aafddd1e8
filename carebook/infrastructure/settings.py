"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.
"""

import os
from pathlib import Path
from typing import Optional

from carebook.domain.enums import RecordKind
from carebook.infrastructure.config_manager import ConfigManager, StorageConfig

# Application metadata
APP_NAME = "CareBook"
APP_VERSION = "1.0.0"

# Record kind shown when the application starts
DEFAULT_VIEW = RecordKind.PATIENT.value


class Settings:
    """Application settings loaded from configuration manager and environment.

    This class provides a unified interface for accessing application settings,
    combining values from the configuration manager with environment variables
    and sensible defaults.
    """

    def __init__(self):
        """Initialize settings from configuration manager and environment."""
        self._storage_config: Optional[StorageConfig] = None
        self._config_manager: Optional[ConfigManager] = None

        # Application settings from environment
        self.app_name = os.getenv("CB_APP_NAME", APP_NAME)
        self.default_view = os.getenv("CB_DEFAULT_VIEW", DEFAULT_VIEW).lower()

        # Optional JSON configuration file; overrides CB_DATA_FILE when set
        self.config_file = os.getenv("CB_CONFIG_FILE") or None

        # Logging
        self.log_level = os.getenv("CB_LOG_LEVEL", "INFO")
        self.log_json = os.getenv("CB_LOG_JSON", "false").lower() == "true"
        self.log_file = os.getenv("CB_LOG_FILE") or None

    @property
    def config_manager(self) -> ConfigManager:
        """Get configuration manager instance.

        Returns:
            ConfigManager instance, read from CB_CONFIG_FILE when set

        Raises:
            FileNotFoundError: If CB_CONFIG_FILE does not exist
            ValueError: If CB_CONFIG_FILE is not a JSON object
        """
        if self._config_manager is None:
            if self.config_file:
                self._config_manager = ConfigManager.from_file(self.config_file)
            else:
                self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def storage_config(self) -> StorageConfig:
        """Get storage configuration, loaded lazily on first access."""
        if self._storage_config is None:
            self._storage_config = self.config_manager.get_storage_config()
        return self._storage_config

    def get_data_file(self) -> str:
        return self.storage_config.data_file

    def get_log_file(self) -> Optional[Path]:
        return Path(self.log_file) if self.log_file else None

    def get_default_kind(self) -> RecordKind:
        """Record kind shown at startup.

        Raises:
            ValueError: If CB_DEFAULT_VIEW is not a record kind
        """
        try:
            return RecordKind(self.default_view)
        except ValueError:
            raise ValueError(
                f"CB_DEFAULT_VIEW must be one of {[kind.value for kind in RecordKind]}, "
                f"got '{self.default_view}'"
            )


# Global settings instance
settings = Settings()
