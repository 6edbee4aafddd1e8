"""Configuration Manager.

This module loads the storage configuration for CareBook from environment
variables (optionally seeded from a ``.env`` file) or from a JSON file, and
validates it before anything touches the disk.

Architecture:
    - Follows Hexagonal Architecture: Infrastructure layer isolated from domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "data/carebook.json"


class StorageConfig(BaseModel):
    """Storage configuration model.

    Parameters:
        data_file: Path to the JSON data file. The file and its parent
            directories are created on the first save.
    """

    data_file: str = Field(default=DEFAULT_DATA_FILE, description="Path to the JSON data file")

    @field_validator("data_file")
    @classmethod
    def validate_data_file(cls, v: str) -> str:
        """Validate the data file is a JSON path."""
        v = v.strip()
        if not v:
            raise ValueError("Data file path must not be empty")
        path = Path(v)
        if path.suffix.lower() != ".json":
            raise ValueError(f"Data file must be a .json file: {v}")
        if path.exists() and path.is_dir():
            raise ValueError(f"Data file path is a directory: {v}")
        return str(path)

    @property
    def path(self) -> Path:
        return Path(self.data_file)


class ConfigManager:
    """Configuration manager for storage and application settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        storage_config = config.get_storage_config()

        # Load from file
        config = ConfigManager.from_file("carebook.config.json")
        storage_config = config.get_storage_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary
        """
        self._config_data = config_data
        self._storage_config: Optional[StorageConfig] = None

    @classmethod
    def from_environment(cls, env_file: Optional[Path] = None) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - CB_DATA_FILE: Path to the JSON data file

        Parameters:
            env_file: ``.env`` file to load first; defaults to the one in the
                current working directory. Variables already set in the
                environment are not overridden.

        Returns:
            ConfigManager instance
        """
        env_path = env_file or Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        config_data = {
            "storage": {
                "data_file": os.getenv("CB_DATA_FILE", DEFAULT_DATA_FILE),
            }
        }

        return cls(config_data)

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration file must contain a JSON object: {config_path}")

        return cls(config_data)

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration.

        Returns:
            StorageConfig instance, validated on first access
        """
        if self._storage_config is None:
            storage_data = self._config_data.get("storage", {})
            self._storage_config = StorageConfig(**storage_data)

        return self._storage_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Parameters:
            key: Configuration key (supports dot notation, e.g., "storage.data_file")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config_data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

