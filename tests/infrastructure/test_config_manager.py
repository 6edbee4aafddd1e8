"""Tests for configuration loading and application settings."""

import json
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from carebook.domain.enums import RecordKind
from carebook.infrastructure.config_manager import DEFAULT_DATA_FILE, ConfigManager, StorageConfig
from carebook.infrastructure.settings import Settings


class TestStorageConfig:
    """Test validation of the storage configuration."""

    def test_default_data_file(self):
        """Test the default data file location."""
        assert StorageConfig().data_file == DEFAULT_DATA_FILE

    def test_non_json_path_rejected(self):
        """Test the data file must have a .json suffix."""
        with pytest.raises(ValidationError):
            StorageConfig(data_file="data/carebook.csv")

    def test_directory_rejected(self, tmp_path):
        """Test an existing directory cannot be the data file."""
        directory = tmp_path / "book.json"
        directory.mkdir()
        with pytest.raises(ValidationError):
            StorageConfig(data_file=str(directory))


class TestConfigManager:
    """Test the configuration sources."""

    def test_from_environment(self, tmp_path):
        """Test CB_DATA_FILE is read from the environment."""
        with patch.dict(os.environ, {"CB_DATA_FILE": "clinic/book.json"}):
            config = ConfigManager.from_environment(env_file=tmp_path / ".env")

        assert config.get_storage_config().data_file == os.path.join("clinic", "book.json")
        assert config.get("storage.data_file") == "clinic/book.json"

    def test_from_environment_loads_env_file(self, tmp_path):
        """Test a .env file seeds missing variables."""
        env_file = tmp_path / ".env"
        env_file.write_text("CB_DATA_FILE=from_dotenv.json\n", encoding="utf-8")

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("CB_DATA_FILE", None)
            config = ConfigManager.from_environment(env_file=env_file)

        assert config.get_storage_config().data_file == "from_dotenv.json"

    def test_from_file(self, tmp_path):
        """Test configuration can come from a JSON file."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"storage": {"data_file": "x.json"}}), encoding="utf-8")

        config = ConfigManager.from_file(str(config_file))

        assert config.get_storage_config().data_file == "x.json"
        assert config.get("storage.missing", "fallback") == "fallback"

    def test_from_missing_file(self, tmp_path):
        """Test a missing configuration file raises."""
        with pytest.raises(FileNotFoundError):
            ConfigManager.from_file(str(tmp_path / "nope.json"))

    def test_from_invalid_file(self, tmp_path):
        """Test invalid JSON raises ValueError."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager.from_file(str(config_file))


class TestSettings:
    """Test environment-driven application settings."""

    def test_defaults(self):
        """Test defaults when no variable is set."""
        keys = ("CB_APP_NAME", "CB_LOG_LEVEL", "CB_LOG_JSON", "CB_DEFAULT_VIEW")
        with patch.dict(os.environ, {}, clear=False):
            for key in keys:
                os.environ.pop(key, None)
            settings = Settings()

        assert settings.app_name == "CareBook"
        assert settings.log_level == "INFO"
        assert settings.log_json is False
        assert settings.get_default_kind() is RecordKind.PATIENT

    def test_environment_overrides(self):
        """Test variables override the defaults."""
        env = {"CB_LOG_JSON": "true", "CB_DEFAULT_VIEW": "Specialist", "CB_APP_NAME": "Ward 7"}
        with patch.dict(os.environ, env):
            settings = Settings()

        assert settings.log_json is True
        assert settings.app_name == "Ward 7"
        assert settings.get_default_kind() is RecordKind.SPECIALIST

    def test_invalid_default_view(self):
        """Test an unknown default view is reported."""
        with patch.dict(os.environ, {"CB_DEFAULT_VIEW": "nurse"}):
            settings = Settings()
        with pytest.raises(ValueError):
            settings.get_default_kind()

    def test_config_file_overrides_environment(self, tmp_path):
        """Test CB_CONFIG_FILE is read with ConfigManager.from_file."""
        config_file = tmp_path / "carebook.config.json"
        config_file.write_text(json.dumps({"storage": {"data_file": "ward.json"}}), encoding="utf-8")

        with patch.dict(os.environ, {"CB_CONFIG_FILE": str(config_file), "CB_DATA_FILE": "other.json"}):
            settings = Settings()

            assert settings.get_data_file() == "ward.json"

    def test_log_file(self, tmp_path):
        """Test CB_LOG_FILE is exposed as a path, and absent means none."""
        with patch.dict(os.environ, {"CB_LOG_FILE": str(tmp_path / "carebook.log")}):
            settings = Settings()
        assert settings.get_log_file() == tmp_path / "carebook.log"

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("CB_LOG_FILE", None)
            assert Settings().get_log_file() is None
