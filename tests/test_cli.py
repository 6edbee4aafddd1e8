"""Tests for the Typer command line interface."""

import json

import pytest
from typer.testing import CliRunner

from carebook.cli import app
from carebook.infrastructure.settings import Settings

runner = CliRunner()


class TestCli:
    """Test suite for the CLI commands."""

    def test_version(self):
        """Test --version prints the version and exits cleanly."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "CareBook v" in result.output

    def test_exec_saves(self, tmp_path):
        """Test exec runs one command against the given data file."""
        data_file = tmp_path / "book.json"
        result = runner.invoke(app, [
            "exec", "add -sp n/Carl Kurz p/95352563 e/carl@example.com l/North s/ENT",
            "--data-file", str(data_file),
        ])

        assert result.exit_code == 0
        document = json.loads(data_file.read_text(encoding="utf-8"))
        assert document["records"][0]["kind"] == "specialist"

    def test_exec_failure_exit_code(self, tmp_path):
        """Test a failing command exits with code 1."""
        result = runner.invoke(app, ["exec", "undo", "--data-file", str(tmp_path / "book.json")])
        assert result.exit_code == 1

    def test_corrupt_data_file(self, tmp_path):
        """Test a corrupt data file stops the CLI with code 1."""
        data_file = tmp_path / "book.json"
        data_file.write_text("[1, 2", encoding="utf-8")

        result = runner.invoke(app, ["exec", "list -pa", "--data-file", str(data_file)])

        assert result.exit_code == 1
        assert "DataLoadingError" in result.output

    def test_run_until_exit(self, tmp_path):
        """Test the interactive loop reads commands until exit."""
        data_file = tmp_path / "book.json"
        result = runner.invoke(
            app,
            ["run", "--data-file", str(data_file)],
            input="add -pa n/Amy p/123 e/amy@example.com m/Asthma\nexit\n",
        )

        assert result.exit_code == 0
        assert "Amy" in result.output
        assert data_file.exists()

    def test_run_ends_on_eof(self, tmp_path):
        """Test the interactive loop ends cleanly when input runs out."""
        result = runner.invoke(app, ["run", "--data-file", str(tmp_path / "book.json")], input="")
        assert result.exit_code == 0

    def test_info(self):
        """Test info shows the configuration."""
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Data File" in result.output


@pytest.fixture
def use_environment(monkeypatch):
    """Rebuild the CLI settings from the given environment variables."""
    def apply(**env):
        for key in ("CB_DATA_FILE", "CB_DEFAULT_VIEW", "CB_CONFIG_FILE", "CB_LOG_FILE"):
            monkeypatch.delenv(key, raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        fresh = Settings()
        monkeypatch.setattr("carebook.cli.settings", fresh)
        monkeypatch.setattr("carebook.main.settings", fresh)
        return fresh
    return apply


class TestCliConfiguration:
    """Test configuration problems are reported instead of raised."""

    def test_bad_default_view(self, use_environment, tmp_path):
        """Test an unknown CB_DEFAULT_VIEW exits with code 1 and a message."""
        use_environment(CB_DEFAULT_VIEW="doctor")

        result = runner.invoke(app, ["exec", "list -pa", "--data-file", str(tmp_path / "book.json")])

        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert "CB_DEFAULT_VIEW" in result.output

    def test_non_json_data_file_on_exec(self, use_environment, tmp_path):
        """Test a CB_DATA_FILE without a .json suffix stops exec cleanly."""
        use_environment(CB_DATA_FILE=str(tmp_path / "book.txt"))

        result = runner.invoke(app, ["exec", "list -pa"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert ".json" in result.output

    def test_non_json_data_file_on_info(self, use_environment, tmp_path):
        """Test info reports a CB_DATA_FILE without a .json suffix."""
        use_environment(CB_DATA_FILE=str(tmp_path / "book.txt"))

        result = runner.invoke(app, ["info"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_missing_config_file(self, use_environment, tmp_path):
        """Test a CB_CONFIG_FILE that does not exist stops the CLI cleanly."""
        use_environment(CB_CONFIG_FILE=str(tmp_path / "missing.json"))

        result = runner.invoke(app, ["info"])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_config_file_sets_data_file(self, use_environment, tmp_path):
        """Test the data file named in CB_CONFIG_FILE is used by exec."""
        data_file = tmp_path / "from_config.json"
        config_file = tmp_path / "carebook.config.json"
        config_file.write_text(json.dumps({"storage": {"data_file": str(data_file)}}), encoding="utf-8")
        use_environment(CB_CONFIG_FILE=str(config_file))

        result = runner.invoke(app, ["exec", "add -pa n/Amy p/123 e/amy@example.com m/Asthma"])

        assert result.exit_code == 0
        assert data_file.exists()

    def test_log_file_receives_logs(self, use_environment, tmp_path):
        """Test CB_LOG_FILE adds a file handler alongside stderr."""
        log_file = tmp_path / "logs" / "carebook.log"
        use_environment(CB_LOG_FILE=str(log_file))

        result = runner.invoke(app, ["exec", "list -sp", "--data-file", str(tmp_path / "book.json")])

        assert result.exit_code == 0
        assert "Executing command 'list'" in log_file.read_text(encoding="utf-8")
