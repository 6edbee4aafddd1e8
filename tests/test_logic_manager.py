"""Integration tests for LogicManager and model loading."""

import json
from unittest.mock import MagicMock

import pytest

from carebook.adapters.storage import JsonAddressBookStorage
from carebook.domain.commands import AddCommand
from carebook.domain.enums import RecordKind
from carebook.domain.model_manager import ModelManager
from carebook.domain.ports import Result, StoragePort
from carebook.main import LogicManager, create_storage_adapter, load_model

ADD_AMY = "add -pa n/Amy p/123 e/amy@example.com m/Asthma"


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "book.json"


@pytest.fixture
def logic(data_file):
    return LogicManager(ModelManager(), JsonAddressBookStorage(data_file))


class TestLogicManager:
    """Test suite for executing command text end to end."""

    def test_successful_command_is_saved(self, logic, data_file):
        """Test the data file reflects a successful command."""
        result = logic.execute(ADD_AMY)

        assert result.success
        document = json.loads(data_file.read_text(encoding="utf-8"))
        assert [record["name"] for record in document["records"]] == ["Amy"]

    def test_parse_error_becomes_failed_result(self, logic, data_file):
        """Test a parse failure returns the message and usage without saving."""
        result = logic.execute("add -pa n/Amy")

        assert not result.success
        assert AddCommand.MESSAGE_USAGE in result.feedback
        assert not data_file.exists()

    def test_command_error_becomes_failed_result(self, logic):
        """Test command failures are recovered into a failed result."""
        logic.execute(ADD_AMY)
        result = logic.execute(ADD_AMY.replace("amy@example.com", "other@example.com"))

        assert not result.success
        assert result.feedback == "This person already exists in the address book."

    def test_undo_at_start(self, logic):
        """Test undo with no history reports instead of raising."""
        result = logic.execute("undo")

        assert not result.success
        assert result.feedback == "No more commands to undo!"

    def test_edit_undo_redo(self, logic):
        """Test the edit history scenario through command text."""
        logic.execute(ADD_AMY)
        history = logic.model.get_address_book()

        assert logic.execute("edit -pa 1 p/456").success
        assert logic.model.list_records()[0].phone == "456"

        assert logic.execute("undo").success
        assert logic.model.list_records()[0].phone == "123"

        assert logic.execute("redo").success
        assert logic.model.list_records()[0].phone == "456"
        assert history.pointer == 2

    def test_delete_out_of_range_changes_nothing(self, logic):
        """Test a batch delete with one bad index keeps every record."""
        for number in range(3):
            logic.execute(f"add -pa n/Person {number} p/10{number} e/p{number}@example.com m/Flu")
        state_count = logic.model.get_address_book().state_count

        result = logic.execute("delete 1 5")

        assert not result.success
        assert len(logic.model.list_records()) == 3
        assert logic.model.get_address_book().state_count == state_count

    def test_shortcut_is_usable(self, logic):
        """Test a registered shortcut expands to its command word."""
        assert logic.execute("addsc sc/ls kw/list").success

        result = logic.execute("ls -sp")

        assert result.success
        assert result.feedback == "Listed all specialists"

    def test_save_failure_reported(self):
        """Test a storage failure after a command becomes a failed result."""
        storage = MagicMock(spec=StoragePort)
        storage.save_address_book.return_value = Result.failure_result(
            "disk full", error_type="StorageError"
        )
        logic = LogicManager(ModelManager(), storage)

        result = logic.execute("exit")

        assert not result.success
        assert result.exit
        assert result.feedback == "Could not save data to file: disk full"

    def test_help_and_exit_flags(self, logic):
        """Test presentation flags pass through."""
        assert logic.execute("help").show_help
        assert logic.execute("exit").exit


class TestLoadModel:
    """Test suite for building the model from storage."""

    def test_missing_file_gives_empty_model(self, data_file):
        """Test a first run starts with an empty address book."""
        result = load_model(JsonAddressBookStorage(data_file), default_kind=RecordKind.PATIENT)

        assert result.is_success()
        assert len(result.value.get_address_book()) == 0

    def test_load_saved_book(self, logic, data_file):
        """Test records and shortcuts survive a restart."""
        logic.execute(ADD_AMY)
        logic.execute("addsc sc/ls kw/list")

        result = load_model(JsonAddressBookStorage(data_file), default_kind=RecordKind.PATIENT)

        assert result.is_success()
        assert [record.name for record in result.value.list_records()] == ["Amy"]
        assert result.value.get_shortcut("ls") == "list"
        assert not result.value.can_undo()

    def test_load_failure_is_passed_through(self, data_file):
        """Test a corrupt data file is reported, not replaced."""
        data_file.write_text("{oops", encoding="utf-8")

        result = load_model(JsonAddressBookStorage(data_file))

        assert result.is_failure()
        assert result.error_type == "DataLoadingError"
        assert result.error_details["path"] == str(data_file)

    def test_create_storage_adapter_with_path(self, data_file):
        """Test an explicit path overrides the configured data file."""
        storage = create_storage_adapter(data_file)

        assert isinstance(storage, JsonAddressBookStorage)
        assert storage.file_path == data_file
