"""Application wiring for CareBook.

This module connects the pieces: it builds the storage adapter from
configuration, loads the saved address book into a ModelManager, and exposes
LogicManager, the single entry point that turns a line of user input into a
CommandResult.

Architecture:
    - Follows Hexagonal Architecture principles
    - Storage adapter is configured via configuration manager
    - Every CareBookError is recovered here; nothing a user types can
      terminate the process
"""

import logging
from pathlib import Path
from typing import Optional, Union

from carebook.adapters.parser import CommandParser
from carebook.adapters.storage import JsonAddressBookStorage
from carebook.domain.commands import CommandResult
from carebook.domain.enums import RecordKind
from carebook.domain.model_manager import ModelManager
from carebook.domain.ports import CareBookError, ParseError, Result, StoragePort
from carebook.infrastructure.settings import settings

logger = logging.getLogger(__name__)


def create_storage_adapter(path: Optional[Union[str, Path]] = None) -> StoragePort:
    """Create storage adapter based on configuration.

    Parameters:
        path: Data file to use instead of the configured one

    Returns:
        StoragePort: Configured storage adapter instance
    """
    data_file = Path(path) if path is not None else settings.storage_config.path
    logger.info(f"Initializing JSON storage with path: {data_file}")
    return JsonAddressBookStorage(data_file)


def load_model(storage: StoragePort, default_kind: Optional[RecordKind] = None) -> Result[ModelManager]:
    """Load the saved address book into a fresh ModelManager.

    A missing data file yields an empty model. A malformed one is reported as
    the storage failure unchanged, so the caller can show what is wrong
    instead of silently starting from nothing.

    Parameters:
        storage: Storage adapter to read from
        default_kind: Record kind shown first; defaults to the configured view

    Returns:
        Result[ModelManager]: The model, or the storage failure
    """
    read_result = storage.read_address_book()
    if read_result.is_failure():
        logger.error(f"Failed to load address book: {read_result.error}")
        return Result.failure_result(
            read_result.error,
            error_type=read_result.error_type,
            error_details=read_result.error_details
        )

    if read_result.value is None:
        logger.info("No saved data found, starting with an empty address book")

    kind = default_kind or settings.get_default_kind()
    return Result.success_result(ModelManager(read_result.value, default_kind=kind))


class LogicManager:
    """Parses and executes commands, then persists the result.

    Parameters:
        model: Live model every command runs against
        storage: Adapter the address book is saved to after each successful
            command

    Example Usage:
        ```python
        storage = create_storage_adapter()
        model = load_model(storage).value
        logic = LogicManager(model, storage)
        result = logic.execute("list -sp")
        print(result.feedback)
        ```
    """

    def __init__(self, model: ModelManager, storage: StoragePort):
        self.model = model
        self.storage = storage
        self.parser = CommandParser(model.get_shortcut)

    def execute(self, command_text: str) -> CommandResult:
        """Run one line of user input.

        Returns:
            CommandResult: The command's result, or a failed result carrying
            the error message. The address book is saved only after a
            successful command.
        """
        command_word = command_text.split()[0] if command_text.split() else ""
        logger.info(f"Executing command '{command_word}'")

        try:
            command = self.parser.parse_command(command_text)
            result = command.execute(self.model)
        except ParseError as e:
            logger.warning(f"Could not parse command '{command_word}': {e}")
            feedback = f"{e}\n{e.usage}" if e.usage else str(e)
            return CommandResult(feedback, success=False)
        except CareBookError as e:
            logger.warning(f"Command '{command_word}' failed: {e}")
            return CommandResult(str(e), success=False)

        save_result = self.storage.save_address_book(self.model.get_address_book())
        if save_result.is_failure():
            logger.warning(f"Could not save after '{command_word}': {save_result.error}")
            return CommandResult(
                f"Could not save data to file: {save_result.error}",
                show_help=result.show_help,
                exit=result.exit,
                success=False
            )

        return result
