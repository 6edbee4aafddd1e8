"""Domain Ports - Abstract Contracts for the Command Engine.

This module defines the Port interfaces (abstract contracts) that the command
layer and the storage adapters are written against, together with the
exception hierarchy every layer shares.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Commands only see ModelPort, never the concrete ModelManager
    - Storage adapters implement StoragePort and report failures as Result
      objects, so a malformed data file surfaces as a structured error
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, Optional, Sequence, TypeVar, Union

from carebook.domain.enums import RecordKind
from carebook.domain.records import BaseRecord

if TYPE_CHECKING:
    from carebook.domain.address_book import AddressBook

# Type variable for Result generic
T = TypeVar('T')

RecordPredicate = Callable[[BaseRecord], bool]


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error information (only present if success=False)
        error_type: Type of error (DataLoadingError, StorageError, etc.)
        error_details: Additional error context (path, record_index, errors)

    Example:
        ```python
        result = storage.read_address_book()
        if result.is_failure():
            log_error(result.error, result.error_details)
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result.

        Parameters:
            value: The successful result value

        Returns:
            Result: Success result with the value
        """
        return cls(
            success=True,
            value=value,
            error=None,
            error_type=None,
            error_details=None
        )

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error (e.g., "DataLoadingError")
            error_details: Additional context (path, record_index, etc.)

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=error_details or {}
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class CareBookError(Exception):
    """Base exception for every recoverable error raised by the engine.

    LogicManager.execute turns any CareBookError into a failed CommandResult,
    so none of these ever terminate the host process.
    """
    pass


class CommandError(CareBookError):
    """Raised when a command cannot run against the current model state."""
    pass


class DuplicateRecordError(CommandError):
    def __init__(self, message: str = "This person already exists in the address book."):
        super().__init__(message)


class RecordNotFoundError(CommandError):
    def __init__(self, message: str = "The person could not be found in the address book."):
        super().__init__(message)


class KindMismatchError(CommandError):
    """Raised when an edit descriptor targets a record of another kind."""

    def __init__(self, expected: RecordKind, actual: RecordKind):
        super().__init__(
            f"The person at this index is a {actual.value}, not a {expected.value}."
        )
        self.expected = expected
        self.actual = actual


class NoFieldsEditedError(CommandError):
    def __init__(self, message: str = "At least one field to edit must be provided."):
        super().__init__(message)


class InvalidIndexError(CommandError):
    """Raised when a 1-based index falls outside the displayed list.

    Attributes:
        index: The offending 1-based index
        size: Size of the displayed list at the time of the check
    """

    def __init__(self, index: int, size: int):
        super().__init__(f"The person index provided is invalid: {index} (list has {size} entries)")
        self.index = index
        self.size = size


class NoUndoableStateError(CommandError):
    def __init__(self, message: str = "No more commands to undo!"):
        super().__init__(message)


class NoRedoableStateError(CommandError):
    def __init__(self, message: str = "No more commands to redo!"):
        super().__init__(message)


class DuplicateAliasError(CommandError):
    def __init__(self, alias: str):
        super().__init__(f"The shortcut '{alias}' already exists.")
        self.alias = alias


class UnknownAliasError(CommandError):
    def __init__(self, alias: str):
        super().__init__(f"The shortcut '{alias}' does not exist.")
        self.alias = alias


class ParseError(CareBookError):
    """Raised when command text cannot be turned into a Command.

    Attributes:
        usage: Usage hint for the command that failed to parse (may be empty)
    """

    def __init__(self, message: str, usage: str = ""):
        super().__init__(message)
        self.usage = usage


class StorageError(CareBookError):
    """Raised when the data file cannot be read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class DataLoadingError(StorageError):
    """Raised when a data file exists but does not describe a valid address book."""
    pass


# ============================================================================
# Model Port
# ============================================================================

class ModelPort(ABC):
    """Narrow contract that commands execute against.

    The displayed list returned by ``list_records`` is a read-only view over
    the live collection: any mutation made through this port is visible on the
    next call, with no explicit refresh step.
    """

    @abstractmethod
    def list_records(self) -> Sequence[BaseRecord]:
        """Records currently displayed (the filtered view), in insertion order."""

    @abstractmethod
    def has_record(self, record: BaseRecord) -> bool:
        """True if an identity-equal record is stored."""

    @abstractmethod
    def add_record(self, record: BaseRecord) -> None:
        """Add a record. Raises DuplicateRecordError."""

    @abstractmethod
    def set_record(self, target: BaseRecord, edited: BaseRecord) -> None:
        """Replace ``target`` with ``edited`` in place.

        Raises RecordNotFoundError or DuplicateRecordError.
        """

    @abstractmethod
    def remove_record(self, record: BaseRecord) -> None:
        """Remove a record. Raises RecordNotFoundError."""

    @abstractmethod
    def clear_records(self) -> None:
        """Remove every record; shortcuts are kept."""

    @abstractmethod
    def update_filter(self, predicate: RecordPredicate) -> None:
        """Replace the predicate that defines the displayed list."""

    @abstractmethod
    def commit_history(self) -> None:
        """Snapshot the current state into the undo/redo history."""

    @abstractmethod
    def can_undo(self) -> bool:
        pass

    @abstractmethod
    def can_redo(self) -> bool:
        pass

    @abstractmethod
    def undo(self) -> None:
        """Restore the previous snapshot. Raises NoUndoableStateError."""

    @abstractmethod
    def redo(self) -> None:
        """Restore the next snapshot. Raises NoRedoableStateError."""

    @abstractmethod
    def add_shortcut(self, alias: str, command_word: str) -> None:
        """Register an alias. Raises DuplicateAliasError."""

    @abstractmethod
    def remove_shortcut(self, alias: str) -> None:
        """Forget an alias. Raises UnknownAliasError."""

    @abstractmethod
    def get_shortcut(self, alias: str) -> Optional[str]:
        """Command word registered for ``alias``, or None."""

    @abstractmethod
    def select_record(self, record: Optional[BaseRecord]) -> None:
        """Mark a record as the one being viewed."""

    @abstractmethod
    def get_selected_record(self) -> Optional[BaseRecord]:
        pass

    @abstractmethod
    def get_address_book(self) -> 'AddressBook':
        """The live collection (for persistence)."""


# ============================================================================
# Storage Port
# ============================================================================

class StoragePort(ABC):
    """Abstract contract for address book persistence adapters.

    Key Principles:
        - Whole-collection load/save: records and shortcuts travel together
        - Every field is persisted, including the kind discriminator
        - Malformed stored data is reported as a failure Result carrying the
          offending location, never replaced with defaults
    """

    @abstractmethod
    def read_address_book(self) -> Result[Optional['AddressBook']]:
        """Load the stored address book.

        Returns:
            Result[Optional[AddressBook]]: Success with the loaded book, success
            with ``None`` when nothing is stored yet, or a failure describing
            why the stored data could not be loaded
        """
        pass

    @abstractmethod
    def save_address_book(self, address_book: 'AddressBook') -> Result[int]:
        """Persist the address book.

        Returns:
            Result[int]: Success with the number of records written, or failure
        """
        pass

    def get_storage_info(self) -> Optional[dict]:
        """Get metadata about the storage location (optional, adapter-specific).

        Returns:
            Optional[dict]: Metadata dictionary, or None if unavailable
        """
        return None
