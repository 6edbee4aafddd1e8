"""Versioned History - Snapshot-Based Undo/Redo.

TrackedAddressBook is an AddressBook that remembers every committed state.
The history is a list of immutable Snapshots plus a pointer to the current
one; the state machine (at-oldest / in-middle / at-newest) is derived purely
from the pointer position.

Architecture:
    - commit() is the only operation that grows the list; it first drops every
      snapshot after the pointer, so a mutation after an undo invalidates redo
    - undo()/redo() move the pointer and replace the live state wholesale
    - Snapshot 0 is the initial state and can never be undone past
"""

import logging
from typing import Iterable, Mapping, Optional

from carebook.domain.address_book import AddressBook, Snapshot
from carebook.domain.ports import NoRedoableStateError, NoUndoableStateError
from carebook.domain.records import BaseRecord

logger = logging.getLogger(__name__)


class TrackedAddressBook(AddressBook):
    """AddressBook that keeps track of its own history.

    Example Usage:
        ```python
        book = TrackedAddressBook()
        book.add_record(patient)
        book.commit()
        book.undo()   # back to the empty book
        book.redo()   # patient is back
        ```
    """

    def __init__(
        self,
        records: Iterable[BaseRecord] = (),
        shortcuts: Optional[Mapping[str, str]] = None
    ):
        super().__init__(records, shortcuts)
        self._states: list[Snapshot] = [self.snapshot()]
        self._pointer = 0

    @classmethod
    def from_address_book(cls, address_book: AddressBook) -> "TrackedAddressBook":
        return cls(address_book.records, dict(address_book.shortcuts.items()))

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def state_count(self) -> int:
        return len(self._states)

    def commit(self) -> None:
        """Save the current state after the pointer, discarding undone states."""
        del self._states[self._pointer + 1:]
        self._states.append(self.snapshot())
        self._pointer += 1
        logger.debug(f"History commit: pointer={self._pointer}, states={len(self._states)}")

    def can_undo(self) -> bool:
        return self._pointer > 0

    def can_redo(self) -> bool:
        return self._pointer < len(self._states) - 1

    def undo(self) -> None:
        """Restore the previous state.

        Raises:
            NoUndoableStateError: If the pointer is at the initial state
        """
        if not self.can_undo():
            raise NoUndoableStateError()
        self.reset_data(self._states[self._pointer - 1])
        self._pointer -= 1
        logger.debug(f"History undo: pointer={self._pointer}, states={len(self._states)}")

    def redo(self) -> None:
        """Restore the most recently undone state.

        Raises:
            NoRedoableStateError: If the pointer is at the newest state
        """
        if not self.can_redo():
            raise NoRedoableStateError()
        self.reset_data(self._states[self._pointer + 1])
        self._pointer += 1
        logger.debug(f"History redo: pointer={self._pointer}, states={len(self._states)}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrackedAddressBook):
            return NotImplemented
        return (
            super().__eq__(other)
            and self._states == other._states
            and self._pointer == other._pointer
        )
