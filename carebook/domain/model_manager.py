"""Model Manager - the live Model behind every command.

ModelManager owns exactly one TrackedAddressBook and the predicate that
defines the displayed list. The displayed list is never cached: it is
recomputed from the live collection on every read, so a mutation made by a
command is visible to the next reader without any refresh step.
"""

import logging
from typing import Optional

from carebook.domain.address_book import AddressBook
from carebook.domain.enums import RecordKind
from carebook.domain.history import TrackedAddressBook
from carebook.domain.ports import ModelPort, RecordPredicate
from carebook.domain.predicates import KindPredicate
from carebook.domain.records import BaseRecord

logger = logging.getLogger(__name__)


class ModelManager(ModelPort):
    """In-memory model of the address book, its history and its display state.

    Parameters:
        address_book: Initial content; copied into a fresh TrackedAddressBook
        default_kind: Record kind displayed until a command changes the filter
    """

    def __init__(
        self,
        address_book: Optional[AddressBook] = None,
        default_kind: RecordKind = RecordKind.PATIENT
    ):
        self._address_book = TrackedAddressBook.from_address_book(address_book or AddressBook())
        self._predicate: RecordPredicate = KindPredicate(default_kind)
        self._selected: Optional[BaseRecord] = None
        logger.debug(f"Model initialised with {len(self._address_book)} records")

    # --- Displayed list ---

    def list_records(self) -> tuple[BaseRecord, ...]:
        return tuple(record for record in self._address_book.records if self._predicate(record))

    def update_filter(self, predicate: RecordPredicate) -> None:
        self._predicate = predicate

    @property
    def predicate(self) -> RecordPredicate:
        return self._predicate

    # --- Records ---

    def has_record(self, record: BaseRecord) -> bool:
        return self._address_book.has_record(record)

    def add_record(self, record: BaseRecord) -> None:
        self._address_book.add_record(record)
        self._predicate = KindPredicate(record.record_kind)

    def set_record(self, target: BaseRecord, edited: BaseRecord) -> None:
        self._address_book.set_record(target, edited)
        if self._selected == target:
            self._selected = edited

    def remove_record(self, record: BaseRecord) -> None:
        self._address_book.remove_record(record)
        if self._selected == record:
            self._selected = None

    def clear_records(self) -> None:
        self._address_book.set_records(())
        self._selected = None

    # --- History ---

    def commit_history(self) -> None:
        self._address_book.commit()

    def can_undo(self) -> bool:
        return self._address_book.can_undo()

    def can_redo(self) -> bool:
        return self._address_book.can_redo()

    def undo(self) -> None:
        self._address_book.undo()
        self._drop_stale_selection()

    def redo(self) -> None:
        self._address_book.redo()
        self._drop_stale_selection()

    def _drop_stale_selection(self) -> None:
        if self._selected is not None and self._selected not in self._address_book.records:
            self._selected = None

    # --- Shortcuts ---

    def add_shortcut(self, alias: str, command_word: str) -> None:
        self._address_book.add_shortcut(alias, command_word)

    def remove_shortcut(self, alias: str) -> None:
        self._address_book.remove_shortcut(alias)

    def get_shortcut(self, alias: str) -> Optional[str]:
        return self._address_book.get_shortcut(alias)

    # --- Selection ---

    def select_record(self, record: Optional[BaseRecord]) -> None:
        self._selected = record

    def get_selected_record(self) -> Optional[BaseRecord]:
        return self._selected

    def get_address_book(self) -> TrackedAddressBook:
        return self._address_book
