"""Record Collection.

The address book keeps every record in a duplicate-checked, insertion-ordered
list and, independently, the alias -> command word mapping used by the
shortcut commands.

Architecture:
    - Records are immutable, so a tuple of them is already a deep copy; a
      Snapshot therefore costs one tuple per commit
    - Duplicate detection uses identity equality (name + phone), not full
      structural equality
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional

from carebook.domain.ports import (
    DuplicateAliasError,
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownAliasError,
)
from carebook.domain.records import BaseRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of the full address book state at one point in time.

    Attributes:
        records: Records in display order
        shortcuts: (alias, command word) pairs in registration order
    """

    records: tuple[BaseRecord, ...] = ()
    shortcuts: tuple[tuple[str, str], ...] = ()


class UniqueRecordList:
    """Insertion-ordered list in which no two records are identity-equal."""

    def __init__(self, records: Iterable[BaseRecord] = ()):
        self._records: list[BaseRecord] = []
        self.set_records(records)

    def contains(self, record: BaseRecord) -> bool:
        return any(existing.is_same_record(record) for existing in self._records)

    def add(self, record: BaseRecord) -> None:
        if self.contains(record):
            raise DuplicateRecordError()
        self._records.append(record)

    def set_record(self, target: BaseRecord, edited: BaseRecord) -> None:
        """Replace ``target`` with ``edited``, keeping its position.

        Raises:
            RecordNotFoundError: If ``target`` is not in the list
            DuplicateRecordError: If ``edited`` is a different person that is
                already stored
        """
        index = self._index_of(target)
        if not target.is_same_record(edited) and self.contains(edited):
            raise DuplicateRecordError()
        self._records[index] = edited

    def remove(self, record: BaseRecord) -> None:
        del self._records[self._index_of(record)]

    def set_records(self, records: Iterable[BaseRecord]) -> None:
        """Replace the whole content.

        Raises:
            DuplicateRecordError: If ``records`` holds two identity-equal records
        """
        replacement: list[BaseRecord] = []
        for record in records:
            if any(existing.is_same_record(record) for existing in replacement):
                raise DuplicateRecordError("Records must not contain duplicate persons.")
            replacement.append(record)
        self._records = replacement

    def as_tuple(self) -> tuple[BaseRecord, ...]:
        return tuple(self._records)

    def _index_of(self, record: BaseRecord) -> int:
        # Structural match: the caller holds the exact instance it saw
        for index, existing in enumerate(self._records):
            if existing == record:
                return index
        raise RecordNotFoundError()

    def __iter__(self) -> Iterator[BaseRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniqueRecordList):
            return NotImplemented
        return self._records == other._records


class ShortcutSettings:
    """Alias -> command word mapping with unique aliases."""

    def __init__(self, shortcuts: Optional[Mapping[str, str]] = None):
        self._shortcuts: dict[str, str] = dict(shortcuts or {})

    def add_shortcut(self, alias: str, command_word: str) -> None:
        if alias in self._shortcuts:
            raise DuplicateAliasError(alias)
        self._shortcuts[alias] = command_word

    def remove_shortcut(self, alias: str) -> None:
        if alias not in self._shortcuts:
            raise UnknownAliasError(alias)
        del self._shortcuts[alias]

    def has_shortcut(self, alias: str) -> bool:
        return alias in self._shortcuts

    def get_command(self, alias: str) -> Optional[str]:
        return self._shortcuts.get(alias)

    def items(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._shortcuts.items())

    def get_copy(self) -> "ShortcutSettings":
        return ShortcutSettings(self._shortcuts)

    def set_shortcut_settings(self, other: "ShortcutSettings") -> None:
        self._shortcuts = dict(other._shortcuts)

    def __len__(self) -> int:
        return len(self._shortcuts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShortcutSettings):
            return NotImplemented
        return self._shortcuts == other._shortcuts

    def __repr__(self) -> str:
        return f"ShortcutSettings({self._shortcuts!r})"


class AddressBook:
    """Duplicate-checked record collection plus its shortcut mapping.

    Example Usage:
        ```python
        book = AddressBook()
        book.add_record(patient)
        book.add_shortcut("ls", "list")
        snapshot = book.snapshot()
        ```
    """

    def __init__(
        self,
        records: Iterable[BaseRecord] = (),
        shortcuts: Optional[Mapping[str, str]] = None
    ):
        self._records = UniqueRecordList(records)
        self._shortcuts = ShortcutSettings(shortcuts)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "AddressBook":
        return cls(snapshot.records, dict(snapshot.shortcuts))

    # --- Records ---

    @property
    def records(self) -> tuple[BaseRecord, ...]:
        return self._records.as_tuple()

    def has_record(self, record: BaseRecord) -> bool:
        return self._records.contains(record)

    def add_record(self, record: BaseRecord) -> None:
        self._records.add(record)

    def set_record(self, target: BaseRecord, edited: BaseRecord) -> None:
        self._records.set_record(target, edited)

    def remove_record(self, record: BaseRecord) -> None:
        self._records.remove(record)

    def set_records(self, records: Iterable[BaseRecord]) -> None:
        self._records.set_records(records)

    # --- Shortcuts ---

    @property
    def shortcuts(self) -> ShortcutSettings:
        return self._shortcuts

    def add_shortcut(self, alias: str, command_word: str) -> None:
        self._shortcuts.add_shortcut(alias, command_word)

    def remove_shortcut(self, alias: str) -> None:
        self._shortcuts.remove_shortcut(alias)

    def get_shortcut(self, alias: str) -> Optional[str]:
        return self._shortcuts.get_command(alias)

    # --- Whole-state operations ---

    def snapshot(self) -> Snapshot:
        """Return an immutable copy of records and shortcuts."""
        return Snapshot(records=self.records, shortcuts=self._shortcuts.items())

    def reset_data(self, snapshot: Snapshot) -> None:
        """Replace records and shortcuts wholesale with ``snapshot``'s."""
        self.set_records(snapshot.records)
        self._shortcuts.set_shortcut_settings(ShortcutSettings(dict(snapshot.shortcuts)))
        logger.debug(f"Address book reset to {len(snapshot.records)} records")

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AddressBook):
            return NotImplemented
        return self._records == other._records and self._shortcuts == other._shortcuts

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._records)} records, {len(self._shortcuts)} shortcuts)"
