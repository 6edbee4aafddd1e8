"""Command Layer.

Every user action is a Command: an immutable value built by the parser and
executed against a ModelPort. Mutating commands validate everything first,
then mutate, then commit exactly one history snapshot. Read-only commands
(find, list, view) never commit.

Architecture:
    - Commands depend on ModelPort only, never on ModelManager or storage
    - Failures are raised as CommandError subclasses; LogicManager turns them
      into user-visible messages at the execution boundary
    - Commands are frozen dataclasses, so two commands built from the same
      input compare equal (the parser tests rely on this)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Sequence

from carebook.domain.descriptors import EditDescriptor
from carebook.domain.enums import RecordKind
from carebook.domain.ports import (
    CommandError,
    DuplicateRecordError,
    InvalidIndexError,
    KindMismatchError,
    ModelPort,
    NoFieldsEditedError,
    UnknownAliasError,
)
from carebook.domain.predicates import FindPredicateMap, KindPredicate
from carebook.domain.records import BaseRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command execution.

    Attributes:
        feedback: Human-readable message for the user
        show_help: True if the presentation layer should show the help text
        exit: True if the application should terminate
        success: False if the command failed and nothing was changed
    """

    feedback: str
    show_help: bool = False
    exit: bool = False
    success: bool = True


def record_at(records: Sequence[BaseRecord], index: int) -> BaseRecord:
    """Resolve a 1-based display index.

    Raises:
        InvalidIndexError: If ``index`` is outside ``records``
    """
    if index < 1 or index > len(records):
        raise InvalidIndexError(index, len(records))
    return records[index - 1]


class Command(ABC):
    """Base class for all commands."""

    COMMAND_WORD: ClassVar[str] = ""
    MESSAGE_USAGE: ClassVar[str] = ""

    @abstractmethod
    def execute(self, model: ModelPort) -> CommandResult:
        """Run the command.

        Raises:
            CommandError: If the command cannot run against the current state
        """


@dataclass(frozen=True)
class AddCommand(Command):
    COMMAND_WORD: ClassVar[str] = "add"
    MESSAGE_USAGE: ClassVar[str] = (
        "add: Adds a person to the address book.\n"
        "Patient: add -pa n/NAME p/PHONE e/EMAIL m/MEDICAL_HISTORY [a/AGE] [t/TAG]...\n"
        "Specialist: add -sp n/NAME p/PHONE e/EMAIL l/LOCATION s/SPECIALTY [t/TAG]...\n"
        "Example: add -pa n/John Doe p/98765432 e/johnd@example.com m/Asthma a/30 t/friends"
    )

    record: BaseRecord

    def execute(self, model: ModelPort) -> CommandResult:
        if model.has_record(self.record):
            raise DuplicateRecordError()

        model.add_record(self.record)
        model.commit_history()
        logger.info(f"Added {self.record.kind}")
        return CommandResult(f"New {self.record.kind} added: {self.record.describe()}")


@dataclass(frozen=True)
class EditCommand(Command):
    """Edits the record at a displayed index with a kind-typed descriptor."""

    COMMAND_WORD: ClassVar[str] = "edit"
    MESSAGE_USAGE: ClassVar[str] = (
        "edit: Edits the details of the person identified by the index number used in the "
        "displayed list. Existing values will be overwritten by the input values.\n"
        "Patient: edit -pa INDEX [n/NAME] [p/PHONE] [e/EMAIL] [m/MEDICAL_HISTORY] [a/AGE] [t/TAG]...\n"
        "Specialist: edit -sp INDEX [n/NAME] [p/PHONE] [e/EMAIL] [l/LOCATION] [s/SPECIALTY] [t/TAG]...\n"
        "Example: edit -pa 1 p/91234567 e/johndoe@example.com"
    )

    index: int
    descriptor: EditDescriptor

    def __post_init__(self):
        object.__setattr__(self, "descriptor", self.descriptor.copy())

    def execute(self, model: ModelPort) -> CommandResult:
        target = record_at(model.list_records(), self.index)

        if not self.descriptor.matches_kind(target):
            raise KindMismatchError(self.descriptor.kind, target.record_kind)
        if not self.descriptor.is_any_field_edited():
            raise NoFieldsEditedError()

        edited = self.descriptor.apply(target)
        if not target.is_same_record(edited) and model.has_record(edited):
            raise DuplicateRecordError()

        model.set_record(target, edited)
        model.commit_history()
        logger.info(f"Edited {edited.kind} fields: {sorted(self.descriptor.edited_fields())}")
        return CommandResult(f"Edited {edited.kind}: {edited.describe()}")


@dataclass(frozen=True)
class FindCommand(Command):
    COMMAND_WORD: ClassVar[str] = "find"
    MESSAGE_USAGE: ClassVar[str] = (
        "find: Finds all persons of one kind whose fields contain any of the given keywords "
        "(case-insensitive). Every given field must match.\n"
        "Patient: find -pa [n/NAME...] [p/PHONE...] [e/EMAIL...] [t/TAG...] [a/AGE...] [m/MEDICAL_HISTORY...]\n"
        "Specialist: find -sp [n/NAME...] [p/PHONE...] [e/EMAIL...] [t/TAG...] [l/LOCATION...] [s/SPECIALTY...]\n"
        "Example: find -sp n/alice bob s/Physiotherapist"
    )

    predicate: FindPredicateMap

    @property
    def kind(self) -> RecordKind:
        return self.predicate.kind

    def execute(self, model: ModelPort) -> CommandResult:
        model.update_filter(self.predicate)
        count = len(model.list_records())
        return CommandResult(f"{count} {self.kind.label.lower()} listed!")


@dataclass(frozen=True)
class DeleteCommand(Command):
    """Deletes one or more records; any invalid index aborts the whole batch."""

    COMMAND_WORD: ClassVar[str] = "delete"
    MESSAGE_USAGE: ClassVar[str] = (
        "delete: Deletes the persons identified by the index numbers used in the displayed list.\n"
        "Parameters: INDEX [INDEX]... (positive integers)\n"
        "Example: delete 1 3"
    )

    indices: tuple[int, ...]

    def execute(self, model: ModelPort) -> CommandResult:
        shown = model.list_records()
        # Resolve every index before removing anything
        targets = [record_at(shown, index) for index in dict.fromkeys(self.indices)]

        for record in targets:
            model.remove_record(record)
        model.commit_history()
        logger.info(f"Deleted {len(targets)} records")

        lines = "\n".join(record.describe() for record in targets)
        return CommandResult(f"Deleted {len(targets)} person(s):\n{lines}")


@dataclass(frozen=True)
class ListCommand(Command):
    COMMAND_WORD: ClassVar[str] = "list"
    MESSAGE_USAGE: ClassVar[str] = "list: Lists all patients or all specialists.\nExample: list -sp"

    kind: RecordKind

    def execute(self, model: ModelPort) -> CommandResult:
        model.update_filter(KindPredicate(self.kind))
        return CommandResult(f"Listed all {self.kind.label.lower()}")


@dataclass(frozen=True)
class ViewCommand(Command):
    COMMAND_WORD: ClassVar[str] = "view"
    MESSAGE_USAGE: ClassVar[str] = (
        "view: Shows every detail of the person identified by the index number used in the "
        "displayed list.\nExample: view 2"
    )

    index: int

    def execute(self, model: ModelPort) -> CommandResult:
        record = record_at(model.list_records(), self.index)
        model.select_record(record)
        details = "\n".join(f"{label}: {value}" for label, value in record.display_fields())
        return CommandResult(f"Viewing {record.kind} {self.index}:\n{details}")


@dataclass(frozen=True)
class ClearCommand(Command):
    COMMAND_WORD: ClassVar[str] = "clear"
    MESSAGE_USAGE: ClassVar[str] = "clear: Removes every person from the address book."

    def execute(self, model: ModelPort) -> CommandResult:
        model.clear_records()
        model.commit_history()
        return CommandResult("Address book has been cleared!")


@dataclass(frozen=True)
class UndoCommand(Command):
    COMMAND_WORD: ClassVar[str] = "undo"
    MESSAGE_USAGE: ClassVar[str] = "undo: Reverts the most recent change."

    def execute(self, model: ModelPort) -> CommandResult:
        model.undo()
        return CommandResult("Undo success!")


@dataclass(frozen=True)
class RedoCommand(Command):
    COMMAND_WORD: ClassVar[str] = "redo"
    MESSAGE_USAGE: ClassVar[str] = "redo: Re-applies the most recently undone change."

    def execute(self, model: ModelPort) -> CommandResult:
        model.redo()
        return CommandResult("Redo success!")


@dataclass(frozen=True)
class AddShortcutCommand(Command):
    COMMAND_WORD: ClassVar[str] = "addsc"
    MESSAGE_USAGE: ClassVar[str] = (
        "addsc: Adds a shortcut that expands to a command word.\n"
        "Parameters: sc/ALIAS kw/COMMAND_WORD\n"
        "Example: addsc sc/ls kw/list"
    )

    alias: str
    command_word: str

    def execute(self, model: ModelPort) -> CommandResult:
        if self.alias in COMMAND_WORDS:
            raise CommandError(f"'{self.alias}' is already a command word and cannot be a shortcut.")
        if self.command_word not in COMMAND_WORDS:
            raise CommandError(f"'{self.command_word}' is not a command word.")

        model.add_shortcut(self.alias, self.command_word)
        model.commit_history()
        return CommandResult(f"New shortcut added: {self.alias} -> {self.command_word}")


@dataclass(frozen=True)
class DeleteShortcutCommand(Command):
    COMMAND_WORD: ClassVar[str] = "delsc"
    MESSAGE_USAGE: ClassVar[str] = (
        "delsc: Deletes shortcuts.\nParameters: sc/ALIAS [sc/ALIAS]...\nExample: delsc sc/ls"
    )

    aliases: tuple[str, ...]

    def execute(self, model: ModelPort) -> CommandResult:
        aliases = tuple(dict.fromkeys(self.aliases))
        for alias in aliases:
            if model.get_shortcut(alias) is None:
                raise UnknownAliasError(alias)

        for alias in aliases:
            model.remove_shortcut(alias)
        model.commit_history()
        return CommandResult(f"Deleted shortcut(s): {', '.join(aliases)}")


@dataclass(frozen=True)
class HelpCommand(Command):
    COMMAND_WORD: ClassVar[str] = "help"
    MESSAGE_USAGE: ClassVar[str] = "help: Shows program usage instructions."

    def execute(self, model: ModelPort) -> CommandResult:
        return CommandResult(HELP_MESSAGE, show_help=True)


@dataclass(frozen=True)
class ExitCommand(Command):
    COMMAND_WORD: ClassVar[str] = "exit"
    MESSAGE_USAGE: ClassVar[str] = "exit: Saves and exits the program."

    def execute(self, model: ModelPort) -> CommandResult:
        return CommandResult("Exiting CareBook as requested ...", exit=True)


COMMAND_CLASSES: tuple[type, ...] = (
    AddCommand,
    EditCommand,
    FindCommand,
    DeleteCommand,
    ListCommand,
    ViewCommand,
    ClearCommand,
    UndoCommand,
    RedoCommand,
    AddShortcutCommand,
    DeleteShortcutCommand,
    HelpCommand,
    ExitCommand,
)

COMMAND_WORDS = frozenset(command.COMMAND_WORD for command in COMMAND_CLASSES)

HELP_MESSAGE = "\n\n".join(command.MESSAGE_USAGE for command in COMMAND_CLASSES)
