"""Command Text Parser.

Turns one line of user input into a Command. The grammar is a plain prefix
splitter:

    COMMAND_WORD [PREAMBLE] [PREFIX VALUE]...

where a prefix (``n/``, ``p/``, ...) only counts when it starts the input or
follows whitespace. The preamble is everything before the first prefix and
carries the kind flag (``-pa`` / ``-sp``) and, for index based commands, the
index.

Architecture:
    - Parsing is pure: the parser never touches the model, except through the
      optional shortcut lookup used to expand the command word
    - Every failure raises ParseError carrying the usage text of the command
      being parsed
    - Pydantic ValidationErrors raised while building records or descriptors
      are converted into ParseError text here, so nothing past the parser ever
      sees them
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from carebook.domain.commands import (
    AddCommand,
    AddShortcutCommand,
    ClearCommand,
    Command,
    DeleteCommand,
    DeleteShortcutCommand,
    EditCommand,
    ExitCommand,
    FindCommand,
    HELP_MESSAGE,
    HelpCommand,
    ListCommand,
    RedoCommand,
    UndoCommand,
    ViewCommand,
)
from carebook.domain.descriptors import DESCRIPTOR_CLASSES
from carebook.domain.enums import SUPPORTED_SEARCH_FIELDS, RecordKind, SearchField
from carebook.domain.ports import ParseError
from carebook.domain.predicates import FindPredicateMap
from carebook.domain.records import MAX_AGE, MIN_AGE, RECORD_CLASSES

logger = logging.getLogger(__name__)

# ============================================================================
# Prefixes and flags
# ============================================================================

PREFIX_NAME = "n/"
PREFIX_PHONE = "p/"
PREFIX_EMAIL = "e/"
PREFIX_TAG = "t/"
PREFIX_AGE = "a/"
PREFIX_MEDICAL_HISTORY = "m/"
PREFIX_LOCATION = "l/"
PREFIX_SPECIALTY = "s/"
PREFIX_ALIAS = "sc/"
PREFIX_KEYWORD = "kw/"

FLAG_PATIENT = "-pa"
FLAG_SPECIALIST = "-sp"

KIND_FLAGS = {
    FLAG_PATIENT: RecordKind.PATIENT,
    FLAG_SPECIALIST: RecordKind.SPECIALIST,
}

# Prefix -> record field, per kind
FIELD_PREFIXES = {
    RecordKind.PATIENT: {
        PREFIX_NAME: "name",
        PREFIX_PHONE: "phone",
        PREFIX_EMAIL: "email",
        PREFIX_TAG: "tags",
        PREFIX_AGE: "age",
        PREFIX_MEDICAL_HISTORY: "medical_history",
    },
    RecordKind.SPECIALIST: {
        PREFIX_NAME: "name",
        PREFIX_PHONE: "phone",
        PREFIX_EMAIL: "email",
        PREFIX_TAG: "tags",
        PREFIX_LOCATION: "location",
        PREFIX_SPECIALTY: "specialty",
    },
}

REQUIRED_PREFIXES = {
    RecordKind.PATIENT: (PREFIX_NAME, PREFIX_PHONE, PREFIX_EMAIL, PREFIX_MEDICAL_HISTORY),
    RecordKind.SPECIALIST: (PREFIX_NAME, PREFIX_PHONE, PREFIX_EMAIL, PREFIX_LOCATION, PREFIX_SPECIALTY),
}

SEARCH_PREFIXES = {
    PREFIX_NAME: SearchField.NAME,
    PREFIX_PHONE: SearchField.PHONE,
    PREFIX_EMAIL: SearchField.EMAIL,
    PREFIX_TAG: SearchField.TAG,
    PREFIX_AGE: SearchField.AGE,
    PREFIX_MEDICAL_HISTORY: SearchField.MEDICAL_HISTORY,
    PREFIX_LOCATION: SearchField.LOCATION,
    PREFIX_SPECIALTY: SearchField.SPECIALTY,
}

RECORD_PREFIXES = tuple(SEARCH_PREFIXES)

MESSAGE_UNKNOWN_COMMAND = "Unknown command"
MESSAGE_INVALID_FORMAT = "Invalid command format!"
MESSAGE_INVALID_INDEX = "Index is not a non-zero unsigned integer."
MESSAGE_INVALID_AGE = f"Age should be a whole number between {MIN_AGE} and {MAX_AGE}"
MESSAGE_MISSING_FLAG = f"Specify the person type with {FLAG_PATIENT} (patient) or {FLAG_SPECIALIST} (specialist)."


# ============================================================================
# Tokenizer
# ============================================================================

@dataclass
class ArgumentMultimap:
    """Values found for each prefix, in input order.

    Attributes:
        preamble: Text before the first prefix, stripped
        values: Prefix -> every value given for it
    """

    preamble: str = ""
    values: dict[str, list[str]] = field(default_factory=dict)

    def get_value(self, prefix: str) -> Optional[str]:
        """Last value given for ``prefix``, or None."""
        found = self.values.get(prefix)
        return found[-1] if found else None

    def get_all_values(self, prefix: str) -> list[str]:
        return list(self.values.get(prefix, []))

    def has(self, prefix: str) -> bool:
        return prefix in self.values

    def present_prefixes(self) -> list[str]:
        return list(self.values)

    def verify_no_duplicate_prefixes_for(self, prefixes: Iterable[str], usage: str = "") -> None:
        """Raise ParseError naming every prefix in ``prefixes`` given more than once."""
        repeated = [prefix for prefix in prefixes if len(self.values.get(prefix, [])) > 1]
        if repeated:
            raise ParseError(
                "Multiple values specified for the following single-valued field(s): "
                + " ".join(repeated),
                usage,
            )


class ArgumentTokenizer:
    """Splits an argument string on a fixed set of prefixes.

    Example Usage:
        ```python
        tokens = ArgumentTokenizer.tokenize(" -pa n/Amy Lee t/vip t/new", ["n/", "t/"])
        tokens.preamble                  # "-pa"
        tokens.get_value("n/")           # "Amy Lee"
        tokens.get_all_values("t/")      # ["vip", "new"]
        ```
    """

    @staticmethod
    def tokenize(args: str, prefixes: Iterable[str]) -> ArgumentMultimap:
        positions: list[tuple[int, str]] = []
        for prefix in prefixes:
            pattern = re.compile(r"(?:^|(?<=\s))" + re.escape(prefix))
            positions.extend((match.start(), prefix) for match in pattern.finditer(args))
        positions.sort()

        if not positions:
            return ArgumentMultimap(preamble=args.strip())

        multimap = ArgumentMultimap(preamble=args[:positions[0][0]].strip())
        for number, (start, prefix) in enumerate(positions):
            end = positions[number + 1][0] if number + 1 < len(positions) else len(args)
            value = args[start + len(prefix):end].strip()
            multimap.values.setdefault(prefix, []).append(value)
        return multimap


# ============================================================================
# Value parsers
# ============================================================================

def parse_kind(flag: str, usage: str = "") -> RecordKind:
    """Map ``-pa`` / ``-sp`` to a RecordKind."""
    kind = KIND_FLAGS.get(flag.strip())
    if kind is None:
        raise ParseError(f"{MESSAGE_INVALID_FORMAT} {MESSAGE_MISSING_FLAG}", usage)
    return kind


def parse_index(value: str, usage: str = "") -> int:
    """Parse a 1-based index."""
    value = value.strip()
    if not value.isdecimal() or int(value) == 0:
        raise ParseError(MESSAGE_INVALID_INDEX, usage)
    return int(value)


def parse_age(value: str, usage: str = "") -> int:
    value = value.strip()
    if not value.isdecimal() or not MIN_AGE <= int(value) <= MAX_AGE:
        raise ParseError(MESSAGE_INVALID_AGE, usage)
    return int(value)


def parse_tags(values: list[str]) -> frozenset[str]:
    """Collect ``t/`` values; a single empty ``t/`` means "no tags"."""
    if values == [""]:
        return frozenset()
    return frozenset(values)


def format_validation_error(error: PydanticValidationError) -> str:
    """Flatten a pydantic ValidationError into one line per field."""
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        message = detail.get("msg", "").removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "\n".join(messages)


# ============================================================================
# Command parser
# ============================================================================

ShortcutLookup = Callable[[str], Optional[str]]


class CommandParser:
    """Parses user input into Command objects.

    Parameters:
        shortcut_lookup: Resolves a shortcut alias to its command word; None
            disables alias expansion

    Example Usage:
        ```python
        parser = CommandParser(model.get_shortcut)
        command = parser.parse_command("add -sp n/Ann p/123 e/a@b.co l/North s/ENT")
        result = command.execute(model)
        ```
    """

    def __init__(self, shortcut_lookup: Optional[ShortcutLookup] = None):
        self.shortcut_lookup = shortcut_lookup
        self._parsers: dict[str, Callable[[str], Command]] = {
            AddCommand.COMMAND_WORD: self._parse_add,
            EditCommand.COMMAND_WORD: self._parse_edit,
            FindCommand.COMMAND_WORD: self._parse_find,
            DeleteCommand.COMMAND_WORD: self._parse_delete,
            ListCommand.COMMAND_WORD: self._parse_list,
            ViewCommand.COMMAND_WORD: self._parse_view,
            ClearCommand.COMMAND_WORD: lambda args: ClearCommand(),
            UndoCommand.COMMAND_WORD: lambda args: UndoCommand(),
            RedoCommand.COMMAND_WORD: lambda args: RedoCommand(),
            AddShortcutCommand.COMMAND_WORD: self._parse_add_shortcut,
            DeleteShortcutCommand.COMMAND_WORD: self._parse_delete_shortcut,
            HelpCommand.COMMAND_WORD: lambda args: HelpCommand(),
            ExitCommand.COMMAND_WORD: lambda args: ExitCommand(),
        }

    def parse_command(self, text: str) -> Command:
        """Parse one line of input.

        Raises:
            ParseError: If the line is not a valid command
        """
        parts = text.strip().split(maxsplit=1)
        if not parts:
            raise ParseError(MESSAGE_INVALID_FORMAT, HelpCommand.MESSAGE_USAGE)

        command_word = self.expand_alias(parts[0])
        args = " " + parts[1] if len(parts) > 1 else ""

        parser = self._parsers.get(command_word)
        if parser is None:
            raise ParseError(MESSAGE_UNKNOWN_COMMAND, HELP_MESSAGE)

        logger.debug(f"Parsing '{command_word}' command")
        return parser(args)

    def expand_alias(self, word: str) -> str:
        if word in self._parsers or self.shortcut_lookup is None:
            return word
        return self.shortcut_lookup(word) or word

    # --- Record commands ---

    def _parse_add(self, args: str) -> AddCommand:
        usage = AddCommand.MESSAGE_USAGE
        tokens = ArgumentTokenizer.tokenize(args, RECORD_PREFIXES)
        kind = parse_kind(tokens.preamble, usage)
        field_prefixes = self._check_record_prefixes(tokens, kind, usage)

        missing = [prefix for prefix in REQUIRED_PREFIXES[kind] if not tokens.has(prefix)]
        if missing:
            raise ParseError(f"{MESSAGE_INVALID_FORMAT} Missing field(s): {' '.join(missing)}", usage)

        values = self._collect_fields(tokens, field_prefixes, usage)
        try:
            record = RECORD_CLASSES[kind](**values)
        except PydanticValidationError as error:
            raise ParseError(format_validation_error(error), usage) from error
        return AddCommand(record)

    def _parse_edit(self, args: str) -> EditCommand:
        usage = EditCommand.MESSAGE_USAGE
        tokens = ArgumentTokenizer.tokenize(args, RECORD_PREFIXES)
        preamble = tokens.preamble.split()
        if len(preamble) != 2:
            raise ParseError(MESSAGE_INVALID_FORMAT, usage)

        kind = parse_kind(preamble[0], usage)
        index = parse_index(preamble[1], usage)
        field_prefixes = self._check_record_prefixes(tokens, kind, usage)

        values = self._collect_fields(tokens, field_prefixes, usage)
        try:
            descriptor = DESCRIPTOR_CLASSES[kind](**values)
        except PydanticValidationError as error:
            raise ParseError(format_validation_error(error), usage) from error
        return EditCommand(index, descriptor)

    def _parse_find(self, args: str) -> FindCommand:
        usage = FindCommand.MESSAGE_USAGE
        tokens = ArgumentTokenizer.tokenize(args, RECORD_PREFIXES)
        kind = parse_kind(tokens.preamble, usage)
        if not tokens.present_prefixes():
            raise ParseError(f"{MESSAGE_INVALID_FORMAT} Give at least one field to search.", usage)
        tokens.verify_no_duplicate_prefixes_for(
            [prefix for prefix in RECORD_PREFIXES if prefix != PREFIX_TAG], usage
        )

        predicate = FindPredicateMap(kind)
        for prefix in tokens.present_prefixes():
            search_field = SEARCH_PREFIXES[prefix]
            if search_field not in SUPPORTED_SEARCH_FIELDS[kind]:
                raise ParseError(f"A {kind.value} cannot be searched by {prefix}", usage)
            keywords = [word for value in tokens.get_all_values(prefix) for word in value.split()]
            if not keywords:
                raise ParseError(f"{MESSAGE_INVALID_FORMAT} {prefix} needs at least one keyword.", usage)
            predicate.put(search_field, keywords)
        return FindCommand(predicate)

    def _parse_delete(self, args: str) -> DeleteCommand:
        usage = DeleteCommand.MESSAGE_USAGE
        words = args.split()
        if not words:
            raise ParseError(MESSAGE_INVALID_FORMAT, usage)
        return DeleteCommand(tuple(parse_index(word, usage) for word in words))

    def _parse_list(self, args: str) -> ListCommand:
        return ListCommand(parse_kind(args, ListCommand.MESSAGE_USAGE))

    def _parse_view(self, args: str) -> ViewCommand:
        usage = ViewCommand.MESSAGE_USAGE
        words = args.split()
        if len(words) != 1:
            raise ParseError(MESSAGE_INVALID_FORMAT, usage)
        return ViewCommand(parse_index(words[0], usage))

    # --- Shortcut commands ---

    def _parse_add_shortcut(self, args: str) -> AddShortcutCommand:
        usage = AddShortcutCommand.MESSAGE_USAGE
        tokens = ArgumentTokenizer.tokenize(args, (PREFIX_ALIAS, PREFIX_KEYWORD))
        if tokens.preamble or not tokens.has(PREFIX_ALIAS) or not tokens.has(PREFIX_KEYWORD):
            raise ParseError(MESSAGE_INVALID_FORMAT, usage)
        tokens.verify_no_duplicate_prefixes_for((PREFIX_ALIAS, PREFIX_KEYWORD), usage)

        alias = self._parse_single_word(tokens.get_value(PREFIX_ALIAS), "Shortcut", usage)
        command_word = self._parse_single_word(tokens.get_value(PREFIX_KEYWORD), "Command word", usage)
        return AddShortcutCommand(alias, command_word)

    def _parse_delete_shortcut(self, args: str) -> DeleteShortcutCommand:
        usage = DeleteShortcutCommand.MESSAGE_USAGE
        tokens = ArgumentTokenizer.tokenize(args, (PREFIX_ALIAS,))
        if tokens.preamble or not tokens.has(PREFIX_ALIAS):
            raise ParseError(MESSAGE_INVALID_FORMAT, usage)

        aliases = tuple(
            self._parse_single_word(value, "Shortcut", usage)
            for value in tokens.get_all_values(PREFIX_ALIAS)
        )
        return DeleteShortcutCommand(aliases)

    # --- Helpers ---

    @staticmethod
    def _check_record_prefixes(tokens: ArgumentMultimap, kind: RecordKind, usage: str) -> dict[str, str]:
        """Reject prefixes of the other kind and repeated single-valued prefixes."""
        field_prefixes = FIELD_PREFIXES[kind]
        foreign = [prefix for prefix in tokens.present_prefixes() if prefix not in field_prefixes]
        if foreign:
            raise ParseError(
                f"{MESSAGE_INVALID_FORMAT} A {kind.value} has no field(s): {' '.join(foreign)}",
                usage,
            )
        tokens.verify_no_duplicate_prefixes_for(
            [prefix for prefix in field_prefixes if prefix != PREFIX_TAG], usage
        )
        return field_prefixes

    @staticmethod
    def _collect_fields(tokens: ArgumentMultimap, field_prefixes: dict[str, str], usage: str) -> dict:
        values = {}
        for prefix, field_name in field_prefixes.items():
            if not tokens.has(prefix):
                continue
            if prefix == PREFIX_TAG:
                values[field_name] = parse_tags(tokens.get_all_values(prefix))
            elif prefix == PREFIX_AGE:
                values[field_name] = parse_age(tokens.get_value(prefix), usage)
            else:
                values[field_name] = tokens.get_value(prefix)
        return values

    @staticmethod
    def _parse_single_word(value: Optional[str], label: str, usage: str) -> str:
        if not value or len(value.split()) != 1:
            raise ParseError(f"{label} should be a single word.", usage)
        return value
