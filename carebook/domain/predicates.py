"""Predicate Composer for the find command.

Builds a single record predicate out of per-field keyword lists:

    - conjunction across fields: every supplied field must match
    - disjunction within a field: any one keyword of that field is enough

Matching is case-insensitive. Name and tag fields match whole words, age
matches the exact number, and every other text field matches substrings.

Architecture:
    - Predicates are frozen dataclasses: pure, reusable, and comparable by
      their keyword contents
    - A FindPredicateMap is bound to one record kind and rejects fields that
      kind does not have
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional

from carebook.domain.enums import SUPPORTED_SEARCH_FIELDS, RecordKind, SearchField
from carebook.domain.ports import ParseError
from carebook.domain.records import BaseRecord


def _field_text(record: BaseRecord, field: SearchField) -> Optional[str]:
    value = getattr(record, field.value, None)
    return None if value is None else str(value)


def _matches_words(record: BaseRecord, field: SearchField, keywords: tuple[str, ...]) -> bool:
    text = _field_text(record, field)
    if text is None:
        return False
    words = {word.lower() for word in text.split()}
    return any(keyword.lower() in words for keyword in keywords)


def _matches_tags(record: BaseRecord, field: SearchField, keywords: tuple[str, ...]) -> bool:
    tags = {tag.lower() for tag in record.tags}
    return any(keyword.lower() in tags for keyword in keywords)


def _matches_number(record: BaseRecord, field: SearchField, keywords: tuple[str, ...]) -> bool:
    value = getattr(record, field.value, None)
    if value is None:
        return False
    return any(keyword.strip().isdecimal() and int(keyword) == value for keyword in keywords)


def _matches_substring(record: BaseRecord, field: SearchField, keywords: tuple[str, ...]) -> bool:
    text = _field_text(record, field)
    if text is None:
        return False
    text = text.lower()
    return any(keyword.lower() in text for keyword in keywords)


MATCHERS: dict[SearchField, Callable[[BaseRecord, SearchField, tuple[str, ...]], bool]] = {
    SearchField.NAME: _matches_words,
    SearchField.TAG: _matches_tags,
    SearchField.AGE: _matches_number,
    SearchField.PHONE: _matches_substring,
    SearchField.EMAIL: _matches_substring,
    SearchField.MEDICAL_HISTORY: _matches_substring,
    SearchField.LOCATION: _matches_substring,
    SearchField.SPECIALTY: _matches_substring,
}


@dataclass(frozen=True)
class KeywordsPredicate:
    """Matches a record if any keyword matches the given field.

    Attributes:
        field: Field the keywords apply to
        keywords: Case-insensitive keywords
    """

    field: SearchField
    keywords: tuple[str, ...]

    def __call__(self, record: BaseRecord) -> bool:
        return MATCHERS[self.field](record, self.field, self.keywords)


@dataclass(frozen=True)
class KindPredicate:
    """Matches every record of one kind."""

    kind: RecordKind

    def __call__(self, record: BaseRecord) -> bool:
        return record.record_kind is self.kind


class FindPredicateMap:
    """Conjunction of per-field keyword predicates, restricted to one kind.

    Example Usage:
        ```python
        predicate = FindPredicateMap(RecordKind.PATIENT)
        predicate.put(SearchField.NAME, ["ann", "bob"])
        predicate.put(SearchField.TAG, ["vip"])
        matches = [r for r in records if predicate(r)]
        ```
    """

    def __init__(self, kind: RecordKind):
        self.kind = kind
        self._predicates: dict[SearchField, KeywordsPredicate] = {}

    def put(self, field: SearchField, keywords: Iterable[str]) -> None:
        """Constrain ``field`` to any of ``keywords``.

        Raises:
            ParseError: If the field does not exist on this kind or no
                keyword is given
        """
        if field not in SUPPORTED_SEARCH_FIELDS[self.kind]:
            raise ParseError(f"A {self.kind.value} cannot be searched by {field.value}.")
        keywords = tuple(keyword for keyword in keywords if keyword.strip())
        if not keywords:
            raise ParseError(f"No keywords given for {field.value}.")
        self._predicates[field] = KeywordsPredicate(field, keywords)

    def keyword_map(self) -> dict[SearchField, tuple[str, ...]]:
        return {field: predicate.keywords for field, predicate in self._predicates.items()}

    def __call__(self, record: BaseRecord) -> bool:
        if record.record_kind is not self.kind:
            return False
        return all(predicate(record) for predicate in self._predicates.values())

    def __len__(self) -> int:
        return len(self._predicates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FindPredicateMap):
            return NotImplemented
        return self.kind is other.kind and self._predicates == other._predicates

    def __hash__(self) -> int:
        return hash((self.kind, frozenset(self.keyword_map().items())))

    def __repr__(self) -> str:
        return f"FindPredicateMap({self.kind.value}, {self.keyword_map()!r})"


def compose_predicate(
    kind: RecordKind,
    keyword_map: Mapping[SearchField, Iterable[str]]
) -> FindPredicateMap:
    """Build a FindPredicateMap from a field -> keywords mapping.

    Parameters:
        kind: Record kind the search is restricted to
        keyword_map: Keywords per field

    Returns:
        The composed predicate

    Raises:
        ParseError: If a field is unsupported for ``kind`` or has no keywords
    """
    predicate = FindPredicateMap(kind)
    for field, keywords in keyword_map.items():
        predicate.put(field, keywords)
    return predicate
