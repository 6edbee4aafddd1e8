"""Domain Enumerations.

Closed vocabularies shared by the record model, the predicate composer and
the command parser.
"""

from enum import Enum


class RecordKind(str, Enum):
    """Discriminator for the two record kinds kept in the address book."""
    PATIENT = "patient"
    SPECIALIST = "specialist"

    @property
    def label(self) -> str:
        """Plural, capitalised label used in list headings."""
        return "Patients" if self is RecordKind.PATIENT else "Specialists"


class SearchField(str, Enum):
    """Record fields that the find command can constrain."""
    NAME = "name"
    PHONE = "phone"
    EMAIL = "email"
    TAG = "tag"
    AGE = "age"
    MEDICAL_HISTORY = "medical_history"
    LOCATION = "location"
    SPECIALTY = "specialty"


COMMON_SEARCH_FIELDS = frozenset({
    SearchField.NAME,
    SearchField.PHONE,
    SearchField.EMAIL,
    SearchField.TAG,
})

SUPPORTED_SEARCH_FIELDS = {
    RecordKind.PATIENT: COMMON_SEARCH_FIELDS | {SearchField.AGE, SearchField.MEDICAL_HISTORY},
    RecordKind.SPECIALIST: COMMON_SEARCH_FIELDS | {SearchField.LOCATION, SearchField.SPECIALTY},
}
