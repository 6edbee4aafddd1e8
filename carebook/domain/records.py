"""Record Schema Definitions.

This module defines the two record kinds held by the address book: patients
and specialists. Both share the identity fields (name, phone, email, tags) and
add their own kind-specific fields.

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Models are immutable (frozen) and validated at construction time
    - A record's kind is a Literal discriminator, so ``Record`` is a tagged
      union that storage can decode without isinstance chains
    - "Editing" never mutates a record: a new instance is always built
"""

import re
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carebook.domain.enums import RecordKind

# ============================================================================
# Field Rules
# ============================================================================

NAME_PATTERN = re.compile(r"^[^\W_](?:[^\W_]| )*$")
PHONE_PATTERN = re.compile(r"^[0-9]{3,}$")
TAG_PATTERN = re.compile(r"^[^\W_]+$")
EMAIL_LOCAL_PATTERN = re.compile(r"^[A-Za-z0-9]+(?:[+_.\-][A-Za-z0-9]+)*$")
EMAIL_DOMAIN_LABEL_PATTERN = re.compile(r"^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*$")

NAME_CONSTRAINTS = "Names should only contain alphanumeric characters and spaces, and it should not be blank"
PHONE_CONSTRAINTS = "Phone numbers should only contain numbers, and it should be at least 3 digits long"
TAG_CONSTRAINTS = "Tag names should be alphanumeric"
EMAIL_CONSTRAINTS = (
    "Emails should be of the format local-part@domain. The local-part should only contain "
    "alphanumeric characters and the special characters +_.-, and may not start or end with "
    "a special character. The domain is made of labels separated by periods; each label is "
    "alphanumeric, may contain inner hyphens, and the last label is at least 2 characters long"
)

MIN_AGE = 0
MAX_AGE = 150


def validate_name(value: str) -> str:
    """Check a name against NAME_PATTERN."""
    if not NAME_PATTERN.match(value):
        raise ValueError(NAME_CONSTRAINTS)
    return value


def validate_phone(value: str) -> str:
    if not PHONE_PATTERN.match(value):
        raise ValueError(PHONE_CONSTRAINTS)
    return value


def validate_email(value: str) -> str:
    """Validate a basic ``local-part@domain`` address.

    Parameters:
        value: Candidate email address (already stripped)

    Returns:
        The address unchanged

    Raises:
        ValueError: If the address does not follow the email grammar
    """
    local, sep, domain = value.partition("@")
    if not sep or "@" in domain or not EMAIL_LOCAL_PATTERN.match(local):
        raise ValueError(EMAIL_CONSTRAINTS)

    labels = domain.split(".")
    if not all(EMAIL_DOMAIN_LABEL_PATTERN.match(label) for label in labels):
        raise ValueError(EMAIL_CONSTRAINTS)
    if len(labels[-1]) < 2:
        raise ValueError(EMAIL_CONSTRAINTS)
    return value


def validate_tags(value: frozenset) -> frozenset:
    for tag in value:
        if not TAG_PATTERN.match(tag):
            raise ValueError(f"{TAG_CONSTRAINTS}: {tag!r}")
    return value


def validate_non_blank(value: str, label: str) -> str:
    if not value:
        raise ValueError(f"{label} can take any value, and it should not be blank")
    return value


# ============================================================================
# Record Models
# ============================================================================

class BaseRecord(BaseModel):
    """Fields and behaviour shared by every record kind.

    Equality (``==``) is full structural equality over every field, kind
    included. Duplicate detection uses the weaker identity equality exposed by
    ``is_same_record``.

    Parameters:
        name: Full name, alphanumeric words separated by spaces
        phone: Digits only, at least 3 of them
        email: Contact email address
        tags: Alphanumeric labels; any iterable is frozen on construction
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., description="Full name")
    phone: str = Field(..., description="Phone number (digits only)")
    email: str = Field(..., description="Email address")
    tags: frozenset[str] = Field(default_factory=frozenset, description="Free-form labels")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: frozenset) -> frozenset:
        return validate_tags(v)

    @property
    def record_kind(self) -> RecordKind:
        return RecordKind(self.kind)

    def is_same_record(self, other: Optional["BaseRecord"]) -> bool:
        """Return True if both records describe the same person.

        Two records are the same person when name and phone match, whatever
        their other fields or kinds are.
        """
        if other is self:
            return True
        if other is None:
            return False
        return self.name == other.name and self.phone == other.phone

    def display_fields(self) -> list[tuple[str, str]]:
        """Label/value pairs describing the record, in display order."""
        return [
            ("Name", self.name),
            ("Phone", self.phone),
            ("Email", self.email),
            ("Tags", ", ".join(sorted(self.tags)) or "-"),
        ]

    def describe(self) -> str:
        """One-line human readable summary used in command feedback."""
        return "; ".join(f"{label}: {value}" for label, value in self.display_fields())


class Patient(BaseRecord):
    """A patient of the clinic.

    Parameters:
        medical_history: Free text summary, must not be blank
        age: Age in years (0-150), optional
    """

    kind: Literal["patient"] = "patient"
    medical_history: str = Field(..., description="Medical history")
    age: Optional[int] = Field(None, ge=MIN_AGE, le=MAX_AGE, description="Age in years")

    @field_validator("medical_history")
    @classmethod
    def validate_medical_history(cls, v: str) -> str:
        return validate_non_blank(v, "Medical history")

    def display_fields(self) -> list[tuple[str, str]]:
        fields = super().display_fields()
        fields.append(("Age", "-" if self.age is None else str(self.age)))
        fields.append(("Medical history", self.medical_history))
        return fields


class Specialist(BaseRecord):
    """A medical specialist the clinic refers patients to.

    Parameters:
        location: Practice location, must not be blank
        specialty: Area of practice, must not be blank
    """

    kind: Literal["specialist"] = "specialist"
    location: str = Field(..., description="Practice location")
    specialty: str = Field(..., description="Medical specialty")

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str) -> str:
        return validate_non_blank(v, "Location")

    @field_validator("specialty")
    @classmethod
    def validate_specialty(cls, v: str) -> str:
        return validate_non_blank(v, "Specialty")

    def display_fields(self) -> list[tuple[str, str]]:
        fields = super().display_fields()
        fields.append(("Location", self.location))
        fields.append(("Specialty", self.specialty))
        return fields


# Tagged union of every record kind, discriminated on ``kind``
Record = Annotated[Union[Patient, Specialist], Field(discriminator="kind")]

RECORD_CLASSES = {
    RecordKind.PATIENT: Patient,
    RecordKind.SPECIALIST: Specialist,
}
