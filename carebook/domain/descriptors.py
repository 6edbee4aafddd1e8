"""Edit Descriptors.

A descriptor is a sparse patch over one record kind: every field is either
``None`` (leave unchanged) or a replacement value. Descriptors validate their
values with the same rules as the records they patch, so a descriptor that
exists always produces a valid record when applied.

Architecture:
    - One concrete descriptor per record kind, mirroring the record models
    - Descriptors are frozen; tag iterables are frozen on construction, so a
      caller mutating its own set afterwards cannot reach descriptor state
    - ``apply`` assumes the kinds match; callers check ``matches_kind`` first
"""

from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carebook.domain.enums import RecordKind
from carebook.domain.records import (
    MAX_AGE,
    MIN_AGE,
    BaseRecord,
    validate_email,
    validate_name,
    validate_non_blank,
    validate_phone,
    validate_tags,
)


class EditRecordDescriptor(BaseModel):
    """Fields every descriptor can replace.

    Parameters:
        name: Replacement name, or None
        phone: Replacement phone, or None
        email: Replacement email, or None
        tags: Replacement tag set, or None. An empty set clears the tags.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    kind: ClassVar[RecordKind]

    name: Optional[str] = Field(None, description="Replacement name")
    phone: Optional[str] = Field(None, description="Replacement phone")
    email: Optional[str] = Field(None, description="Replacement email")
    tags: Optional[frozenset[str]] = Field(None, description="Replacement tag set")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else validate_name(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else validate_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else validate_email(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: Optional[frozenset]) -> Optional[frozenset]:
        return v if v is None else validate_tags(v)

    def edited_fields(self) -> dict[str, Any]:
        """Return only the fields that carry a replacement value."""
        return self.model_dump(exclude_none=True)

    def is_any_field_edited(self) -> bool:
        """Return True if at least one field is set."""
        return bool(self.edited_fields())

    def matches_kind(self, record: BaseRecord) -> bool:
        return record.record_kind is self.kind

    def apply(self, existing: BaseRecord) -> BaseRecord:
        """Build a new record from ``existing`` with the set fields replaced.

        Parameters:
            existing: Record of the same kind as this descriptor

        Returns:
            A new record of the same class; ``existing`` is left untouched
        """
        values = existing.model_dump()
        values.update(self.edited_fields())
        return type(existing).model_validate(values)

    def copy(self) -> "EditRecordDescriptor":
        """Return an independent descriptor equal to this one."""
        return self.model_copy(deep=True)

    @classmethod
    def from_record(cls, record: BaseRecord) -> "EditRecordDescriptor":
        """Descriptor that sets every field to the value held by ``record``."""
        values = record.model_dump(exclude={"kind"})
        return cls.model_validate(values)


class EditPatientDescriptor(EditRecordDescriptor):
    """Descriptor for patients; adds medical history and age."""

    kind: ClassVar[RecordKind] = RecordKind.PATIENT

    medical_history: Optional[str] = Field(None, description="Replacement medical history")
    age: Optional[int] = Field(None, ge=MIN_AGE, le=MAX_AGE, description="Replacement age")

    @field_validator("medical_history")
    @classmethod
    def check_medical_history(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else validate_non_blank(v, "Medical history")


class EditSpecialistDescriptor(EditRecordDescriptor):
    """Descriptor for specialists; adds location and specialty."""

    kind: ClassVar[RecordKind] = RecordKind.SPECIALIST

    location: Optional[str] = Field(None, description="Replacement location")
    specialty: Optional[str] = Field(None, description="Replacement specialty")

    @field_validator("location")
    @classmethod
    def check_location(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else validate_non_blank(v, "Location")

    @field_validator("specialty")
    @classmethod
    def check_specialty(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else validate_non_blank(v, "Specialty")


EditDescriptor = Union[EditPatientDescriptor, EditSpecialistDescriptor]

DESCRIPTOR_CLASSES = {
    RecordKind.PATIENT: EditPatientDescriptor,
    RecordKind.SPECIALIST: EditSpecialistDescriptor,
}
