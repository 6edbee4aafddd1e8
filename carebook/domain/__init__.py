"""Domain layer for CareBook.

This module contains the record schemas, the versioned address book and the
command layer. All domain models are pure Python with no external
dependencies beyond Pydantic.
"""

from .address_book import AddressBook, Snapshot
from .descriptors import EditPatientDescriptor, EditSpecialistDescriptor
from .enums import RecordKind, SearchField
from .history import TrackedAddressBook
from .model_manager import ModelManager
from .records import Patient, Record, Specialist

__all__ = [
    "AddressBook",
    "Snapshot",
    "EditPatientDescriptor",
    "EditSpecialistDescriptor",
    "RecordKind",
    "SearchField",
    "TrackedAddressBook",
    "ModelManager",
    "Patient",
    "Record",
    "Specialist",
]
