"""Unit tests for the record collection and shortcut settings."""

import pytest

from carebook.domain.address_book import AddressBook, ShortcutSettings, Snapshot, UniqueRecordList
from carebook.domain.ports import (
    DuplicateAliasError,
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownAliasError,
)


class TestUniqueRecordList:
    """Test suite for the duplicate-checked record list."""

    def test_add_keeps_insertion_order(self, make_patient, make_specialist):
        """Test records are kept in the order they were added."""
        records = UniqueRecordList()
        first, second = make_patient(), make_specialist()
        records.add(first)
        records.add(second)

        assert records.as_tuple() == (first, second)
        assert len(records) == 2

    def test_add_identity_duplicate_rejected(self, make_patient):
        """Test an identity-equal record is rejected even if other fields differ."""
        records = UniqueRecordList([make_patient()])

        with pytest.raises(DuplicateRecordError):
            records.add(make_patient(email="different@example.com"))
        assert len(records) == 1

    def test_set_record_keeps_position(self, make_patient):
        """Test replacing a record keeps its index."""
        amy, bob, cat = (
            make_patient(name="Amy", phone="111"),
            make_patient(name="Bob", phone="222"),
            make_patient(name="Cat", phone="333"),
        )
        records = UniqueRecordList([amy, bob, cat])
        edited = make_patient(name="Bob", phone="222", email="bob@example.com")

        records.set_record(bob, edited)

        assert records.as_tuple() == (amy, edited, cat)

    def test_set_record_onto_other_person_rejected(self, make_patient):
        """Test an edit cannot turn a record into another stored person."""
        amy, bob = make_patient(name="Amy", phone="111"), make_patient(name="Bob", phone="222")
        records = UniqueRecordList([amy, bob])

        with pytest.raises(DuplicateRecordError):
            records.set_record(amy, make_patient(name="Bob", phone="222"))

    def test_set_record_missing_target(self, make_patient):
        """Test replacing a record that is not stored fails."""
        records = UniqueRecordList([make_patient()])
        with pytest.raises(RecordNotFoundError):
            records.set_record(make_patient(name="Zed"), make_patient(name="Zed"))

    def test_remove(self, make_patient):
        """Test removal and removal of a missing record."""
        amy = make_patient()
        records = UniqueRecordList([amy])
        records.remove(amy)

        assert len(records) == 0
        with pytest.raises(RecordNotFoundError):
            records.remove(amy)

    def test_set_records_rejects_duplicates_atomically(self, make_patient):
        """Test a replacement with duplicates leaves the list untouched."""
        amy = make_patient()
        records = UniqueRecordList([amy])

        with pytest.raises(DuplicateRecordError):
            records.set_records([make_patient(name="Bob"), make_patient(name="Bob")])
        assert records.as_tuple() == (amy,)


class TestShortcutSettings:
    """Test suite for the alias mapping."""

    def test_add_and_get(self):
        """Test an alias resolves to its command word."""
        shortcuts = ShortcutSettings()
        shortcuts.add_shortcut("ls", "list")

        assert shortcuts.get_command("ls") == "list"
        assert shortcuts.get_command("rm") is None
        assert shortcuts.has_shortcut("ls")

    def test_duplicate_alias_rejected(self):
        """Test aliases are unique."""
        shortcuts = ShortcutSettings({"ls": "list"})
        with pytest.raises(DuplicateAliasError):
            shortcuts.add_shortcut("ls", "find")

    def test_remove_unknown_alias_rejected(self):
        """Test removing an alias that does not exist fails."""
        with pytest.raises(UnknownAliasError):
            ShortcutSettings().remove_shortcut("ls")

    def test_copy_is_independent(self):
        """Test get_copy returns an equal mapping that does not share state."""
        shortcuts = ShortcutSettings({"ls": "list"})
        clone = shortcuts.get_copy()
        clone.add_shortcut("rm", "delete")

        assert shortcuts.items() == (("ls", "list"),)
        assert len(clone) == 2

    def test_set_shortcut_settings(self):
        """Test replacing the whole mapping."""
        shortcuts = ShortcutSettings({"ls": "list"})
        shortcuts.set_shortcut_settings(ShortcutSettings({"rm": "delete"}))

        assert shortcuts == ShortcutSettings({"rm": "delete"})


class TestAddressBook:
    """Test suite for the AddressBook aggregate."""

    def test_snapshot_is_unaffected_by_later_changes(self, make_patient):
        """Test a snapshot is an immutable copy."""
        book = AddressBook([make_patient()], {"ls": "list"})
        snapshot = book.snapshot()

        book.add_record(make_patient(name="Bob"))
        book.add_shortcut("rm", "delete")

        assert len(snapshot.records) == 1
        assert snapshot.shortcuts == (("ls", "list"),)

    def test_reset_data_restores_snapshot(self, make_patient):
        """Test reset_data replaces records and shortcuts wholesale."""
        amy = make_patient()
        book = AddressBook([make_patient(name="Bob")], {"rm": "delete"})

        book.reset_data(Snapshot(records=(amy,), shortcuts=(("ls", "list"),)))

        assert book.records == (amy,)
        assert book.get_shortcut("ls") == "list"
        assert book.get_shortcut("rm") is None

    def test_from_snapshot_round_trip(self, make_patient):
        """Test a book rebuilt from its snapshot is equal to it."""
        book = AddressBook([make_patient()], {"ls": "list"})
        assert AddressBook.from_snapshot(book.snapshot()) == book

    def test_has_record_uses_identity(self, make_patient):
        """Test has_record finds identity-equal records."""
        book = AddressBook([make_patient()])
        assert book.has_record(make_patient(email="x@example.com"))
        assert not book.has_record(make_patient(phone="000"))

    def test_equality_covers_shortcuts(self, make_patient):
        """Test books with different shortcuts are not equal."""
        records = [make_patient()]
        assert AddressBook(records, {"ls": "list"}) != AddressBook(records)
