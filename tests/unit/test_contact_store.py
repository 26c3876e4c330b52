"""Unit tests for the vCard contact store."""

from __future__ import annotations

from pathlib import Path

import pytest

from mates.contacts import Contact, ContactStore, generate_unique_id
from mates.exceptions import ContactExistsError, ContactParseError, StorageError


class TestGenerate:
    """Test suite for building new contacts in memory."""

    def test_generate_sets_properties(self, contact_dir: Path) -> None:
        store = ContactStore(contact_dir)

        contact = store.generate("John Doe", "john@example.com")

        assert contact.full_name == "John Doe"
        assert contact.emails == ["john@example.com"]
        assert contact.uid is not None
        assert contact.path == contact_dir / f"{contact.uid}.vcf"
        assert contact.component.name == "VCARD"

    def test_generate_without_name_or_email(self, contact_dir: Path) -> None:
        contact = ContactStore(contact_dir).generate(None, None)

        assert contact.full_name is None
        assert contact.emails == []
        assert contact.uid

    def test_generate_does_no_io(self, contact_dir: Path) -> None:
        ContactStore(contact_dir).generate("John Doe", "john@example.com")

        assert list(contact_dir.iterdir()) == []

    def test_generated_ids_are_distinct(self, contact_dir: Path) -> None:
        store = ContactStore(contact_dir)

        uids = {store.generate("A", None).uid for _ in range(50)}

        assert len(uids) == 50

    def test_unique_id_skips_existing_files(
        self, contact_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (contact_dir / "taken.vcf").write_text("", encoding="utf-8")
        candidates = iter(["taken", "free"])

        class FakeUUID:
            def __init__(self, hex_value: str) -> None:
                self.hex = hex_value

        monkeypatch.setattr(
            "mates.contacts.store.uuid.uuid4", lambda: FakeUUID(next(candidates))
        )

        assert generate_unique_id(contact_dir) == "free"


class TestWriteCreate:
    """Test suite for exclusive contact creation."""

    def test_round_trip(self, contact_dir: Path) -> None:
        store = ContactStore(contact_dir)
        contact = store.generate("Jane Q. Public", "jane@example.com")

        store.write_create(contact)
        loaded = store.from_file(contact.path)

        assert loaded.full_name == "Jane Q. Public"
        assert loaded.emails == ["jane@example.com"]
        assert loaded.uid == contact.uid

    def test_round_trip_without_name(self, contact_dir: Path) -> None:
        store = ContactStore(contact_dir)
        contact = store.generate(None, "anon@example.com")

        store.write_create(contact)
        loaded = Contact.from_file(contact.path)

        assert loaded.full_name is None
        assert loaded.emails == ["anon@example.com"]

    def test_existing_file_is_never_overwritten(self, contact_dir: Path) -> None:
        store = ContactStore(contact_dir)
        contact = store.generate("John Doe", "john@example.com")
        contact.path.write_text("original", encoding="utf-8")

        with pytest.raises(ContactExistsError):
            store.write_create(contact)

        assert contact.path.read_text(encoding="utf-8") == "original"

    def test_no_temporary_files_left_behind(self, contact_dir: Path) -> None:
        store = ContactStore(contact_dir)
        contact = store.generate("John Doe", "john@example.com")
        store.write_create(contact)

        with pytest.raises(ContactExistsError):
            store.write_create(contact)

        assert [p.name for p in contact_dir.iterdir()] == [contact.path.name]

    def test_missing_directory_is_storage_error(self, tmp_path: Path) -> None:
        store = ContactStore(tmp_path / "missing")
        contact = store.generate("John Doe", None)

        with pytest.raises(StorageError):
            store.write_create(contact)


class TestFromFile:
    """Test suite for reading contact files."""

    def test_reads_all_emails_and_extra_properties(self, contact_dir: Path, write_vcard) -> None:
        path = write_vcard(
            contact_dir,
            "a.vcf",
            "UID:a",
            "FN:Alice Example",
            "EMAIL;TYPE=WORK:alice@work.example",
            "EMAIL:alice@home.example",
            "TEL:+1 555 0100",
        )

        contact = Contact.from_file(path)

        assert contact.uid == "a"
        assert contact.full_name == "Alice Example"
        assert contact.emails == ["alice@work.example", "alice@home.example"]
        assert "tel" in contact.component.contents

    def test_malformed_file_is_parse_error(self, contact_dir: Path) -> None:
        path = contact_dir / "bad.vcf"
        path.write_text("BEGIN:VCARD\r\nthis is not a property\r\n", encoding="utf-8")

        with pytest.raises(ContactParseError):
            Contact.from_file(path)

    def test_empty_file_is_parse_error(self, contact_dir: Path) -> None:
        path = contact_dir / "empty.vcf"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ContactParseError):
            Contact.from_file(path)

    def test_two_cards_in_one_file_is_parse_error(self, contact_dir: Path) -> None:
        path = contact_dir / "two.vcf"
        path.write_text(
            "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:First\r\nEMAIL:first@x.com\r\nEND:VCARD\r\n"
            "BEGIN:VCARD\r\nVERSION:3.0\r\nFN:Second\r\nEMAIL:second@x.com\r\nEND:VCARD\r\n",
            encoding="utf-8",
        )

        with pytest.raises(ContactParseError, match="exactly one vCard"):
            Contact.from_file(path)

    @pytest.mark.parametrize("trailer", ["garbage trailing\r\n", "NOTE:outside the card\r\n"])
    def test_data_after_card_is_parse_error(
        self, contact_dir: Path, write_vcard, trailer: str
    ) -> None:
        path = write_vcard(contact_dir, "trail.vcf", "UID:t", "FN:T", "EMAIL:t@x.com")
        with path.open("a", encoding="utf-8", newline="") as fh:
            fh.write(trailer)

        with pytest.raises(ContactParseError):
            Contact.from_file(path)

    def test_other_component_is_parse_error(self, contact_dir: Path) -> None:
        path = contact_dir / "event.vcf"
        path.write_text(
            "BEGIN:VCALENDAR\r\nVERSION:2.0\r\nPRODID:-//test//EN\r\nEND:VCALENDAR\r\n",
            encoding="utf-8",
        )

        with pytest.raises(ContactParseError):
            Contact.from_file(path)

    def test_missing_file_is_storage_error(self, contact_dir: Path) -> None:
        with pytest.raises(StorageError):
            Contact.from_file(contact_dir / "nope.vcf")


class TestIterContactPaths:
    """Test suite for listing contact files."""

    def test_only_files_with_extension(self, contact_dir: Path) -> None:
        (contact_dir / "b.vcf").write_text("", encoding="utf-8")
        (contact_dir / "a.vcf").write_text("", encoding="utf-8")
        (contact_dir / "notes.txt").write_text("", encoding="utf-8")
        (contact_dir / "dir.vcf").mkdir()

        paths = list(ContactStore(contact_dir).iter_contact_paths())

        assert paths == [contact_dir / "a.vcf", contact_dir / "b.vcf"]
