"""Build the flat contact index.

A full rebuild scans every contact file and atomically replaces the index.
Bad files and nameless contacts are reported but never abort the rebuild:
the index is always written with whatever could be indexed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog
from pydantic import ValidationError

from mates.contacts import Contact, ContactStore
from mates.contacts.store import DEFAULT_EXTENSION
from mates.exceptions import ConfigurationError, ContactIndexError, ContactParseError, StorageError
from mates.models import IndexEntry
from mates.utils import atomic_replace

logger = structlog.get_logger()


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of a full index rebuild."""

    output_path: Path
    contacts_indexed: int
    rows_written: int
    errors: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def index_entries_for(contact: Contact) -> list[IndexEntry]:
    """Return one index entry per email address of `contact`.

    Raises:
        ContactIndexError: If the contact has no full name, or a value
            cannot be stored in the index.
    """

    name = contact.full_name
    if name is None:
        raise ContactIndexError("No name found.")

    try:
        return [
            IndexEntry(email=email, name=name, filepath=str(contact.path))
            for email in contact.emails
        ]
    except ValidationError as exc:
        raise ContactIndexError(f"Contact cannot be indexed: {exc}") from exc


def build_index(
    output_path: Path,
    contact_dir: Path,
    extension: str = DEFAULT_EXTENSION,
) -> IndexBuildResult:
    """Rebuild the index at `output_path` from every contact in `contact_dir`.

    Args:
        output_path: Index file to replace.
        contact_dir: Directory of contact files.
        extension: Suffix of contact file names.

    Returns:
        IndexBuildResult: Counts and the per-file errors encountered.

    Raises:
        ConfigurationError: If `contact_dir` is not a directory.
        StorageError: If the directory cannot be listed or the index cannot
            be written.
    """

    contact_dir = Path(contact_dir)
    output_path = Path(output_path)
    if not contact_dir.is_dir():
        raise ConfigurationError(f"MATES_DIR must be a directory: {contact_dir}")

    store = ContactStore(contact_dir, extension)
    logger.info("index_build_started", output_path=str(output_path), contact_dir=str(contact_dir))

    rows: list[str] = []
    errors: list[tuple[Path, str]] = []
    contacts_indexed = 0

    for path in store.iter_contact_paths():
        try:
            contact = store.from_file(path)
        except (ContactParseError, StorageError) as exc:
            logger.warning("index_contact_unreadable", path=str(path), error=str(exc))
            errors.append((path, f"Error while reading {path}: {exc}"))
            continue

        try:
            entries = index_entries_for(contact)
        except ContactIndexError as exc:
            logger.warning("index_contact_skipped", path=str(path), error=str(exc))
            errors.append((path, f"Error while indexing {path}: {exc}"))
            continue

        rows.extend(entry.to_line() for entry in entries)
        contacts_indexed += 1

    try:
        atomic_replace(output_path, "".join(rows))
    except OSError as exc:
        raise StorageError(f"Unable to write index {output_path}: {exc}") from exc

    result = IndexBuildResult(
        output_path=output_path,
        contacts_indexed=contacts_indexed,
        rows_written=len(rows),
        errors=errors,
    )
    logger.info(
        "index_build_completed",
        output_path=str(output_path),
        contacts_indexed=contacts_indexed,
        rows_written=len(rows),
        error_count=len(errors),
    )
    return result


def append_to_index(index_path: Path, contact: Contact) -> int:
    """Append the rows for `contact` to an existing (or new) index.

    Existing rows are left untouched; a later full rebuild reconciles any
    drift.

    Returns:
        int: Number of rows appended.

    Raises:
        ContactIndexError: If the contact cannot be indexed.
        StorageError: If the index cannot be opened or written.
    """

    entries = index_entries_for(contact)
    try:
        with Path(index_path).open("a", encoding="utf-8", newline="") as fh:
            fh.write("".join(entry.to_line() for entry in entries))
    except OSError as exc:
        raise StorageError(f"Unable to write index {index_path}: {exc}") from exc

    logger.info("index_rows_appended", index_path=str(index_path), rows=len(entries))
    return len(entries)
