"""vCard-backed contact storage.

Every contact lives in its own ``<uid>.vcf`` file inside a single directory.
Files are created exclusively and atomically, so concurrent ``add`` runs can
never overwrite each other and a crash never leaves a half-written contact.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from pathlib import Path

import structlog
import vobject
from vobject.base import Component, VObjectError

from mates.exceptions import ContactExistsError, ContactParseError, StorageError
from mates.utils import write_exclusive

logger = structlog.get_logger()

DEFAULT_EXTENSION = ".vcf"


class Contact:
    """A single contact: a vCard component plus the file that holds it."""

    def __init__(self, component: Component, path: Path) -> None:
        self.component = component
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"Contact(path={str(self.path)!r}, uid={self.uid!r})"

    @classmethod
    def from_file(cls, path: Path) -> Contact:
        """Read and parse a contact file.

        Raises:
            StorageError: If the file cannot be read.
            ContactParseError: If the file does not hold exactly one vCard.
        """

        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ContactParseError(f"{path}: not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise StorageError(f"Unable to read {path}: {exc}") from exc

        # Parse everything so trailing cards or junk are caught too.
        try:
            components = list(vobject.readComponents(text))
        except (VObjectError, ValueError) as exc:
            raise ContactParseError(f"Error while parsing contact {path}: {exc}") from exc

        if not components:
            raise ContactParseError(f"{path}: file contains no vCard")
        if len(components) > 1:
            raise ContactParseError(
                f"{path}: expected exactly one vCard, found {len(components)} components"
            )

        component = components[0]
        if not isinstance(component, Component) or component.name != "VCARD":
            raise ContactParseError(f"{path}: expected a VCARD component")
        return cls(component, path)

    def _values(self, name: str) -> list[str]:
        lines = self.component.contents.get(name.lower(), [])
        return [line.value if isinstance(line.value, str) else str(line.value) for line in lines]

    @property
    def uid(self) -> str | None:
        values = self._values("UID")
        return values[0] if values else None

    @property
    def full_name(self) -> str | None:
        """The first FN value, or None when the card has no name."""
        values = self._values("FN")
        return values[0] if values else None

    @property
    def emails(self) -> list[str]:
        """All EMAIL values in document order."""
        return self._values("EMAIL")

    def serialize(self) -> str:
        # FN is optional for us even though vCard 3.0 requires it.
        return self.component.serialize(validate=False)


def generate_unique_id(directory: Path, extension: str = DEFAULT_EXTENSION) -> str:
    """Return a random identifier with no matching file in `directory`.

    This only avoids obvious collisions; exclusivity is enforced when the
    file is created.
    """

    directory = Path(directory)
    while True:
        uid = uuid.uuid4().hex
        if not (directory / f"{uid}{extension}").exists():
            return uid


def generate_component(uid: str, full_name: str | None = None, email: str | None = None) -> Component:
    card = vobject.vCard()
    if full_name is not None:
        card.add("fn").value = full_name
    if email is not None:
        card.add("email").value = email
    card.add("uid").value = uid
    return card


class ContactStore:
    """Directory of contact files."""

    def __init__(self, directory: Path, extension: str = DEFAULT_EXTENSION) -> None:
        """Create a store.

        Args:
            directory: Directory holding one vCard file per contact.
            extension: Suffix of contact file names.
        """

        self.directory = Path(directory)
        self.extension = extension

    def generate_unique_id(self) -> str:
        return generate_unique_id(self.directory, self.extension)

    def generate(self, full_name: str | None = None, email: str | None = None) -> Contact:
        """Build a new, unwritten contact with a fresh UID."""

        uid = self.generate_unique_id()
        path = self.directory / f"{uid}{self.extension}"
        return Contact(generate_component(uid, full_name, email), path)

    def write_create(self, contact: Contact) -> None:
        """Write a new contact file, never overwriting an existing one.

        Raises:
            ContactExistsError: If the contact's path already exists.
            StorageError: If the file cannot be written.
        """

        text = contact.serialize()
        try:
            write_exclusive(contact.path, text)
        except FileExistsError as exc:
            raise ContactExistsError(f"Contact file already exists: {contact.path}") from exc
        except OSError as exc:
            raise StorageError(f"Unable to write {contact.path}: {exc}") from exc
        logger.info("contact_written", path=str(contact.path), uid=contact.uid)

    def from_file(self, path: Path) -> Contact:
        return Contact.from_file(path)

    def iter_contact_paths(self) -> Iterator[Path]:
        """Yield contact files in the directory, sorted by name.

        Raises:
            StorageError: If the directory cannot be listed.
        """

        try:
            entries = sorted(self.directory.iterdir())
        except OSError as exc:
            raise StorageError(f"Unable to list {self.directory}: {exc}") from exc

        for entry in entries:
            if entry.name.endswith(self.extension) and entry.is_file():
                yield entry
