"""Interactive contact editing.

A contact is chosen either by file name inside the contact directory or by
an index query that must match exactly one contact file. Emptying the file
in the editor removes the contact.
"""

from __future__ import annotations

import subprocess
from enum import Enum
from pathlib import Path

import structlog

from mates.config import Settings
from mates.contacts import Contact
from mates.exceptions import (
    AmbiguousQueryError,
    ConfigurationError,
    ContactNotFoundError,
    EditorError,
    StorageError,
)
from mates.index.query import IndexQueryEngine, file_lines

logger = structlog.get_logger()

# The editor gets the terminal as stdin even when mates itself reads a pipe.
_EDITOR_SCRIPT = '$0 -- "$1" < $2'


class EditOutcome(str, Enum):
    """What happened to the contact file after editing."""

    SAVED = "saved"
    REMOVED = "removed"


def resolve_contact_path(settings: Settings, query: str, engine: IndexQueryEngine) -> Path:
    """Resolve `query` to exactly one contact file.

    Raises:
        ContactNotFoundError: If nothing matches.
        AmbiguousQueryError: If more than one contact file matches.
    """

    if query:
        direct = settings.vdir_path / query
        if direct.is_file():
            return direct

    # One contact with several addresses shows up once per address.
    paths = list(dict.fromkeys(file_lines(engine.query(query))))
    if not paths:
        raise ContactNotFoundError("No such contact.")
    if len(paths) > 1:
        raise AmbiguousQueryError(f"Ambiguous query: {len(paths)} contacts match {query!r}.")
    return Path(paths[0])


def run_editor(editor_cmd: str, path: Path, tty: str = "/dev/tty") -> None:
    """Open `path` in the editor and wait for it to exit.

    Raises:
        EditorError: If the editor cannot be started or exits non-zero.
    """

    try:
        completed = subprocess.run(["sh", "-c", _EDITOR_SCRIPT, editor_cmd, str(path), tty])
    except OSError as exc:
        raise EditorError(f"Error while invoking editor: {exc}") from exc
    if completed.returncode != 0:
        raise EditorError(f"Editor exited with status {completed.returncode}")


def edit_contact(
    settings: Settings,
    query: str,
    engine: IndexQueryEngine | None = None,
    tty: str = "/dev/tty",
) -> tuple[Path, EditOutcome]:
    """Edit the contact selected by `query`.

    Returns:
        The edited file and whether it was kept or removed.

    Raises:
        ConfigurationError: If no editor is configured.
        StorageError: If the file cannot be read or removed after editing.
        ContactParseError: If the edited file is no longer a valid vCard.
    """

    if not settings.editor_cmd:
        raise ConfigurationError("MATES_EDITOR or EDITOR must be set.")

    engine = engine or IndexQueryEngine(settings)
    path = resolve_contact_path(settings, query, engine)
    logger.info("contact_edit_started", path=str(path), editor=settings.editor_cmd)

    run_editor(settings.editor_cmd, path, tty=tty)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"File can't be read after user edited it: {exc}") from exc

    if not text.strip():
        try:
            path.unlink()
        except OSError as exc:
            raise StorageError(f"Unable to remove emptied contact {path}: {exc}") from exc
        logger.info("contact_removed", path=str(path))
        return path, EditOutcome.REMOVED

    Contact.from_file(path)
    logger.info("contact_edit_completed", path=str(path))
    return path, EditOutcome.SAVED
