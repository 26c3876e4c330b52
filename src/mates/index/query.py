"""Query the contact index.

Queries run the index through the configured filter program and parse the
matching rows. The mutt, file and email output formats are projections of
the same record stream.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

import structlog

from mates.config import Settings
from mates.exceptions import StorageError
from mates.index.filter import run_filter
from mates.models import IndexEntry

logger = structlog.get_logger()


def parse_filter_output(output: str) -> Iterator[IndexEntry]:
    """Yield index entries from filter output, in output order."""

    lines = output.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for line in lines:
        yield IndexEntry.from_line(line)


def mutt_lines(records: Iterable[IndexEntry]) -> Iterator[str]:
    for record in records:
        if record.email and record.name:
            yield f"{record.email}\t{record.name}\t{record.filepath}"


def file_lines(records: Iterable[IndexEntry]) -> Iterator[str]:
    for record in records:
        if record.filepath:
            yield record.filepath


def email_lines(records: Iterable[IndexEntry]) -> Iterator[str]:
    for record in records:
        if record.name and record.email:
            yield f"{record.name} <{record.email}>"


class IndexQueryEngine:
    """Substring search over the index file."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def index_path(self) -> Path:
        return self.settings.index_path

    def query(self, term: str) -> Iterator[IndexEntry]:
        """Return the index entries matching `term`.

        Raises:
            StorageError: If the index file cannot be read.
            FilterSpawnError: If the filter process cannot be started.
            FilterStreamError: If the filter output cannot be obtained.
        """

        try:
            index_text = self.index_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Unable to read index {self.index_path}: {exc}") from exc

        logger.debug("index_query_started", term=term, index_path=str(self.index_path))
        output = run_filter(
            self.settings.grep_cmd,
            term,
            index_text,
            timeout=self.settings.filter_timeout,
        )
        return parse_filter_output(output)

    def mutt_query(self, term: str) -> Iterator[str]:
        return mutt_lines(self.query(term))

    def file_query(self, term: str) -> Iterator[str]:
        return file_lines(self.query(term))

    def email_query(self, term: str) -> Iterator[str]:
        return email_lines(self.query(term))
