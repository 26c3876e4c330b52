"""Index record model.

The index is a plain text file with one row per contact email address:
``email<TAB>name<TAB>filepath``. Nothing is escaped, so no field may contain
a tab or a newline.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

FIELD_SEPARATOR = "\t"
ROW_SEPARATOR = "\n"


class IndexEntry(BaseModel):
    """A single row of the contact index."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(default="", description="Email address")
    name: str = Field(default="", description="Contact full name (FN)")
    filepath: str = Field(default="", description="Path of the contact file")

    @field_validator("email", "name", "filepath")
    @classmethod
    def _no_separators(cls, value: str) -> str:
        if FIELD_SEPARATOR in value or ROW_SEPARATOR in value:
            raise ValueError("index fields must not contain tabs or newlines")
        return value

    @classmethod
    def from_line(cls, line: str) -> IndexEntry:
        """Parse one index row.

        Missing trailing fields default to the empty string; anything after
        the third field is ignored.
        """

        parts = line.split(FIELD_SEPARATOR)
        parts += [""] * (3 - len(parts))
        return cls(email=parts[0], name=parts[1], filepath=parts[2])

    def to_line(self) -> str:
        """Render the row including its trailing newline."""

        return FIELD_SEPARATOR.join((self.email, self.name, self.filepath)) + ROW_SEPARATOR
