"""Create contacts from the sender of an email.

The raw message is read whole; only its headers are parsed.
"""

from __future__ import annotations

import re
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.parser import HeaderParser
from typing import TextIO

import structlog

from mates.contacts import Contact, ContactStore
from mates.exceptions import NoSenderError

logger = structlog.get_logger()

_FOLD_RE = re.compile(r"\r?\n(?=[ \t])")


def _unfold(value: str) -> str:
    value = _FOLD_RE.sub("", value).strip()
    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeDecodeError):
        # Malformed encoded-words: keep the raw text.
        return value


def read_sender_from_email(raw: str) -> str:
    """Return the unfolded value of the first ``From`` header in `raw`.

    Raises:
        NoSenderError: If the message has no From header.
    """

    message = HeaderParser().parsestr(raw)
    for name, value in message.items():
        if name == "From":
            return _unfold(str(value))
    raise NoSenderError("Couldn't find From-header in email.")


def parse_from_header(value: str) -> tuple[str | None, str]:
    """Split a From header value into ``(display_name, address)``.

    The address is the text after the last space with any leading ``<`` and
    trailing ``>`` removed; the display name is everything before it. With
    no space, the whole value is the address. Quoted names and addresses
    written without a preceding space are not handled.
    """

    name, sep, address = value.rpartition(" ")
    address = address.lstrip("<").rstrip(">")
    if not sep:
        return None, address
    return name, address


def add_contact(store: ContactStore, stream: TextIO) -> Contact:
    """Read an email from `stream` and store its sender as a new contact.

    Raises:
        NoSenderError: If the email has no From header.
        ContactExistsError: If the generated contact file already exists.
        StorageError: If the contact cannot be written.
    """

    raw = stream.read()
    sender = read_sender_from_email(raw)
    full_name, email = parse_from_header(sender)
    logger.info("sender_parsed", full_name=full_name, email=email)

    contact = store.generate(full_name, email)
    store.write_create(contact)
    return contact
