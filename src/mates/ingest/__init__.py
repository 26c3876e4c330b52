"""Email ingestion: turn the sender of a message into a contact."""

from .sender import add_contact, parse_from_header, read_sender_from_email

__all__ = ["add_contact", "parse_from_header", "read_sender_from_email"]
