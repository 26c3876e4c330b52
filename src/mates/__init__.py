"""mates - a vCard address book with a flat search index.

This package stores contacts as individual vCard files, keeps a
tab-separated index of them for fast substring lookups (e.g. from mutt), and
creates new contacts from the sender of an email.
"""

__version__ = "0.1.0"

from mates.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
