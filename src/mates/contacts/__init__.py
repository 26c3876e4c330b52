"""Contact storage.

Contacts are vCard files in a single directory (a "vdir"), one contact per
file, named after the contact's UID.
"""

from .store import Contact, ContactStore, generate_unique_id

__all__ = ["Contact", "ContactStore", "generate_unique_id"]
