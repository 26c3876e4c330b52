"""Data models for mates.

This module contains Pydantic models for data validation and serialization.
"""

from mates.models.index_entry import IndexEntry

__all__ = ["IndexEntry"]
