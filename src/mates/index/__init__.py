"""Flat-file contact index.

This package builds the tab-separated contact index from the contact
directory and queries it through an external line filter.
"""

from .builder import IndexBuildResult, append_to_index, build_index, index_entries_for
from .query import IndexQueryEngine

__all__ = [
    "IndexBuildResult",
    "IndexQueryEngine",
    "append_to_index",
    "build_index",
    "index_entries_for",
]
