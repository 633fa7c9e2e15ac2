"""Inspection services.

This module contains the functions that turn an EPUB archive into the
structures a reading application needs. The host calls the entrypoints in
epub_extractor; the other modules are the independent extraction steps.
"""

from epubinspect.services.epub_extractor import (
    extract_cover,
    extract_manifest,
    get_cover,
    get_entry_stream,
    get_manifest,
)

__all__ = [
    "get_entry_stream",
    "get_cover",
    "get_manifest",
    "extract_cover",
    "extract_manifest",
]
