"""Archive module for random access into EPUB containers.

Provides:
- ArchiveReaderBase, the reader interface the inspector consumes
- ZipArchiveReader for ZIP files on disk or in memory
- FakeArchiveReader for tests and pre-loaded entry maps
"""

from epubinspect.archive.client import (
    SIZE_UNKNOWN,
    ArchiveEntry,
    ArchiveReaderBase,
    FakeArchiveReader,
    ZipArchiveReader,
)

__all__ = [
    "SIZE_UNKNOWN",
    "ArchiveEntry",
    "ArchiveReaderBase",
    "ZipArchiveReader",
    "FakeArchiveReader",
]
