"""Archive reader abstraction.

Provides a clean interface for random access into an EPUB container:
- Entry listing with compressed and uncompressed sizes
- Entry lookup by exact name
- Byte streams for a single entry

All methods receive the full entry name directly - no path normalization.
Callers normalize hrefs first (see epubinspect.services.hrefs).
"""

import io
import os
import zipfile
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO

from epubinspect.errors import EntryNotFoundError, EntryUnreadableError, PackageParseError

# Sentinel reported by readers that do not know an entry's uncompressed size
SIZE_UNKNOWN = -1


@dataclass(frozen=True)
class ArchiveEntry:
    """Archive entry metadata.

    `size` is the uncompressed size, or SIZE_UNKNOWN.
    """

    name: str
    compressed_size: int
    size: int


class ArchiveReaderBase(ABC):
    """Abstract base class for archive reader implementations.

    Readers are read-only once opened and safe to share across the
    independent extraction steps of a single call.
    """

    _index: dict[str, ArchiveEntry] | None = None

    @abstractmethod
    def list_entries(self) -> list[ArchiveEntry]:
        """List file entries in archive order.

        Returns:
            Entries with their compressed and uncompressed sizes.
        """
        ...

    @abstractmethod
    def open_entry(self, name: str) -> BinaryIO:
        """Open a byte stream for a single entry.

        Args:
            name: Exact entry name.

        Returns:
            Readable binary stream. Caller closes it.

        Raises:
            EntryNotFoundError: If no entry has that name.
            EntryUnreadableError: If the entry data is corrupt.
        """
        ...

    def close(self) -> None:
        """Release the underlying handle. Default is a no-op."""

    def read_entry(self, name: str) -> bytes:
        """Read a whole entry into memory.

        Raises:
            EntryNotFoundError: If no entry has that name.
            EntryUnreadableError: If the entry data is corrupt.
        """
        with self.open_entry(name) as stream:
            return stream.read()

    def get_entry(self, name: str) -> ArchiveEntry | None:
        """Look up entry metadata by name, None on a miss."""
        if self._index is None:
            self._index = {}
            for entry in self.list_entries():
                self._index.setdefault(entry.name, entry)
        return self._index.get(name)

    def has_entry(self, name: str) -> bool:
        return self.get_entry(name) is not None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ZipArchiveReader(ArchiveReaderBase):
    """Archive reader backed by the standard zipfile module."""

    def __init__(self, source: str | os.PathLike | BinaryIO):
        """Open a ZIP container.

        Args:
            source: Filesystem path or seekable binary file object.

        Raises:
            PackageParseError: If the source is not a readable ZIP archive.
        """
        try:
            self._zip = zipfile.ZipFile(source)
        except (zipfile.BadZipFile, OSError) as exc:
            raise PackageParseError(f"Invalid archive: {exc}") from exc

    def list_entries(self) -> list[ArchiveEntry]:
        return [
            ArchiveEntry(
                name=info.filename,
                compressed_size=info.compress_size,
                size=info.file_size,
            )
            for info in self._zip.infolist()
            if not info.is_dir()
        ]

    def open_entry(self, name: str) -> BinaryIO:
        try:
            return self._zip.open(name)
        except KeyError as exc:
            raise EntryNotFoundError(name) from exc
        except (zipfile.BadZipFile, NotImplementedError) as exc:
            raise EntryUnreadableError(name, f"Archive entry unreadable: {name}: {exc}") from exc

    def read_entry(self, name: str) -> bytes:
        # CRC and inflate failures surface while reading, not on open
        with self.open_entry(name) as stream:
            try:
                return stream.read()
            except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
                raise EntryUnreadableError(
                    name, f"Archive entry unreadable: {name}: {exc}"
                ) from exc

    def close(self) -> None:
        self._zip.close()


class FakeArchiveReader(ArchiveReaderBase):
    """In-memory archive reader for testing without real ZIP files.

    Compressed size defaults to the entry's byte length. Entries named in
    `unknown_sizes` report SIZE_UNKNOWN as their uncompressed size, and
    entries named in `unreadable` fail to open as if corrupt.
    """

    def __init__(
        self,
        entries: dict[str, bytes | str] | None = None,
        *,
        compressed_sizes: dict[str, int] | None = None,
        unknown_sizes: set[str] | frozenset[str] = frozenset(),
        unreadable: set[str] | frozenset[str] = frozenset(),
    ):
        self._entries: dict[str, bytes] = {}
        for name, content in (entries or {}).items():
            self._entries[name] = content.encode("utf-8") if isinstance(content, str) else content
        self._compressed_sizes = dict(compressed_sizes or {})
        self._unknown_sizes = frozenset(unknown_sizes)
        self._unreadable = frozenset(unreadable)
        self.closed = False

    def list_entries(self) -> list[ArchiveEntry]:
        return [
            ArchiveEntry(
                name=name,
                compressed_size=self._compressed_sizes.get(name, len(content)),
                size=SIZE_UNKNOWN if name in self._unknown_sizes else len(content),
            )
            for name, content in self._entries.items()
        ]

    def open_entry(self, name: str) -> BinaryIO:
        if name not in self._entries:
            raise EntryNotFoundError(name)
        if name in self._unreadable:
            raise EntryUnreadableError(name)
        return io.BytesIO(self._entries[name])

    def close(self) -> None:
        self.closed = True
