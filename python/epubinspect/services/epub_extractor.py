"""EPUB inspection entrypoints.

Every path-based call opens its own archive reader, builds a fresh package
context and releases the reader on every exit path. No state survives a
call, so calls for different archives can run in parallel.

Failure classification:
- PackageParseError: the package document is unusable; nothing partial is
  returned
- EntryNotFoundError, EntryUnreadableError: only from get_entry_stream();
  elsewhere a missing or corrupt entry is represented as absence
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from epubinspect.archive import ArchiveReaderBase, ZipArchiveReader
from epubinspect.config import Settings, get_settings
from epubinspect.logging import clear_extraction_context, get_logger, set_extraction_context
from epubinspect.schemas.epub import EpubManifest, TypedBytes
from epubinspect.services.epub_cover import resolve_cover
from epubinspect.services.epub_navigation import get_landmarks, get_page_list, get_toc
from epubinspect.services.epub_package import load_package
from epubinspect.services.epub_positions import compute_positions
from epubinspect.services.epub_resources import (
    classify_resources,
    compute_page_count,
    is_fixed_layout,
)

logger = get_logger(__name__)

ArchivePath = str | os.PathLike


@contextmanager
def _extraction_scope(path: ArchivePath, operation: str) -> Iterator[None]:
    set_extraction_context(os.fspath(path), operation)
    try:
        yield
    finally:
        clear_extraction_context()


# ---------------------------------------------------------------------------
# Archive-level operations
# ---------------------------------------------------------------------------


def extract_manifest(
    archive: ArchiveReaderBase,
    settings: Settings | None = None,
) -> EpubManifest:
    """Build the full manifest from an open archive.

    Raises:
        PackageParseError: If the package document cannot be parsed.
        ValueError: If a reflowable page has no known size.
    """
    if settings is None:
        settings = get_settings()

    package = load_package(archive)

    resources = classify_resources(package)
    fixed_layout = is_fixed_layout(package)
    toc = get_toc(package)
    landmarks = get_landmarks(package)
    page_list = get_page_list(package)

    manifest = EpubManifest(
        resources=resources,
        toc=toc,
        landmarks=landmarks,
        page_list=page_list,
        page_count=compute_page_count(package, resources, settings.bytes_per_page),
        is_fixed_layout=fixed_layout,
        positions=compute_positions(resources, fixed_layout, settings.bytes_per_position),
    )
    logger.info(
        "epub_manifest_extracted",
        resource_count=len(manifest.resources),
        toc_count=len(manifest.toc),
        position_count=len(manifest.positions),
        page_count=manifest.page_count,
        fixed_layout=fixed_layout,
    )
    return manifest


def extract_cover(archive: ArchiveReaderBase) -> TypedBytes | None:
    """Cover from an open archive.

    Raises:
        PackageParseError: If the package document cannot be parsed.
    """
    return resolve_cover(load_package(archive))


# ---------------------------------------------------------------------------
# Host-facing operations
# ---------------------------------------------------------------------------


def get_entry_stream(path: ArchivePath, entry_name: str) -> bytes:
    """Read a single entry by exact name.

    Raises:
        EntryNotFoundError: If the entry is absent.
        EntryUnreadableError: If the entry data is corrupt.
    """
    with _extraction_scope(path, "entry_stream"), ZipArchiveReader(path) as archive:
        return archive.read_entry(entry_name)


def get_cover(path: ArchivePath) -> TypedBytes | None:
    """Cover image bytes and media type, or None when the book has none."""
    with _extraction_scope(path, "cover"), ZipArchiveReader(path) as archive:
        return extract_cover(archive)


def get_manifest(path: ArchivePath, settings: Settings | None = None) -> EpubManifest:
    """Resources, navigation, pagination and locators for one EPUB."""
    with _extraction_scope(path, "manifest"), ZipArchiveReader(path) as archive:
        return extract_manifest(archive, settings)
