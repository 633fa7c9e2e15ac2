"""Cover image lookup.

Preference order:
1. EPUB 3: first manifest item with the `cover-image` property
2. EPUB 2: <meta name="cover" content="{manifest id}"> in the metadata
"""

from __future__ import annotations

from epubinspect.errors import EntryNotFoundError, EntryUnreadableError
from epubinspect.logging import get_logger
from epubinspect.schemas.epub import TypedBytes
from epubinspect.services.epub_package import EpubPackage, ManifestItem
from epubinspect.services.markup import children, find_path

logger = get_logger(__name__)

COVER_IMAGE_PROPERTY = "cover-image"


def find_cover_item(package: EpubPackage) -> ManifestItem | None:
    for item in package.manifest.values():
        if COVER_IMAGE_PROPERTY in item.properties:
            return item

    metadata = find_path(package.opf_root, "metadata")
    if metadata is None:
        return None
    meta = next((m for m in children(metadata, "meta") if m.get("name") == "cover"), None)
    if meta is None:
        return None
    cover_id = (meta.get("content") or "").strip()
    if not cover_id:
        return None
    return package.manifest.get(cover_id)


def resolve_cover(package: EpubPackage) -> TypedBytes | None:
    """Cover bytes with their declared media type, None when absent."""
    item = find_cover_item(package)
    if item is None:
        return None
    path = package.resolve(item)
    if path is None:
        return None
    try:
        content = package.archive.read_entry(path)
    except EntryNotFoundError:
        logger.warning("epub_cover_missing", path=path, item_id=item.id)
        return None
    except EntryUnreadableError as exc:
        logger.warning("epub_cover_unreadable", path=path, item_id=item.id, reason=exc.message)
        return None
    return TypedBytes(content=content, media_type=item.media_type)
