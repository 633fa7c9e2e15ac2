"""Resource classification and package-level layout facts.

- classify_resources(): spine pages then manifest-only assets, with sizes
- is_fixed_layout(): rendition:layout == "pre-paginated"
- compute_page_count(): 1KB-per-page estimate over the spine
"""

from __future__ import annotations

import math

from epubinspect.archive import SIZE_UNKNOWN
from epubinspect.logging import get_logger
from epubinspect.schemas.epub import MediaFile, MediaSubType
from epubinspect.services.epub_package import EpubPackage, ManifestItem
from epubinspect.services.markup import children, find_path

logger = get_logger(__name__)

DEFAULT_BYTES_PER_PAGE = 1024

FIXED_LAYOUT_VALUE = "pre-paginated"
_LAYOUT_PROPERTIES = frozenset({"rendition:layout", "layout"})


def classify_resources(package: EpubPackage) -> list[MediaFile]:
    """Partition the manifest into reading-order pages and assets.

    Pages keep spine order (duplicates included), assets keep manifest
    order. Items whose entry is missing from the archive are dropped.
    """
    spine_ids = set(package.spine)
    tagged: list[tuple[ManifestItem, MediaSubType]] = [
        (item, MediaSubType.PAGE) for item in package.spine_items()
    ]
    tagged.extend(
        (item, MediaSubType.ASSET)
        for item in package.manifest.values()
        if item.id not in spine_ids
    )

    resources: list[MediaFile] = []
    for item, sub_type in tagged:
        path = package.resolve(item)
        if path is None:
            continue
        entry = package.archive.get_entry(path)
        if entry is None:
            logger.warning("epub_resource_missing", path=path, item_id=item.id)
            continue
        resources.append(
            MediaFile(
                file_name=path,
                media_type=item.media_type,
                sub_type=sub_type,
                file_size=None if entry.size == SIZE_UNKNOWN else entry.size,
            )
        )
    return resources


def is_fixed_layout(package: EpubPackage) -> bool:
    metadata = find_path(package.opf_root, "metadata")
    if metadata is None:
        return False
    for meta in children(metadata, "meta"):
        if meta.get("property") in _LAYOUT_PROPERTIES:
            return (meta.text or "").strip() == FIXED_LAYOUT_VALUE
    return False


def compute_page_count(
    package: EpubPackage,
    resources: list[MediaFile],
    bytes_per_page: int = DEFAULT_BYTES_PER_PAGE,
) -> int:
    """Sum ceil(compressed_size / bytes_per_page) over distinct spine entries.

    Assets never count. A page whose entry cannot be found contributes 0.
    """
    page_names = {r.file_name for r in resources if r.sub_type is MediaSubType.PAGE}
    total = 0
    for name in page_names:
        entry = package.archive.get_entry(name)
        if entry is None:
            continue
        total += math.ceil(entry.compressed_size / bytes_per_page)
    return total
