"""Navigation tree extraction (table of contents, landmarks, page list).

Each target walks an ordered chain of navigation sources and takes the
first one that carries the matching structure:

    toc        NavDocument <nav epub:type="toc">        -> NcxDocument <navMap>
    page-list  NavDocument <nav epub:type="page-list">  -> NcxDocument <pageList>
    landmarks  NavDocument <nav epub:type="landmarks">  -> GuideSource <guide>

No source at all yields an empty forest. Hrefs resolve against the
directory of the document that declares them; a link that does not resolve
to an archive entry loses its href but keeps its title and children.
"""

from __future__ import annotations

from enum import Enum

from lxml import etree

from epubinspect.archive import ArchiveReaderBase
from epubinspect.errors import MalformedReferenceError
from epubinspect.logging import get_logger
from epubinspect.schemas.epub import EpubTocEntry
from epubinspect.services.epub_package import (
    EpubPackage,
    GuideSource,
    NavDocument,
    NavigationSource,
    NcxDocument,
)
from epubinspect.services.hrefs import resolve_href
from epubinspect.services.markup import (
    children,
    descendants,
    epub_type,
    find_path,
    first_child,
    first_descendant,
    local_name,
    text_content,
)

logger = get_logger(__name__)


class NavTarget(str, Enum):
    """Navigation structures, valued by their EPUB 3 epub:type."""

    TOC = "toc"
    LANDMARKS = "landmarks"
    PAGE_LIST = "page-list"


# NCX container element and item element per target
_NCX_STRUCTURES: dict[NavTarget, tuple[str, str]] = {
    NavTarget.TOC: ("navMap", "navPoint"),
    NavTarget.PAGE_LIST: ("pageList", "pageTarget"),
}


def navigation_sources(package: EpubPackage, target: NavTarget) -> list[NavigationSource]:
    """Candidate sources for a target, in fallback order."""
    sources: list[NavigationSource] = []
    if package.nav_document is not None:
        sources.append(package.nav_document)
    if target is NavTarget.LANDMARKS:
        if package.guide is not None:
            sources.append(package.guide)
    elif package.ncx_document is not None:
        sources.append(package.ncx_document)
    return sources


def extract_navigation(package: EpubPackage, target: NavTarget) -> list[EpubTocEntry]:
    for source in navigation_sources(package, target):
        entries = _extract_from_source(source, target, package.archive)
        if entries is not None:
            return entries
    return []


def get_toc(package: EpubPackage) -> list[EpubTocEntry]:
    return extract_navigation(package, NavTarget.TOC)


def get_landmarks(package: EpubPackage) -> list[EpubTocEntry]:
    return extract_navigation(package, NavTarget.LANDMARKS)


def get_page_list(package: EpubPackage) -> list[EpubTocEntry]:
    return extract_navigation(package, NavTarget.PAGE_LIST)


def _extract_from_source(
    source: NavigationSource,
    target: NavTarget,
    archive: ArchiveReaderBase,
) -> list[EpubTocEntry] | None:
    """Entries from one source, or None when it lacks the target structure."""
    if isinstance(source, NavDocument):
        return _process_nav(source, target, archive)
    if isinstance(source, NcxDocument):
        return _process_ncx(source, target, archive)
    if isinstance(source, GuideSource):
        return _process_guide(source, archive)
    raise TypeError(f"Unknown navigation source: {source!r}")


# ---------------------------------------------------------------------------
# EPUB 3 navigation document
# ---------------------------------------------------------------------------


def _process_nav(
    doc: NavDocument,
    target: NavTarget,
    archive: ArchiveReaderBase,
) -> list[EpubTocEntry] | None:
    nav = next((n for n in descendants(doc.root, "nav") if target.value in epub_type(n)), None)
    if nav is None:
        return None
    ol = first_descendant(nav, "ol")
    if ol is None:
        return []
    return _walk_nav_ol(ol, doc.base_dir, archive)


def _walk_nav_ol(
    ol: etree._Element,
    base_dir: str,
    archive: ArchiveReaderBase,
) -> list[EpubTocEntry]:
    entries: list[EpubTocEntry] = []
    for li in children(ol, "li"):
        label_el = next((c for c in li if local_name(c) in ("a", "span")), None)
        anchor = first_child(li, "a")
        nested = first_child(li, "ol")
        title = text_content(label_el) if label_el is not None else ""
        if not title:
            # bare <li>text<ol>...</ol></li>
            title = text_content(li, exclude=("ol",))
        entries.append(
            EpubTocEntry(
                title=title,
                href=_resolve_target(base_dir, anchor.get("href"), archive)
                if anchor is not None
                else None,
                children=_walk_nav_ol(nested, base_dir, archive) if nested is not None else [],
            )
        )
    return entries


# ---------------------------------------------------------------------------
# EPUB 2 NCX
# ---------------------------------------------------------------------------


def _process_ncx(
    doc: NcxDocument,
    target: NavTarget,
    archive: ArchiveReaderBase,
) -> list[EpubTocEntry] | None:
    structure = _NCX_STRUCTURES.get(target)
    if structure is None:
        return None
    container_name, item_name = structure
    container = first_child(doc.root, container_name)
    if container is None:
        return None
    return _walk_ncx(container, item_name, doc.base_dir, archive)


def _walk_ncx(
    parent: etree._Element,
    item_name: str,
    base_dir: str,
    archive: ArchiveReaderBase,
) -> list[EpubTocEntry]:
    entries: list[EpubTocEntry] = []
    for el in children(parent, item_name):
        label = find_path(el, "navLabel", "text")
        content = first_child(el, "content")
        entries.append(
            EpubTocEntry(
                title=text_content(label) if label is not None else "",
                href=_resolve_target(base_dir, content.get("src"), archive)
                if content is not None
                else None,
                children=_walk_ncx(el, item_name, base_dir, archive),
            )
        )
    return entries


# ---------------------------------------------------------------------------
# EPUB 2 OPF guide
# ---------------------------------------------------------------------------


def _process_guide(guide: GuideSource, archive: ArchiveReaderBase) -> list[EpubTocEntry]:
    return [
        EpubTocEntry(
            title=(ref.get("title") or "").strip(),
            href=_resolve_target(guide.base_dir, ref.get("href"), archive),
        )
        for ref in children(guide.root, "reference")
    ]


def _resolve_target(
    base_dir: str,
    href: str | None,
    archive: ArchiveReaderBase,
) -> str | None:
    """Normalize a navigation href; None unless it names an archive entry."""
    if href is None:
        return None
    try:
        target = resolve_href(base_dir, href)
    except MalformedReferenceError as exc:
        logger.info("epub_reference_dropped", href=href, reason=exc.message)
        return None
    if not archive.has_entry(target.path):
        logger.info("epub_reference_dropped", href=href, reason="entry not in archive")
        return None
    return target.href
