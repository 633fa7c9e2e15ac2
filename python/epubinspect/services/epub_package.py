"""EPUB package loading.

Locates the root package document (OPF) through the container pointer and
builds the per-call package context: manifest, spine, base directory and
lazily-resolved navigation sources.

Only the package document itself is mandatory. Missing navigation and NCX
documents, dangling spine references and malformed manifest hrefs are
normal conditions and are represented as absence.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from functools import cached_property

from lxml import etree

from epubinspect.archive import ArchiveReaderBase
from epubinspect.errors import (
    EntryNotFoundError,
    EntryUnreadableError,
    MalformedReferenceError,
    PackageParseError,
)
from epubinspect.logging import get_logger
from epubinspect.services.hrefs import parent_dir, resolve_href
from epubinspect.services.markup import children, find_path, parse_lenient, parse_xml

logger = get_logger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
OPF_MEDIA_TYPE = "application/oebps-package+xml"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"


@dataclass(frozen=True)
class ManifestItem:
    """A manifest <item>. `href` is kept exactly as declared."""

    id: str
    href: str
    media_type: str
    properties: frozenset[str] = frozenset()


# ---------------------------------------------------------------------------
# Navigation sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NavDocument:
    """EPUB 3 navigation document."""

    path: str
    root: etree._Element

    @property
    def base_dir(self) -> str:
        return parent_dir(self.path)


@dataclass(frozen=True)
class NcxDocument:
    """EPUB 2 NCX document."""

    path: str
    root: etree._Element

    @property
    def base_dir(self) -> str:
        return parent_dir(self.path)


@dataclass(frozen=True)
class GuideSource:
    """EPUB 2 <guide> element of the package document."""

    root: etree._Element
    base_dir: str


NavigationSource = NavDocument | NcxDocument | GuideSource


# ---------------------------------------------------------------------------
# Package context
# ---------------------------------------------------------------------------


@dataclass
class EpubPackage:
    """Parsed package document bound to its open archive.

    Created once per extraction call and discarded when it returns.
    """

    archive: ArchiveReaderBase
    opf_path: str
    opf_root: etree._Element
    manifest: dict[str, ManifestItem] = field(default_factory=dict)
    spine: list[str] = field(default_factory=list)
    spine_toc_id: str | None = None

    @property
    def opf_dir(self) -> str:
        return posixpath.dirname(self.opf_path)

    def resolve(self, item: ManifestItem) -> str | None:
        """Archive entry name for a manifest item, None if malformed."""
        try:
            return resolve_href(self.opf_dir, item.href).path
        except MalformedReferenceError as exc:
            logger.warning(
                "epub_reference_dropped",
                href=item.href,
                item_id=item.id,
                reason=exc.message,
            )
            return None

    def spine_items(self) -> list[ManifestItem]:
        return [self.manifest[idref] for idref in self.spine]

    @cached_property
    def nav_document(self) -> NavDocument | None:
        """The manifest item flagged `nav`, parsed, or None."""
        item = next((i for i in self.manifest.values() if "nav" in i.properties), None)
        if item is None:
            return None
        root, path = self._load_navigation(item)
        if root is None:
            return None
        return NavDocument(path=path, root=root)

    @cached_property
    def ncx_document(self) -> NcxDocument | None:
        """The NCX from spine@toc, else the first NCX-typed manifest item."""
        item = self.manifest.get(self.spine_toc_id) if self.spine_toc_id else None
        if item is None:
            item = next(
                (i for i in self.manifest.values() if i.media_type == NCX_MEDIA_TYPE),
                None,
            )
        if item is None:
            return None
        root, path = self._load_navigation(item)
        if root is None:
            return None
        return NcxDocument(path=path, root=root)

    @cached_property
    def guide(self) -> GuideSource | None:
        guide_el = find_path(self.opf_root, "guide")
        if guide_el is None:
            return None
        return GuideSource(root=guide_el, base_dir=self.opf_dir)

    def _load_navigation(self, item: ManifestItem) -> tuple[etree._Element | None, str]:
        path = self.resolve(item)
        if path is None:
            return None, ""
        try:
            raw = self.archive.read_entry(path)
        except EntryNotFoundError:
            logger.warning("epub_nav_document_missing", path=path, item_id=item.id)
            return None, path
        except EntryUnreadableError as exc:
            logger.warning(
                "epub_nav_document_unreadable",
                path=path,
                item_id=item.id,
                reason=exc.message,
            )
            return None, path
        root = parse_lenient(raw)
        if root is None:
            logger.warning("epub_nav_document_unreadable", path=path, item_id=item.id)
        return root, path


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def find_opf_path(archive: ArchiveReaderBase) -> str:
    """Read the container root-file pointer.

    Raises:
        PackageParseError: If the container document is missing, unparsable
            or names no root file.
    """
    try:
        container = parse_xml(archive.read_entry(CONTAINER_PATH))
    except EntryNotFoundError as exc:
        raise PackageParseError(f"Missing {CONTAINER_PATH}") from exc
    except EntryUnreadableError as exc:
        raise PackageParseError(f"Unreadable {CONTAINER_PATH}: {exc.message}") from exc
    except etree.XMLSyntaxError as exc:
        raise PackageParseError(f"Failed to parse {CONTAINER_PATH}: {exc}") from exc

    rootfiles = [
        rf for rfs in children(container, "rootfiles") for rf in children(rfs, "rootfile")
    ]
    rootfile = next((rf for rf in rootfiles if rf.get("media-type") == OPF_MEDIA_TYPE), None)
    if rootfile is None and rootfiles:
        rootfile = rootfiles[0]
    full_path = rootfile.get("full-path") if rootfile is not None else None
    if not full_path:
        raise PackageParseError("Cannot locate OPF rootfile")

    try:
        return resolve_href("", full_path).path
    except MalformedReferenceError as exc:
        raise PackageParseError(f"Invalid OPF rootfile path: {full_path!r}") from exc


def load_package(archive: ArchiveReaderBase) -> EpubPackage:
    """Locate and parse the package document.

    Raises:
        PackageParseError: If the package document cannot be located or is
            not well-formed XML.
    """
    opf_path = find_opf_path(archive)
    try:
        opf_root = parse_xml(archive.read_entry(opf_path))
    except EntryNotFoundError as exc:
        raise PackageParseError(f"Package document not found: {opf_path}") from exc
    except EntryUnreadableError as exc:
        raise PackageParseError(f"Package document unreadable: {exc.message}") from exc
    except etree.XMLSyntaxError as exc:
        raise PackageParseError(f"Failed to parse OPF: {exc}") from exc

    manifest = _parse_manifest(opf_root)
    spine, spine_toc_id = _parse_spine(opf_root, manifest)

    logger.debug(
        "epub_package_loaded",
        opf_path=opf_path,
        manifest_count=len(manifest),
        spine_count=len(spine),
    )
    return EpubPackage(
        archive=archive,
        opf_path=opf_path,
        opf_root=opf_root,
        manifest=manifest,
        spine=spine,
        spine_toc_id=spine_toc_id,
    )


def _parse_manifest(opf: etree._Element) -> dict[str, ManifestItem]:
    """Return {manifest_id: ManifestItem} in declaration order."""
    result: dict[str, ManifestItem] = {}
    manifest_el = find_path(opf, "manifest")
    if manifest_el is None:
        return result
    for item in children(manifest_el, "item"):
        item_id = item.get("id", "")
        href = item.get("href", "")
        if not item_id or not href:
            continue
        if item_id in result:
            logger.warning("epub_manifest_duplicate_id", item_id=item_id)
            continue
        result[item_id] = ManifestItem(
            id=item_id,
            href=href,
            media_type=item.get("media-type", ""),
            properties=frozenset(item.get("properties", "").split()),
        )
    return result


def _parse_spine(
    opf: etree._Element,
    manifest: dict[str, ManifestItem],
) -> tuple[list[str], str | None]:
    spine_el = find_path(opf, "spine")
    if spine_el is None:
        return [], None
    refs: list[str] = []
    for itemref in children(spine_el, "itemref"):
        idref = itemref.get("idref", "")
        if idref not in manifest:
            logger.info("epub_spine_idref_dangling", idref=idref)
            continue
        refs.append(idref)
    return refs, spine_el.get("toc") or None
