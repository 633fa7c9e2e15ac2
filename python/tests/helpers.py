"""EPUB fixture builders for tests.

Provides:
- Package (OPF), navigation (XHTML nav), NCX and chapter document builders
- make_epub(): a real ZIP container in memory
- make_archive(): the same files behind a FakeArchiveReader

All fixtures are built in-memory (no files on disk, no network).
"""

import io
import zipfile

from epubinspect.archive import FakeArchiveReader

CONTAINER_PATH = "META-INF/container.xml"

_CONTAINER_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<container xmlns="urn:oasis:names:tc:opendocument:xmlns:container" version="1.0">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>"""

XHTML = "application/xhtml+xml"
NCX = "application/x-dtbncx+xml"


def build_container(opf_path: str = "OEBPS/content.opf") -> str:
    return _CONTAINER_XML.format(opf_path=opf_path)


def build_opf(
    items: list[tuple],
    *,
    spine: list[str] | None = None,
    toc_id: str | None = None,
    metadata: str = "",
    guide: list[tuple[str, str, str]] | None = None,
    version: str = "3.0",
) -> str:
    """Build an OPF package document.

    items: [(manifest_id, href, media_type[, properties]), ...]
    spine: manifest ids in reading order; defaults to every XHTML item
    guide: [(type, title, href), ...]
    """
    manifest_lines = []
    for item in items:
        mid, href, mtype = item[:3]
        props = f' properties="{item[3]}"' if len(item) > 3 and item[3] else ""
        manifest_lines.append(f'    <item id="{mid}" href="{href}" media-type="{mtype}"{props}/>')

    if spine is None:
        spine = [item[0] for item in items if item[2] == XHTML and "nav" not in item[3:]]
    spine_refs = "\n".join(f'    <itemref idref="{idref}"/>' for idref in spine)
    toc_attr = f' toc="{toc_id}"' if toc_id else ""

    guide_xml = ""
    if guide is not None:
        refs = "\n".join(
            f'    <reference type="{rtype}" title="{title}" href="{href}"/>'
            for rtype, title, href in guide
        )
        guide_xml = f"  <guide>\n{refs}\n  </guide>"

    return f"""\
<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf"
         xmlns:dc="http://purl.org/dc/elements/1.1/"
         version="{version}">
  <metadata>
    <dc:title>Test Book</dc:title>
{metadata}
  </metadata>
  <manifest>
{chr(10).join(manifest_lines)}
  </manifest>
  <spine{toc_attr}>
{spine_refs}
  </spine>
{guide_xml}
</package>"""


def build_chapter_xhtml(body_content: str = "<p>Text.</p>") -> str:
    return f"""\
<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Chapter</title></head>
<body>
{body_content}
</body>
</html>"""


def _nav_ol(entries: list[tuple[str, str]]) -> str:
    return "\n".join(f'      <li><a href="{href}">{label}</a></li>' for label, href in entries)


def build_nav(
    toc: list[tuple[str, str]] | None = None,
    *,
    landmarks: list[tuple[str, str]] | None = None,
    page_list: list[tuple[str, str]] | None = None,
    toc_body: str | None = None,
) -> str:
    """Build an EPUB 3 navigation document.

    toc/landmarks/page_list: [(label, href), ...]; None omits that <nav>.
    toc_body: raw <ol> markup overriding `toc`.
    """
    navs = []
    if toc is not None or toc_body is not None:
        body = toc_body if toc_body is not None else f"<ol>\n{_nav_ol(toc or [])}\n    </ol>"
        navs.append(f'  <nav epub:type="toc">\n    {body}\n  </nav>')
    if landmarks is not None:
        navs.append(f'  <nav epub:type="landmarks">\n    <ol>\n{_nav_ol(landmarks)}\n    </ol>\n  </nav>')
    if page_list is not None:
        navs.append(f'  <nav epub:type="page-list">\n    <ol>\n{_nav_ol(page_list)}\n    </ol>\n  </nav>')
    return f"""\
<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head><title>Navigation</title></head>
<body>
{chr(10).join(navs)}
</body>
</html>"""


def _nav_points(entries: list[tuple], tag: str) -> str:
    points = []
    for i, entry in enumerate(entries):
        nid, label, src = entry[:3]
        nested = _nav_points(entry[3], tag) if len(entry) > 3 else ""
        points.append(
            f'<{tag} id="{nid}" playOrder="{i + 1}">'
            f"<navLabel><text>{label}</text></navLabel>"
            f'<content src="{src}"/>{nested}</{tag}>'
        )
    return "\n".join(points)


def build_ncx(
    entries: list[tuple],
    *,
    page_targets: list[tuple[str, str, str]] | None = None,
) -> str:
    """Build an NCX document.

    entries: [(nav_id, label, src[, [children...]]), ...]
    page_targets: [(id, label, src), ...]; None omits <pageList>.
    """
    page_list = ""
    if page_targets is not None:
        page_list = f"  <pageList>\n{_nav_points(page_targets, 'pageTarget')}\n  </pageList>"
    return f"""\
<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <navMap>
{_nav_points(entries, 'navPoint')}
  </navMap>
{page_list}
</ncx>"""


def make_epub(
    files: dict[str, str | bytes],
    opf_path: str = "OEBPS/content.opf",
    compression: int = zipfile.ZIP_DEFLATED,
) -> bytes:
    """Build an EPUB ZIP in memory."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression) as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        zf.writestr(CONTAINER_PATH, build_container(opf_path))
        for path, content in files.items():
            zf.writestr(path, content)
    return buf.getvalue()


def make_archive(
    files: dict[str, str | bytes],
    opf_path: str = "OEBPS/content.opf",
    **kwargs,
) -> FakeArchiveReader:
    """Same layout as make_epub() behind a FakeArchiveReader."""
    entries: dict[str, str | bytes] = {
        "mimetype": "application/epub+zip",
        CONTAINER_PATH: build_container(opf_path),
    }
    entries.update(files)
    return FakeArchiveReader(entries, **kwargs)


def corrupt_stored_entry(data: bytes, marker: bytes = b"corrupt-me") -> bytes:
    """Damage the payload of a ZIP_STORED entry containing `marker`.

    The marker is upper-cased in place, so sizes still match but the entry's
    CRC-32 no longer does.
    """
    assert data.count(marker) == 1, "marker must occur exactly once"
    return data.replace(marker, marker.upper())
