"""Href normalization for references found inside an EPUB package.

Turns an href declared in a package, navigation or NCX document into a
canonical archive entry name:
- Backslashes are treated as path separators
- The #fragment is split off before percent-decoding the path
- A leading "/" means relative to the archive root
- "." and ".." segments are collapsed
- No leading slash in the result

The entry path and the fragment stay separate in HrefTarget, since a
decoded path may itself contain "#" (from "%23"). No existence check
happens here; the archive layer reports misses.
"""

import posixpath
from typing import NamedTuple
from urllib.parse import unquote, urlsplit

from epubinspect.errors import MalformedReferenceError


class HrefTarget(NamedTuple):
    """A resolved reference: archive entry name plus optional fragment."""

    path: str
    fragment: str = ""

    @property
    def href(self) -> str:
        """Display form, with the fragment re-attached when present."""
        if self.fragment:
            return f"{self.path}#{self.fragment}"
        return self.path


def resolve_href(base_dir: str, href: str | None) -> HrefTarget:
    """Resolve an href against a directory inside the archive.

    Args:
        base_dir: Directory of the document declaring the href ("" for root).
        href: The href as declared, possibly percent-encoded and relative.

    Returns:
        The canonical entry path and the (undecoded) fragment.

    Raises:
        MalformedReferenceError: If the href is empty, carries a URL scheme
            or host, or climbs above the archive root.

    Example:
        >>> resolve_href("OEBPS/text", "../images/cover.jpg#top")
        HrefTarget(path='OEBPS/images/cover.jpg', fragment='top')
    """
    if href is None or not href.strip():
        raise MalformedReferenceError(href, "Empty reference")

    raw = href.strip().replace("\\", "/")
    parts = urlsplit(raw)
    if parts.scheme or parts.netloc:
        raise MalformedReferenceError(href, f"External reference: {href!r}")

    path = unquote(parts.path)
    if not path:
        raise MalformedReferenceError(href, f"Reference has no path: {href!r}")

    if path.startswith("/"):
        joined = path.lstrip("/")
    elif base_dir:
        joined = posixpath.join(base_dir.strip("/"), path)
    else:
        joined = path

    normalized = posixpath.normpath(joined)
    if normalized in (".", "..") or normalized.startswith("../"):
        raise MalformedReferenceError(href, f"Reference escapes archive root: {href!r}")

    return HrefTarget(normalized, parts.fragment)


def parent_dir(path: str) -> str:
    """Directory part of an entry name ("" at the archive root)."""
    return posixpath.dirname(path)
