"""Namespace-tolerant lxml helpers for package and navigation documents.

EPUB documents appear with default namespaces, prefixed namespaces and no
namespaces at all, and navigation documents are not always well-formed
XHTML. Elements are therefore matched by local name only.
"""

from __future__ import annotations

import re

from lxml import etree, html

EPUB_OPS_NS = "http://www.idpf.org/2007/ops"

_WS_RE = re.compile(r"\s+")

# Hardened parsers: no entity expansion, no network access
_STRICT_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
_RECOVER_PARSER = etree.XMLParser(
    resolve_entities=False, no_network=True, huge_tree=False, recover=True
)


def parse_xml(raw: bytes) -> etree._Element:
    """Parse a well-formed XML document.

    Raises:
        etree.XMLSyntaxError: If the document is not well-formed.
    """
    return etree.fromstring(raw, parser=_STRICT_PARSER)


def parse_lenient(raw: bytes) -> etree._Element | None:
    """Parse XHTML/XML leniently, falling back to the HTML parser.

    Returns:
        The root element, or None when nothing usable could be parsed.
    """
    try:
        root = etree.fromstring(raw, parser=_RECOVER_PARSER)
    except etree.XMLSyntaxError:
        root = None
    if root is not None and len(root):
        return root
    try:
        return html.document_fromstring(raw)
    except (etree.ParserError, ValueError):
        return root


def local_name(el: etree._Element) -> str:
    tag = el.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def children(el: etree._Element, name: str) -> list[etree._Element]:
    """Direct child elements with the given local name, in document order."""
    return [child for child in el if local_name(child) == name]


def first_child(el: etree._Element, name: str) -> etree._Element | None:
    for child in el:
        if local_name(child) == name:
            return child
    return None


def descendants(el: etree._Element, name: str) -> list[etree._Element]:
    """Descendant elements (excluding `el`) with the given local name."""
    return [d for d in el.iterdescendants() if local_name(d) == name]


def first_descendant(el: etree._Element, name: str) -> etree._Element | None:
    for d in el.iterdescendants():
        if local_name(d) == name:
            return d
    return None


def find_path(el: etree._Element, *names: str) -> etree._Element | None:
    """Follow a chain of direct children, e.g. find_path(root, "metadata", "meta")."""
    current: etree._Element | None = el
    for name in names:
        if current is None:
            return None
        current = first_child(current, name)
    return current


def text_content(el: etree._Element, exclude: tuple[str, ...] = ()) -> str:
    """Concatenated descendant text with whitespace collapsed.

    Child elements whose local name is in `exclude` contribute only their
    tail text.
    """
    if not exclude:
        return _WS_RE.sub(" ", "".join(el.itertext())).strip()
    parts = [el.text or ""]
    for child in el:
        if isinstance(child.tag, str) and local_name(child) not in exclude:
            parts.extend(child.itertext())
        parts.append(child.tail or "")
    return _WS_RE.sub(" ", "".join(parts)).strip()


def epub_type(el: etree._Element) -> list[str]:
    """Tokens of an element's epub:type attribute.

    XML parsing yields the namespaced attribute; the HTML fallback parser
    keeps the literal "epub:type" name.
    """
    value = el.get(f"{{{EPUB_OPS_NS}}}type") or el.get("epub:type") or ""
    return value.split()
