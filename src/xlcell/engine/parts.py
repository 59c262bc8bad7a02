"""Package part helpers: XML (de)serialization, relationships, content types."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterator

from lxml import etree

from xlcell.core.ns import CT_NS, PKG_REL_NS, qn

CONTENT_TYPES_PART = "[Content_Types].xml"
ROOT_RELS_PART = "_rels/.rels"

_RT_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RT_OFFICE_DOCUMENT = f"{_RT_BASE}/officeDocument"
RT_WORKSHEET = f"{_RT_BASE}/worksheet"
RT_SHARED_STRINGS = f"{_RT_BASE}/sharedStrings"

CT_WORKSHEET = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"
CT_SHARED_STRINGS = "application/vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"

_REL_TAG = qn("Relationship", PKG_REL_NS)
_OVERRIDE_TAG = qn("Override", CT_NS)
_RID_RE = re.compile(r"^rId(\d+)$")

# Package parts are trusted no further than any other input file.
_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def parse_xml(data: bytes) -> etree._Element:
    return etree.fromstring(data, _PARSER)


def serialize_xml(root: etree._Element) -> bytes:
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def rels_part_for(part_name: str) -> str:
    """``xl/workbook.xml`` -> ``xl/_rels/workbook.xml.rels``."""
    directory, filename = posixpath.split(part_name)
    return posixpath.join(directory, "_rels", f"{filename}.rels")


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relationship target to a zip member name.

    Targets are either package-absolute (``/xl/worksheets/sheet1.xml``, as
    openpyxl writes them) or relative to the source part's directory.
    """
    if target.startswith("/"):
        return target.lstrip("/")
    base = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base, target))


def relative_target(source_part: str, part_name: str) -> str:
    return posixpath.relpath(part_name, posixpath.dirname(source_part) or ".")


class Relationships:
    """A ``.rels`` part."""

    def __init__(self, root: etree._Element | None = None) -> None:
        if root is None:
            root = etree.Element(qn("Relationships", PKG_REL_NS), nsmap={None: PKG_REL_NS})
        self.root = root

    def __iter__(self) -> Iterator[tuple[str, str, str]]:
        for rel in self.root.iterchildren(_REL_TAG):
            yield rel.get("Id", ""), rel.get("Type", ""), rel.get("Target", "")

    def first_of_type(self, rel_type: str) -> tuple[str, str] | None:
        for rel_id, typ, target in self:
            if typ == rel_type:
                return rel_id, target
        return None

    def add(self, rel_type: str, target: str) -> str:
        """Append a relationship and return its new ``rIdN``."""
        used = [int(m.group(1)) for rel_id, _, _ in self if (m := _RID_RE.match(rel_id))]
        rid = f"rId{max(used, default=0) + 1}"
        etree.SubElement(self.root, _REL_TAG, {"Id": rid, "Type": rel_type, "Target": target})
        return rid


class ContentTypes:
    """The ``[Content_Types].xml`` part."""

    def __init__(self, root: etree._Element) -> None:
        self.root = root

    def override_for(self, part_name: str) -> str | None:
        wanted = "/" + part_name.lstrip("/")
        for el in self.root.iterchildren(_OVERRIDE_TAG):
            if el.get("PartName") == wanted:
                return el.get("ContentType")
        return None

    def add_override(self, part_name: str, content_type: str) -> None:
        if self.override_for(part_name) is not None:
            return
        etree.SubElement(
            self.root,
            _OVERRIDE_TAG,
            {"PartName": "/" + part_name.lstrip("/"), "ContentType": content_type},
        )


def next_part_name(existing: set[str] | dict[str, bytes], pattern: str) -> str:
    """First ``pattern.format(n)`` (n >= 1) not already used in the package."""
    n = 1
    while pattern.format(n) in existing:
        n += 1
    return pattern.format(n)


def insert_in_order(parent: etree._Element, child: etree._Element, predecessors: tuple[str, ...]) -> None:
    """Insert *child* after the last existing sibling named in *predecessors*.

    SpreadsheetML enforces a fixed child order; *predecessors* lists the
    tags that must come before *child*.
    """
    anchor = None
    for el in parent:
        if el.tag in predecessors:
            anchor = el
    if anchor is not None:
        anchor.addnext(child)
    else:
        parent.insert(0, child)
