"""Shared-string table with stable, deduplicated indices."""

from __future__ import annotations

from collections.abc import Iterator

from lxml import etree

from xlcell.core.ns import MAIN_NS, XML_NS, qn

SST_TAG = qn("sst")
SI_TAG = qn("si")
T_TAG = qn("t")
R_TAG = qn("r")


def item_text(si: etree._Element) -> str:
    """Plain text of an ``<si>``; rich-text runs are concatenated, phonetic runs skipped."""
    parts: list[str] = []
    for child in si:
        if child.tag == T_TAG:
            parts.append(child.text or "")
        elif child.tag == R_TAG:
            for t in child.iterchildren(T_TAG):
                parts.append(t.text or "")
    return "".join(parts)


def text_element(text: str) -> etree._Element:
    """Detached ``<t>`` holding *text*.

    Raises ValueError for text XML cannot carry (NUL, most C0 controls),
    before anything has been attached to a part.
    """
    t = etree.Element(T_TAG)
    t.text = text
    if text != text.strip():
        t.set(qn("space", XML_NS), "preserve")
    return t


class SharedStringTable:
    """Wraps an ``<sst>`` element.

    Lookup goes through a ``text -> index`` dict so interning stays O(1);
    items are only ever appended, so indices never move.
    """

    def __init__(self, root: etree._Element | None = None) -> None:
        if root is None:
            root = etree.Element(SST_TAG, nsmap={None: MAIN_NS})
            root.set("count", "0")
            root.set("uniqueCount", "0")
        self.root = root
        self.modified = False
        self._texts: list[str] = [item_text(si) for si in root.iterchildren(SI_TAG)]
        self._index: dict[str, int] = {}
        for i, text in enumerate(self._texts):
            self._index.setdefault(text, i)

    def __len__(self) -> int:
        return len(self._texts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._texts)

    def index_of(self, text: str) -> int | None:
        return self._index.get(text)

    def text_at(self, index: int) -> str:
        if index < 0 or index >= len(self._texts):
            raise IndexError(f"Shared string index out of range: {index}")
        return self._texts[index]

    def intern(self, text: str) -> int:
        """Return the index of *text*, appending it if not yet present."""
        existing = self._index.get(text)
        if existing is not None:
            return existing

        si = self.root.makeelement(SI_TAG, {})
        si.append(text_element(text))
        ext = self.root.find(qn("extLst"))
        if ext is not None:
            ext.addprevious(si)
        else:
            self.root.append(si)

        index = len(self._texts)
        self._texts.append(text)
        self._index[text] = index
        self._update_counts()
        self.modified = True
        return index

    def _update_counts(self) -> None:
        unique = len(self._texts)
        self.root.set("uniqueCount", str(unique))
        try:
            count = int(self.root.get("count", "0"))
        except ValueError:
            count = 0
        if count < unique:
            self.root.set("count", str(unique))


def intern_text(table: SharedStringTable, text: str) -> int:
    """Map *text* to its index in *table*, adding it only if absent."""
    return table.intern(text)
