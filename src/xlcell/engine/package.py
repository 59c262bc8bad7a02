"""SpreadsheetPackage: opens an .xlsx zip and exposes its parts for mutation."""

from __future__ import annotations

import posixpath
import zipfile
from io import BytesIO
from pathlib import Path

from lxml import etree
from openpyxl import Workbook

from xlcell.contracts.common import (
    NotWritableError,
    SheetNotFoundError,
    WorkbookCorruptError,
)
from xlcell.contracts.responses import SheetMeta, WorkbookMeta
from xlcell.core.address import CellAddress, index_to_column_letters, parse_address
from xlcell.core.ns import MAIN_NS, REL_NS, qn
from xlcell.core.rows import addressed_cells, numbered_rows
from xlcell.core.sharedstrings import SharedStringTable
from xlcell.engine.parts import (
    CONTENT_TYPES_PART,
    CT_SHARED_STRINGS,
    CT_WORKSHEET,
    ROOT_RELS_PART,
    RT_OFFICE_DOCUMENT,
    RT_SHARED_STRINGS,
    RT_WORKSHEET,
    ContentTypes,
    Relationships,
    insert_in_order,
    next_part_name,
    parse_xml,
    relative_target,
    rels_part_for,
    resolve_target,
    serialize_xml,
)
from xlcell.io.fileops import atomic_write, fingerprint
from xlcell.observe.events import EventEmitter

_SHEET_DATA_PREDECESSORS = tuple(
    qn(t) for t in ("sheetPr", "dimension", "sheetViews", "sheetFormatPr", "cols")
)
_DIMENSION_PREDECESSORS = (qn("sheetPr"),)
_SHEETS_PREDECESSORS = tuple(
    qn(t) for t in ("fileVersion", "fileSharing", "workbookPr", "workbookProtection", "bookViews")
)

MAX_SHEET_TITLE = 31
_INVALID_TITLE_CHARS = frozenset("[]:*?/\\")


def validate_sheet_title(name: str) -> str:
    """Return *name* if Excel accepts it as a sheet title, else raise ValueError."""
    if not name:
        raise ValueError("Sheet name must not be empty")
    if len(name) > MAX_SHEET_TITLE:
        raise ValueError(f"Sheet name '{name}' is longer than {MAX_SHEET_TITLE} characters")
    bad = sorted(_INVALID_TITLE_CHARS.intersection(name))
    if bad:
        raise ValueError(f"Sheet name '{name}' contains invalid characters: {''.join(bad)}")
    if name.startswith("'") or name.endswith("'"):
        raise ValueError(f"Sheet name '{name}' must not begin or end with an apostrophe")
    return name


class Worksheet:
    """One ``<worksheet>`` part and its ``<sheet>`` entry in the workbook."""

    def __init__(self, name: str, sheet_id: int, part_name: str, root: etree._Element, *, state: str = "visible") -> None:
        self.name = name
        self.sheet_id = sheet_id
        self.part_name = part_name
        self.root = root
        self.state = state
        self.modified = False

    def __repr__(self) -> str:
        return f"Worksheet(name={self.name!r}, sheet_id={self.sheet_id}, part={self.part_name!r})"

    @property
    def sheet_data(self) -> etree._Element:
        sheet_data = self.root.find(qn("sheetData"))
        if sheet_data is None:
            sheet_data = self.root.makeelement(qn("sheetData"), {})
            insert_in_order(self.root, sheet_data, _SHEET_DATA_PREDECESSORS)
            self.modified = True
        return sheet_data

    def rows(self) -> list[tuple[int, etree._Element]]:
        sheet_data = self.root.find(qn("sheetData"))
        if sheet_data is None:
            return []
        return list(numbered_rows(sheet_data))

    def find_row(self, row_index: int) -> etree._Element | None:
        for number, row in self.rows():
            if number == row_index:
                return row
        return None

    def find_cell(self, address: str | CellAddress) -> etree._Element | None:
        addr = address if isinstance(address, CellAddress) else parse_address(address)
        row = self.find_row(addr.row)
        if row is None:
            return None
        for cell_addr, cell in addressed_cells(row, addr.row):
            if cell_addr == addr:
                return cell
        return None

    def used_range(self) -> str | None:
        """Bounding box of all cells, e.g. ``A1:C5``; ``None`` for an empty sheet."""
        min_col = min_row = max_col = max_row = None
        for number, row in self.rows():
            for addr, _ in addressed_cells(row, number):
                col = addr.column_index
                min_col = col if min_col is None else min(min_col, col)
                max_col = col if max_col is None else max(max_col, col)
                min_row = number if min_row is None else min(min_row, number)
                max_row = number if max_row is None else max(max_row, number)
        if min_col is None:
            return None
        start = f"{index_to_column_letters(min_col)}{min_row}"
        end = f"{index_to_column_letters(max_col)}{max_row}"
        return start if start == end else f"{start}:{end}"

    def refresh_dimension(self) -> None:
        """Keep ``<dimension ref>`` in sync with the cells present."""
        ref = self.used_range() or "A1"
        dim = self.root.find(qn("dimension"))
        if dim is None:
            dim = self.root.makeelement(qn("dimension"), {})
            insert_in_order(self.root, dim, _DIMENSION_PREDECESSORS)
        if dim.get("ref") != ref:
            dim.set("ref", ref)
            self.modified = True


class SpreadsheetPackage:
    """Wraps an OOXML spreadsheet package with part-level access.

    Use as a context manager: on a clean exit an ``autosave`` package with
    pending changes is saved; the package is closed on every exit path.
    """

    @classmethod
    def create(
        cls,
        path: str | Path,
        *,
        sheets: list[str] | None = None,
        overwrite: bool = False,
        events: EventEmitter | None = None,
    ) -> "SpreadsheetPackage":
        """Create a new workbook file and open it read-write.

        Raises FileExistsError if path exists and *overwrite* is false.
        """
        p = Path(path).resolve()
        if p.exists() and not overwrite:
            raise FileExistsError(f"File already exists: {p}")
        names = [validate_sheet_title(n) for n in sheets or ["Sheet1"]]
        if len({n.casefold() for n in names}) != len(names):
            raise ValueError(f"Duplicate sheet names: {', '.join(names)}")
        wb = Workbook()
        wb.active.title = names[0]
        for name in names[1:]:
            wb.create_sheet(name)
        buf = BytesIO()
        wb.save(buf)
        wb.close()
        atomic_write(p, buf.getvalue())
        return cls(p, read_write=True, events=events)

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        read_write: bool = False,
        autosave: bool = False,
        events: EventEmitter | None = None,
    ) -> "SpreadsheetPackage":
        return cls(path, read_write=read_write, autosave=autosave, events=events)

    def __init__(
        self,
        path: str | Path,
        *,
        read_write: bool = False,
        autosave: bool = False,
        events: EventEmitter | None = None,
    ) -> None:
        self.path = Path(path).resolve()
        if not self.path.exists():
            raise FileNotFoundError(f"Workbook not found: {self.path}")
        self.read_write = read_write
        self.autosave = autosave
        self.events = events or EventEmitter()
        self.closed = False
        self.fp = fingerprint(self.path)
        try:
            with zipfile.ZipFile(self.path) as zf:
                self._parts: dict[str, bytes] = {
                    info.filename: zf.read(info.filename)
                    for info in zf.infolist()
                    if not info.is_dir()
                }
            self._load()
        except (zipfile.BadZipFile, KeyError, ValueError, etree.XMLSyntaxError) as e:
            raise WorkbookCorruptError(f"Cannot open workbook {self.path}: {e}") from e
        self.events.emit("package.opened", {"path": str(self.path), "read_write": read_write})

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------
    def _load(self) -> None:
        self._dirty: set[str] = set()
        self._content_types = ContentTypes(parse_xml(self._parts[CONTENT_TYPES_PART]))

        root_rels = Relationships(parse_xml(self._parts[ROOT_RELS_PART]))
        office_doc = root_rels.first_of_type(RT_OFFICE_DOCUMENT)
        if office_doc is None:
            raise ValueError("package has no officeDocument relationship")
        self._workbook_part = resolve_target("", office_doc[1])
        self._workbook = parse_xml(self._parts[self._workbook_part])

        self._rels_part = rels_part_for(self._workbook_part)
        if self._rels_part in self._parts:
            self._rels = Relationships(parse_xml(self._parts[self._rels_part]))
        else:
            self._rels = Relationships()

        rels_by_id = {rel_id: (typ, target) for rel_id, typ, target in self._rels}
        self._worksheets: dict[str, Worksheet] = {}
        for sheet in self._sheet_elements():
            rel_type, target = rels_by_id.get(sheet.get(qn("id", REL_NS), ""), ("", ""))
            if rel_type != RT_WORKSHEET:
                continue  # chartsheet, dialogsheet or dangling entry
            part_name = resolve_target(self._workbook_part, target)
            name = sheet.get("name", "")
            self._worksheets[name] = Worksheet(
                name,
                int(sheet.get("sheetId", "0")),
                part_name,
                parse_xml(self._parts[part_name]),
                state=sheet.get("state", "visible"),
            )

        self._sst: SharedStringTable | None = None
        self._sst_part: str | None = None
        sst_rel = self._rels.first_of_type(RT_SHARED_STRINGS)
        if sst_rel is not None:
            self._sst_part = resolve_target(self._workbook_part, sst_rel[1])
            if self._sst_part in self._parts:
                self._sst = SharedStringTable(parse_xml(self._parts[self._sst_part]))

    def _sheets_element(self, *, create: bool = False) -> etree._Element | None:
        sheets = self._workbook.find(qn("sheets"))
        if sheets is None and create:
            sheets = self._workbook.makeelement(qn("sheets"), {})
            insert_in_order(self._workbook, sheets, _SHEETS_PREDECESSORS)
        return sheets

    def _sheet_elements(self) -> list[etree._Element]:
        sheets = self._sheets_element()
        return [] if sheets is None else list(sheets.iterchildren(qn("sheet")))

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError(f"Workbook is closed: {self.path}")

    # ------------------------------------------------------------------
    # sheets
    # ------------------------------------------------------------------
    def sheet_names(self) -> list[str]:
        return [s.get("name", "") for s in self._sheet_elements()]

    def worksheets(self) -> list[Worksheet]:
        return [self._worksheets[n] for n in self.sheet_names() if n in self._worksheets]

    def find_sheet(self, name: str) -> Worksheet | None:
        """Return the worksheet called *name*, or ``None`` if there is none.

        Sheet names compare case-insensitively, as in Excel.
        """
        ws = self._worksheets.get(name)
        if ws is not None:
            return ws
        folded = name.casefold()
        for title, candidate in self._worksheets.items():
            if title.casefold() == folded:
                return candidate
        return None

    def get_sheet(self, name: str) -> Worksheet:
        ws = self.find_sheet(name)
        if ws is None:
            raise SheetNotFoundError(name)
        return ws

    def get_or_create_worksheet(self, name: str | None = None) -> Worksheet:
        """Return the named worksheet, adding a new one if it does not exist.

        New sheets get ``sheetId = max(existing) + 1`` and, without a name,
        the title ``Sheet<id>``.
        """
        self._check_open()
        if name is not None:
            existing = self.find_sheet(name)
            if existing is not None:
                return existing
            taken = {n.casefold() for n in self.sheet_names()}
            if name.casefold() in taken:
                raise ValueError(f"Sheet '{name}' exists but is not a worksheet")
            validate_sheet_title(name)

        ids = [int(s.get("sheetId", "0")) for s in self._sheet_elements()]
        sheet_id = max(ids, default=0) + 1
        if name is None:
            taken = {n.casefold() for n in self.sheet_names()}
            while f"sheet{sheet_id}" in taken:
                sheet_id += 1
            name = f"Sheet{sheet_id}"

        part_name = next_part_name(self._parts, "xl/worksheets/sheet{}.xml")
        root = etree.Element(qn("worksheet"), nsmap={None: MAIN_NS, "r": REL_NS})
        etree.SubElement(root, qn("sheetData"))

        rid = self._rels.add(RT_WORKSHEET, relative_target(self._workbook_part, part_name))
        self._content_types.add_override(part_name, CT_WORKSHEET)
        sheets = self._sheets_element(create=True)
        etree.SubElement(
            sheets,
            qn("sheet"),
            {"name": name, "sheetId": str(sheet_id), qn("id", REL_NS): rid},
        )

        ws = Worksheet(name, sheet_id, part_name, root)
        ws.modified = True
        self._worksheets[name] = ws
        self._parts[part_name] = b""
        self._dirty.update({self._workbook_part, self._rels_part, CONTENT_TYPES_PART})
        self.events.emit("sheet.created", {"name": name, "sheet_id": sheet_id, "part": part_name})
        return ws

    # ------------------------------------------------------------------
    # shared strings
    # ------------------------------------------------------------------
    def find_shared_strings(self) -> SharedStringTable | None:
        return self._sst

    def shared_strings(self) -> SharedStringTable:
        """Return the shared-string table, adding the part if the package has none."""
        if self._sst is not None:
            return self._sst
        self._check_open()
        if self._sst_part is None:
            self._sst_part = posixpath.join(posixpath.dirname(self._workbook_part), "sharedStrings.xml")
            if self._sst_part in self._parts:
                self._sst_part = next_part_name(self._parts, "xl/sharedStrings{}.xml")
            self._rels.add(RT_SHARED_STRINGS, relative_target(self._workbook_part, self._sst_part))
            self._dirty.add(self._rels_part)
        self._content_types.add_override(self._sst_part, CT_SHARED_STRINGS)
        self._dirty.add(CONTENT_TYPES_PART)
        self._sst = SharedStringTable()
        self._sst.modified = True
        self._parts.setdefault(self._sst_part, b"")
        return self._sst

    # ------------------------------------------------------------------
    # metadata
    # ------------------------------------------------------------------
    def get_workbook_meta(self) -> WorkbookMeta:
        sheets: list[SheetMeta] = []
        for idx, el in enumerate(self._sheet_elements()):
            name = el.get("name", "")
            ws = self._worksheets.get(name)
            sheets.append(SheetMeta(
                name=name,
                index=idx,
                sheet_id=int(el.get("sheetId", "0")),
                visible=el.get("state", "visible"),
                used_range=ws.used_range() if ws is not None else None,
            ))
        return WorkbookMeta(
            path=str(self.path),
            fingerprint=self.fp,
            writable=self.read_write,
            sheets=sheets,
            shared_string_count=len(self._sst) if self._sst is not None else 0,
        )

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------
    @property
    def dirty(self) -> bool:
        return bool(
            self._dirty
            or any(ws.modified for ws in self._worksheets.values())
            or (self._sst is not None and self._sst.modified)
        )

    def _flush(self) -> None:
        if CONTENT_TYPES_PART in self._dirty:
            self._parts[CONTENT_TYPES_PART] = serialize_xml(self._content_types.root)
        if self._workbook_part in self._dirty:
            self._parts[self._workbook_part] = serialize_xml(self._workbook)
        if self._rels_part in self._dirty:
            self._parts[self._rels_part] = serialize_xml(self._rels.root)
        for ws in self._worksheets.values():
            if ws.modified:
                self._parts[ws.part_name] = serialize_xml(ws.root)
                ws.modified = False
        if self._sst is not None and self._sst.modified:
            self._parts[self._sst_part] = serialize_xml(self._sst.root)
            self._sst.modified = False
        self._dirty.clear()

    def to_bytes(self) -> bytes:
        """Serialize the package, including pending changes, to zip bytes."""
        self._check_open()
        self._flush()
        buf = BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, data in self._parts.items():
                zf.writestr(name, data)
        return buf.getvalue()

    def save(self) -> None:
        """Write the package back to its path atomically."""
        self._check_open()
        if not self.read_write:
            raise NotWritableError(f"Workbook was opened read-only: {self.path}")
        atomic_write(self.path, self.to_bytes())
        self.fp = fingerprint(self.path)
        self.events.emit("package.saved", {"path": str(self.path), "fingerprint": self.fp})

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "SpreadsheetPackage":
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        try:
            if exc_type is None and self.autosave and self.read_write and self.dirty:
                self.save()
        finally:
            self.close()
