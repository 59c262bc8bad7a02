"""Cell-level operations on a SpreadsheetPackage: read, write text, read a row."""

from __future__ import annotations

from typing import Any

from lxml import etree

from xlcell.contracts.common import (
    ChangeRecord,
    FormulaOverwriteError,
    InvalidIndexError,
    WorkbookCorruptError,
)
from xlcell.contracts.responses import CellValueResult
from xlcell.core.address import CellAddress, index_to_column_letters, parse_address
from xlcell.core.ns import qn
from xlcell.core.rows import addressed_cells, find_or_insert, find_or_insert_row
from xlcell.core.sharedstrings import intern_text, item_text, text_element
from xlcell.engine.package import SpreadsheetPackage

STORAGE_MODES = frozenset({"shared", "inline"})

_F = qn("f")
_V = qn("v")
_IS = qn("is")
_EXT = qn("extLst")

# cell t attribute -> reported type
_RAW_TYPES = {"n": "number", "d": "date", "e": "error", "str": "str"}


def _as_address(address: str | CellAddress) -> CellAddress:
    return address if isinstance(address, CellAddress) else parse_address(address)


def _decode(package: SpreadsheetPackage, ref: str, cell: etree._Element) -> tuple[str, str]:
    """Display text and type of a ``<c>`` element."""
    t = cell.get("t", "n")
    if t == "inlineStr":
        is_el = cell.find(_IS)
        return (item_text(is_el) if is_el is not None else ""), "inline"

    v = cell.find(_V)
    raw = v.text if v is not None else None
    if raw is None:
        return "", "empty"

    if t == "s":
        table = package.find_shared_strings()
        if table is None:
            # no table to resolve against; hand back the stored index
            return raw, "shared"
        try:
            return table.text_at(int(raw)), "shared"
        except (ValueError, IndexError) as e:
            raise WorkbookCorruptError(
                f"Cell {ref} references missing shared string {raw!r}"
            ) from e
    if t == "b":
        return ("FALSE" if raw.strip() == "0" else "TRUE"), "bool"
    return raw, _RAW_TYPES.get(t, "number")


def cell_get(package: SpreadsheetPackage, sheet_name: str, address: str | CellAddress) -> CellValueResult:
    """Read a cell's display value and type."""
    addr = _as_address(address)
    ws = package.get_sheet(sheet_name)
    cell = ws.find_cell(addr)
    if cell is None:
        return CellValueResult(ref=f"{ws.name}!{addr}", value="", type="empty")
    value, kind = _decode(package, str(addr), cell)
    return CellValueResult(ref=f"{ws.name}!{addr}", value=value, type=kind)


def get_cell_value(package: SpreadsheetPackage, sheet_name: str, address: str | CellAddress) -> str:
    """Effective text of a cell; ``""`` when the cell does not exist.

    Shared strings are resolved through the table, booleans read as
    ``TRUE``/``FALSE``, anything else is returned as stored.
    """
    return cell_get(package, sheet_name, address).value


def get_cell_at(package: SpreadsheetPackage, sheet_name: str, row_index: int, column_index: int) -> str:
    """:func:`get_cell_value` addressed by 1-based row and column numbers."""
    if row_index < 1:
        raise InvalidIndexError(f"Row index must be >= 1, got {row_index}")
    addr = CellAddress(column=index_to_column_letters(column_index), row=row_index)
    return get_cell_value(package, sheet_name, addr)


def _append_value(cell: etree._Element, child: etree._Element) -> None:
    ext = cell.find(_EXT)
    if ext is not None:
        ext.addprevious(child)
    else:
        cell.append(child)


def set_cell_text(
    package: SpreadsheetPackage,
    sheet_name: str,
    address: str | CellAddress,
    text: str,
    *,
    storage: str = "shared",
    force_overwrite_formulas: bool = False,
    save: bool = False,
) -> ChangeRecord:
    """Write *text* into a cell, creating the sheet, row and cell as needed."""
    if storage not in STORAGE_MODES:
        raise ValueError(f"Unknown storage '{storage}'. Valid: {', '.join(sorted(STORAGE_MODES))}")
    addr = _as_address(address)
    # raises before the sheet, table or cell is touched
    t = text_element(text)
    ws = package.get_or_create_worksheet(sheet_name)

    before: str | None = None
    existing = ws.find_cell(addr)
    if existing is not None:
        if existing.find(_F) is not None and not force_overwrite_formulas:
            raise FormulaOverwriteError(
                f"Cell {addr} contains formula '{existing.findtext(_F)}'. "
                "Use --force-overwrite-formulas to overwrite."
            )
        before = _decode(package, str(addr), existing)[0]

    impact: dict[str, Any] = {"cells": 1, "storage": storage}
    if storage == "shared":
        index = intern_text(package.shared_strings(), text)
        value = ws.root.makeelement(_V, {})
        value.text = str(index)
        impact["shared_index"] = index
    else:
        value = ws.root.makeelement(_IS, {})
        value.append(t)

    row = find_or_insert_row(ws.sheet_data, addr.row)
    cell = find_or_insert(row, addr)
    for child in list(cell):
        if child.tag in (_F, _V, _IS):
            cell.remove(child)
    cell.set("t", "s" if storage == "shared" else "inlineStr")
    _append_value(cell, value)

    ws.modified = True
    ws.refresh_dimension()
    package.events.emit("cell.set", {"sheet": ws.name, "ref": str(addr), "storage": storage})
    if save:
        package.save()

    return ChangeRecord(
        type="cell.set",
        target=f"{ws.name}!{addr}",
        before=before,
        after=text,
        impact=impact,
    )


def read_row(package: SpreadsheetPackage, sheet_name: str, row_index: int) -> list[dict[str, Any]]:
    """Decoded cells of one row in column order; ``[]`` if the row is absent."""
    ws = package.get_sheet(sheet_name)
    row = ws.find_row(row_index)
    if row is None:
        return []
    cells: list[dict[str, Any]] = []
    for addr, cell in addressed_cells(row, row_index):
        value, kind = _decode(package, str(addr), cell)
        cells.append({"ref": str(addr), "value": value, "type": kind})
    return cells
