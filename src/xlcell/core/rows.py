"""Ordered insertion of cells into a ``<row>`` and rows into ``<sheetData>``.

SpreadsheetML requires cells to appear in ascending column order and rows in
ascending row order. Ordering is by numeric column index, never by string
comparison of the reference ("B1" sorts before "AA1").
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from lxml import etree

from xlcell.contracts.common import InvalidAddressError
from xlcell.core.address import CellAddress, index_to_column_letters, parse_address
from xlcell.core.ns import qn

CELL_TAG = qn("c")
ROW_TAG = qn("row")


def _as_address(address: str | CellAddress) -> CellAddress:
    if isinstance(address, CellAddress):
        return address
    return parse_address(address)


def insertion_point(refs: Sequence[str], address: str | CellAddress) -> tuple[int, bool]:
    """Locate *address* among ordered *refs*.

    Returns ``(position, True)`` if an equal reference exists, otherwise the
    position of the first reference sorting strictly after *address* (or
    ``len(refs)``) and ``False``.
    """
    target = _as_address(address)
    key = target.sort_key
    for pos, ref in enumerate(refs):
        other = parse_address(ref)
        if other == target:
            return pos, True
        if other.sort_key > key:
            return pos, False
    return len(refs), False


def _row_number(row: etree._Element) -> int | None:
    r = row.get("r")
    if r is None:
        return None
    try:
        return int(r)
    except ValueError as e:
        raise InvalidAddressError(f"Invalid row number in sheet data: {r!r}") from e


def numbered_rows(sheet_data: etree._Element) -> Iterator[tuple[int, etree._Element]]:
    """Yield ``(row_number, <row>)``; a row without ``r`` follows the previous one."""
    last = 0
    for row in sheet_data.iterchildren(ROW_TAG):
        number = _row_number(row)
        if number is None:
            number = last + 1
        last = number
        yield number, row


def addressed_cells(
    row: etree._Element, row_number: int
) -> Iterator[tuple[CellAddress, etree._Element]]:
    """Yield ``(address, <c>)``; a cell without ``r`` sits in the next column."""
    col = 0
    for cell in row.iterchildren(CELL_TAG):
        ref = cell.get("r")
        if ref is None:
            col += 1
            addr = CellAddress(column=index_to_column_letters(col), row=row_number)
        else:
            addr = parse_address(ref)
            col = addr.column_index
        yield addr, cell


def _materialize_cell_refs(row: etree._Element, row_number: int) -> list[etree._Element]:
    cells: list[etree._Element] = []
    for addr, cell in list(addressed_cells(row, row_number)):
        if cell.get("r") is None:
            cell.set("r", str(addr))
        cells.append(cell)
    return cells


def _materialize_row_numbers(sheet_data: etree._Element) -> list[etree._Element]:
    rows: list[etree._Element] = []
    for number, row in list(numbered_rows(sheet_data)):
        if row.get("r") is None:
            row.set("r", str(number))
        rows.append(row)
    return rows


def cell_refs(row: etree._Element) -> list[str]:
    """References of the cells in *row*, in document order."""
    return [c.get("r", "") for c in row.iterchildren(CELL_TAG)]


def find_or_insert(row: etree._Element, address: str | CellAddress) -> etree._Element:
    """Return the ``<c>`` at *address*, creating it in column order if absent.

    Calling twice with the same address returns the same element and leaves
    the row untouched.
    """
    target = _as_address(address)
    number = _row_number(row)
    if number is not None and number != target.row:
        raise InvalidAddressError(f"Cell {target} does not belong to row {number}")

    cells = _materialize_cell_refs(row, target.row)
    pos, exists = insertion_point([c.get("r") for c in cells], target)
    if exists:
        return cells[pos]

    new_cell = row.makeelement(CELL_TAG, {"r": str(target)})
    if pos < len(cells):
        cells[pos].addprevious(new_cell)
    elif cells:
        cells[-1].addnext(new_cell)
    else:
        row.insert(0, new_cell)
    # spans is an optional hint and may no longer cover the new cell
    row.attrib.pop("spans", None)
    return new_cell


def find_or_insert_row(sheet_data: etree._Element, row_index: int) -> etree._Element:
    """Return the ``<row r=row_index>``, creating it in row order if absent."""
    if row_index < 1:
        raise InvalidAddressError(f"Row index must be >= 1, got {row_index}")
    rows = _materialize_row_numbers(sheet_data)
    for row in rows:
        number = int(row.get("r"))
        if number == row_index:
            return row
        if number > row_index:
            new_row = sheet_data.makeelement(ROW_TAG, {"r": str(row_index)})
            row.addprevious(new_row)
            return new_row
    new_row = sheet_data.makeelement(ROW_TAG, {"r": str(row_index)})
    sheet_data.append(new_row)
    return new_row
