"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from lxml import etree
from openpyxl import Workbook

from xlcell.core.ns import MAIN_NS
from xlcell.core.rows import ROW_TAG


@pytest.fixture()
def blank_workbook(tmp_path: Path) -> Path:
    """A workbook with a single empty sheet named Sheet1."""
    wb = Workbook()
    wb.active.title = "Sheet1"
    path = tmp_path / "blank.xlsx"
    wb.save(str(path))
    wb.close()
    return path


@pytest.fixture()
def mixed_workbook(tmp_path: Path) -> Path:
    """Two sheets holding strings, a number, a boolean and a formula."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Data"
    ws["A1"] = "Name"
    ws["B1"] = "Value"
    ws["A2"] = "Alpha"
    ws["B2"] = 100
    ws["C2"] = True
    ws["D2"] = "=B2*2"
    ws["A3"] = "Alpha"

    notes = wb.create_sheet("Notes")
    notes["A1"] = "  padded  "

    path = tmp_path / "mixed.xlsx"
    wb.save(str(path))
    wb.close()
    return path


@pytest.fixture()
def make_row():
    """Build a ``<row>`` element from cell references (``None`` = no ``r``)."""

    def _make(refs: list[str | None], r: str | None = None) -> etree._Element:
        row = etree.Element(ROW_TAG, nsmap={None: MAIN_NS})
        if r is not None:
            row.set("r", r)
        for ref in refs:
            cell = etree.SubElement(row, f"{{{MAIN_NS}}}c")
            if ref is not None:
                cell.set("r", ref)
        return row

    return _make
