"""Tests for SpreadsheetPackage: create, open, sheets, persistence."""

from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path

import openpyxl
import pytest

from xlcell.contracts.common import NotWritableError, SheetNotFoundError, WorkbookCorruptError
from xlcell.engine.cells import set_cell_text
from xlcell.engine.package import SpreadsheetPackage
from xlcell.io.fileops import fingerprint
from xlcell.observe.events import EventEmitter


class TestCreate:
    def test_default_sheet(self, tmp_path: Path):
        path = tmp_path / "new.xlsx"
        with SpreadsheetPackage.create(path) as pkg:
            assert pkg.sheet_names() == ["Sheet1"]
            assert pkg.read_write is True
        assert path.exists()

    def test_named_sheets(self, tmp_path: Path):
        path = tmp_path / "new.xlsx"
        with SpreadsheetPackage.create(path, sheets=["Revenue", "Summary"]) as pkg:
            assert pkg.sheet_names() == ["Revenue", "Summary"]
        wb = openpyxl.load_workbook(path)
        assert wb.sheetnames == ["Revenue", "Summary"]
        wb.close()

    def test_refuses_existing_file(self, blank_workbook: Path):
        with pytest.raises(FileExistsError):
            SpreadsheetPackage.create(blank_workbook)

    def test_overwrite(self, mixed_workbook: Path):
        with SpreadsheetPackage.create(mixed_workbook, overwrite=True) as pkg:
            assert pkg.sheet_names() == ["Sheet1"]

    @pytest.mark.parametrize("sheets", [["Data", "data"], ["bad/name"], ["x" * 32]])
    def test_rejects_bad_sheet_names(self, tmp_path: Path, sheets: list[str]):
        path = tmp_path / "new.xlsx"
        with pytest.raises(ValueError):
            SpreadsheetPackage.create(path, sheets=sheets)
        assert not path.exists()


class TestOpen:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            SpreadsheetPackage.open(tmp_path / "nope.xlsx")

    def test_not_a_zip(self, tmp_path: Path):
        path = tmp_path / "bad.xlsx"
        path.write_bytes(b"definitely not a zip")
        with pytest.raises(WorkbookCorruptError):
            SpreadsheetPackage.open(path)

    def test_zip_without_workbook(self, tmp_path: Path):
        path = tmp_path / "empty.xlsx"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("hello.txt", "hi")
        with pytest.raises(WorkbookCorruptError):
            SpreadsheetPackage.open(path)

    def test_reads_sheets_and_strings(self, mixed_workbook: Path):
        with SpreadsheetPackage.open(mixed_workbook) as pkg:
            assert pkg.sheet_names() == ["Data", "Notes"]
            assert [ws.name for ws in pkg.worksheets()] == ["Data", "Notes"]
            table = pkg.find_shared_strings()
            assert table is not None
            assert "Alpha" in list(table)

    def test_get_sheet_missing(self, mixed_workbook: Path):
        with SpreadsheetPackage.open(mixed_workbook) as pkg:
            assert pkg.find_sheet("Nope") is None
            with pytest.raises(SheetNotFoundError) as exc:
                pkg.get_sheet("Nope")
        assert exc.value.name == "Nope"

    def test_meta(self, mixed_workbook: Path):
        with SpreadsheetPackage.open(mixed_workbook) as pkg:
            meta = pkg.get_workbook_meta()
        assert meta.fingerprint == fingerprint(mixed_workbook)
        assert meta.writable is False
        assert [s.name for s in meta.sheets] == ["Data", "Notes"]
        assert meta.sheets[0].used_range == "A1:D3"
        assert meta.sheets[1].used_range == "A1"
        assert meta.shared_string_count >= 4


class TestWorksheets:
    def test_existing_sheet_returned(self, blank_workbook: Path):
        with SpreadsheetPackage.open(blank_workbook, read_write=True) as pkg:
            ws = pkg.get_or_create_worksheet("Sheet1")
            assert ws is pkg.get_sheet("Sheet1")
            assert pkg.dirty is False

    def test_new_sheet_gets_next_id(self, blank_workbook: Path):
        with SpreadsheetPackage.open(blank_workbook, read_write=True) as pkg:
            ws = pkg.get_or_create_worksheet("Costs")
            assert ws.sheet_id == 2
            assert ws.part_name == "xl/worksheets/sheet2.xml"
            assert pkg.sheet_names() == ["Sheet1", "Costs"]
            pkg.save()

        wb = openpyxl.load_workbook(blank_workbook)
        assert wb.sheetnames == ["Sheet1", "Costs"]
        wb.close()

    def test_unnamed_sheet(self, blank_workbook: Path):
        with SpreadsheetPackage.open(blank_workbook, read_write=True) as pkg:
            ws = pkg.get_or_create_worksheet()
            assert ws.name == "Sheet2"
            ws3 = pkg.get_or_create_worksheet()
            assert (ws3.name, ws3.sheet_id) == ("Sheet3", 3)

    def test_lookup_ignores_case(self, mixed_workbook: Path):
        with SpreadsheetPackage.open(mixed_workbook, read_write=True) as pkg:
            assert pkg.find_sheet("notes") is pkg.get_sheet("Notes")
            assert pkg.get_or_create_worksheet("DATA").name == "Data"
            assert pkg.sheet_names() == ["Data", "Notes"]
            assert pkg.dirty is False

    @pytest.mark.parametrize(
        "name",
        ["", "x" * 32, "bad/name[]", "a:b", "what?", "star*", "back\\slash", "'quoted'"],
    )
    def test_invalid_title_rejected(self, blank_workbook: Path, name: str):
        with SpreadsheetPackage.open(blank_workbook, read_write=True) as pkg:
            with pytest.raises(ValueError):
                pkg.get_or_create_worksheet(name)
            assert pkg.sheet_names() == ["Sheet1"]
            assert pkg.dirty is False

    def test_longest_title_accepted(self, blank_workbook: Path):
        name = "L" * 31
        with SpreadsheetPackage.open(blank_workbook, read_write=True) as pkg:
            pkg.get_or_create_worksheet(name)
            pkg.save()
        wb = openpyxl.load_workbook(blank_workbook)
        assert wb.sheetnames == ["Sheet1", name]
        wb.close()

    def test_unnamed_sheet_skips_taken_name(self, tmp_path: Path):
        path = tmp_path / "taken.xlsx"
        with SpreadsheetPackage.create(path, sheets=["Sheet1", "Sheet3"]) as pkg:
            ws = pkg.get_or_create_worksheet()
            assert ws.name not in ("Sheet1", "Sheet3")
            assert ws.sheet_id == int(ws.name.removeprefix("Sheet"))


class TestPersistence:
    def test_read_only_save(self, blank_workbook: Path):
        with SpreadsheetPackage.open(blank_workbook) as pkg:
            with pytest.raises(NotWritableError):
                pkg.save()

    def test_not_writable_is_permission_error(self, blank_workbook: Path):
        with SpreadsheetPackage.open(blank_workbook) as pkg:
            with pytest.raises(PermissionError):
                pkg.save()

    def test_closed_package_refuses_save(self, blank_workbook: Path):
        pkg = SpreadsheetPackage.open(blank_workbook, read_write=True)
        pkg.close()
        with pytest.raises(ValueError):
            pkg.save()

    def test_autosave_on_clean_exit(self, blank_workbook: Path):
        with SpreadsheetPackage.open(blank_workbook, read_write=True, autosave=True) as pkg:
            set_cell_text(pkg, "Sheet1", "A1", "saved")
        wb = openpyxl.load_workbook(blank_workbook)
        assert wb["Sheet1"]["A1"].value == "saved"
        wb.close()

    def test_no_autosave_on_error(self, blank_workbook: Path):
        before = fingerprint(blank_workbook)
        with pytest.raises(RuntimeError):
            with SpreadsheetPackage.open(blank_workbook, read_write=True, autosave=True) as pkg:
                set_cell_text(pkg, "Sheet1", "A1", "lost")
                raise RuntimeError("boom")
        assert pkg.closed is True
        assert fingerprint(blank_workbook) == before

    def test_no_autosave_by_default(self, blank_workbook: Path):
        before = fingerprint(blank_workbook)
        with SpreadsheetPackage.open(blank_workbook, read_write=True) as pkg:
            set_cell_text(pkg, "Sheet1", "A1", "unsaved")
            assert pkg.dirty is True
        assert fingerprint(blank_workbook) == before

    def test_untouched_parts_survive(self, mixed_workbook: Path):
        with zipfile.ZipFile(mixed_workbook) as zf:
            styles_before = zf.read("xl/styles.xml")
        with SpreadsheetPackage.open(mixed_workbook, read_write=True) as pkg:
            set_cell_text(pkg, "Data", "E5", "new")
            pkg.save()
        with zipfile.ZipFile(mixed_workbook) as zf:
            assert zf.read("xl/styles.xml") == styles_before

    def test_save_updates_fingerprint(self, blank_workbook: Path):
        with SpreadsheetPackage.open(blank_workbook, read_write=True) as pkg:
            old = pkg.fp
            set_cell_text(pkg, "Sheet1", "A1", "x")
            pkg.save()
            assert pkg.fp != old
            assert pkg.fp == fingerprint(blank_workbook)


def test_lifecycle_events(blank_workbook: Path):
    stream = io.StringIO()
    events = EventEmitter(enabled=True, stream=stream)
    with SpreadsheetPackage.open(blank_workbook, read_write=True, events=events) as pkg:
        pkg.get_or_create_worksheet("Extra")
        pkg.save()
    names = [json.loads(line)["event"] for line in stream.getvalue().splitlines()]
    assert names == ["package.opened", "sheet.created", "package.saved"]
