"""Tests for ordered cell and row insertion."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st
from lxml import etree

from xlcell.contracts.common import InvalidAddressError
from xlcell.core.address import column_letters_to_index, index_to_column_letters
from xlcell.core.ns import MAIN_NS, qn
from xlcell.core.rows import (
    cell_refs,
    find_or_insert,
    find_or_insert_row,
    insertion_point,
    numbered_rows,
)


def _sheet_data(*row_numbers: str | None) -> etree._Element:
    sheet_data = etree.Element(qn("sheetData"), nsmap={None: MAIN_NS})
    for r in row_numbers:
        row = etree.SubElement(sheet_data, qn("row"))
        if r is not None:
            row.set("r", r)
    return sheet_data


class TestInsertionPoint:
    def test_empty(self):
        assert insertion_point([], "A1") == (0, False)

    def test_between(self):
        assert insertion_point(["A1", "C1"], "B1") == (1, False)

    def test_existing(self):
        assert insertion_point(["A1", "C1"], "C1") == (1, True)

    def test_after_all(self):
        assert insertion_point(["A1", "C1"], "D1") == (2, False)

    def test_numeric_not_lexical(self):
        # "AA1" < "B1" as strings, but AA is column 27
        assert insertion_point(["B1"], "AA1") == (1, False)
        assert insertion_point(["AA1"], "B1") == (0, False)


class TestFindOrInsert:
    def test_empty_row_then_same_address(self, make_row):
        row = make_row([])
        first = find_or_insert(row, "A1")
        second = find_or_insert(row, "A1")
        assert first is second
        assert len(row) == 1
        assert first.get("r") == "A1"

    def test_middle_insertion(self, make_row):
        row = make_row(["A1", "C1"], r="1")
        cell = find_or_insert(row, "B1")
        assert cell_refs(row) == ["A1", "B1", "C1"]
        assert cell.get("r") == "B1"

    def test_b_before_aa(self, make_row):
        row = make_row([])
        find_or_insert(row, "B1")
        find_or_insert(row, "AA1")
        assert cell_refs(row) == ["B1", "AA1"]

    def test_aa_then_b(self, make_row):
        row = make_row([])
        find_or_insert(row, "AA1")
        find_or_insert(row, "B1")
        assert cell_refs(row) == ["B1", "AA1"]

    def test_existing_cell_is_returned_untouched(self, make_row):
        row = make_row(["A2", "B2"], r="2")
        existing = row[1]
        assert find_or_insert(row, "B2") is existing
        assert cell_refs(row) == ["A2", "B2"]

    def test_row_mismatch(self, make_row):
        row = make_row(["A2"], r="2")
        with pytest.raises(InvalidAddressError):
            find_or_insert(row, "A1")

    def test_implied_refs_are_materialized(self, make_row):
        # second cell has no r: it sits in column B
        row = make_row(["A3", None], r="3")
        implied = row[1]
        assert find_or_insert(row, "B3") is implied
        assert cell_refs(row) == ["A3", "B3"]
        find_or_insert(row, "C3")
        assert cell_refs(row) == ["A3", "B3", "C3"]

    def test_spans_hint_dropped_on_insert(self, make_row):
        row = make_row(["A1"], r="1")
        row.set("spans", "1:1")
        find_or_insert(row, "B1")
        assert row.get("spans") is None

    def test_spans_kept_on_lookup(self, make_row):
        row = make_row(["A1"], r="1")
        row.set("spans", "1:1")
        find_or_insert(row, "A1")
        assert row.get("spans") == "1:1"

    def test_trailing_non_cell_children_stay_last(self, make_row):
        row = make_row(["A1"], r="1")
        ext = etree.SubElement(row, qn("extLst"))
        find_or_insert(row, "B1")
        assert row[-1] is ext
        assert cell_refs(row) == ["A1", "B1"]

    @given(st.lists(st.integers(min_value=1, max_value=16384), max_size=25))
    def test_any_insertion_order_yields_sorted_unique_row(self, columns: list[int]):
        row = etree.Element(qn("row"), nsmap={None: MAIN_NS})
        for col in columns:
            find_or_insert(row, f"{index_to_column_letters(col)}1")
        indices = [column_letters_to_index(ref[:-1]) for ref in cell_refs(row)]
        assert indices == sorted(set(columns))


class TestFindOrInsertRow:
    def test_appends_to_empty(self):
        sheet_data = _sheet_data()
        row = find_or_insert_row(sheet_data, 4)
        assert row.get("r") == "4"
        assert len(sheet_data) == 1

    def test_keeps_rows_ordered(self):
        sheet_data = _sheet_data("1", "3")
        find_or_insert_row(sheet_data, 2)
        find_or_insert_row(sheet_data, 10)
        assert [n for n, _ in numbered_rows(sheet_data)] == [1, 2, 3, 10]

    def test_existing_row_returned(self):
        sheet_data = _sheet_data("1", "3")
        existing = sheet_data[1]
        assert find_or_insert_row(sheet_data, 3) is existing
        assert len(sheet_data) == 2

    def test_implied_row_numbers(self):
        sheet_data = _sheet_data("2", None)
        implied = sheet_data[1]
        assert find_or_insert_row(sheet_data, 3) is implied
        assert implied.get("r") == "3"

    def test_row_zero_rejected(self):
        with pytest.raises(InvalidAddressError):
            find_or_insert_row(_sheet_data(), 0)
