"""A1 cell-reference codec: column letters, row numbers, bijective base-26.

Spreadsheet columns are numbered in bijective base-26: ``A`` is 1, ``Z`` is
26, ``AA`` is 27. There is no zero digit, so both directions of the
conversion have to apply the same one-based adjustment to round-trip.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator

from xlcell.contracts.common import InvalidAddressError, InvalidIndexError

_A1_RE = re.compile(r"^\$?([A-Z]+)\$?([0-9]+)$")
_LETTERS_RE = re.compile(r"^[A-Z]+$")
_DIGITS_RE = re.compile(r"\d")
_ALPHA_RE = re.compile(r"[A-Za-z]")

_BASE = 26
_ORD_A = ord("A")


class CellAddress(BaseModel):
    """A parsed cell reference such as ``AB12``."""

    model_config = ConfigDict(frozen=True)

    column: str
    row: int

    @field_validator("column")
    @classmethod
    def _check_column(cls, v: str) -> str:
        v = v.upper()
        if not _LETTERS_RE.match(v):
            raise ValueError(f"column must match [A-Z]+, got {v!r}")
        return v

    @field_validator("row")
    @classmethod
    def _check_row(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"row must be >= 1, got {v}")
        return v

    @property
    def column_index(self) -> int:
        return column_letters_to_index(self.column)

    @property
    def sort_key(self) -> tuple[int, int]:
        """Ordering key: numeric column first, then row."""
        return self.column_index, self.row

    def __str__(self) -> str:
        return f"{self.column}{self.row}"


def parse_column(address: str) -> str:
    """Return the column letters of *address* (``"b12"`` -> ``"B"``)."""
    letters = _DIGITS_RE.sub("", (address or "").upper()).replace("$", "")
    if not letters:
        raise InvalidAddressError(f"No column letters in cell reference: {address!r}")
    if not _LETTERS_RE.match(letters):
        raise InvalidAddressError(f"Invalid column in cell reference: {address!r}")
    return letters


def parse_row(address: str) -> int:
    """Return the row number of *address* (``"B12"`` -> ``12``).

    A reference without digits is an error, not row 0.
    """
    digits = _ALPHA_RE.sub("", address or "").replace("$", "")
    if not digits:
        raise InvalidAddressError(f"No row digits in cell reference: {address!r}")
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidAddressError(f"Invalid row in cell reference: {address!r}")
    return int(digits)


def column_letters_to_index(letters: str) -> int:
    """Convert column letters to a 1-based index (``"AA"`` -> 27)."""
    normalized = (letters or "").upper()
    if not _LETTERS_RE.match(normalized):
        raise InvalidAddressError(f"Invalid column letters: {letters!r}")
    index = 0
    multiplier = 1
    for ch in reversed(normalized):
        index += multiplier * (ord(ch) - _ORD_A + 1)
        multiplier *= _BASE
    return index


def index_to_column_letters(index: int) -> str:
    """Convert a 1-based column index to letters (27 -> ``"AA"``)."""
    if index < 1:
        raise InvalidIndexError(f"Column index must be >= 1, got {index}")
    chunks: list[str] = []
    current = index
    while current > 0:
        current, rem = divmod(current - 1, _BASE)
        chunks.append(chr(_ORD_A + rem))
    return "".join(reversed(chunks))


def parse_address(address: str) -> CellAddress:
    """Strictly parse ``[$]LETTERS[$]DIGITS`` into a :class:`CellAddress`."""
    m = _A1_RE.match((address or "").strip().upper())
    if not m:
        raise InvalidAddressError(f"Invalid cell reference: {address!r}")
    row = int(m.group(2))
    if row < 1:
        raise InvalidAddressError(f"Row must be >= 1 in cell reference: {address!r}")
    return CellAddress(column=m.group(1), row=row)


def split_sheet_ref(ref: str) -> tuple[str, str]:
    """Split ``Sheet1!B2`` (or ``'My Sheet'!B2``) into sheet name and cell ref."""
    if "!" not in ref:
        raise InvalidAddressError(f"Ref must include sheet name (e.g. Sheet1!B2): {ref!r}")
    sheet, cell = ref.rsplit("!", 1)
    if len(sheet) >= 2 and sheet[0] == sheet[-1] == "'":
        sheet = sheet[1:-1].replace("''", "'")
    if not sheet:
        raise InvalidAddressError(f"Empty sheet name in ref: {ref!r}")
    return sheet, cell
