"""Command-specific result models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SheetMeta(BaseModel):
    """Metadata for a single worksheet."""

    name: str
    index: int
    sheet_id: int
    visible: str = "visible"  # visible / hidden / veryHidden
    used_range: str | None = None


class WorkbookMeta(BaseModel):
    """Metadata returned by ``wb inspect``."""

    path: str
    fingerprint: str
    writable: bool = False
    sheets: list[SheetMeta] = Field(default_factory=list)
    shared_string_count: int = 0


class CellValueResult(BaseModel):
    """Result of ``cell get``."""

    ref: str
    value: str
    type: str = "empty"  # empty / shared / inline / bool / number / str / error


class AddressInfo(BaseModel):
    """Decoded form of a cell reference or column index."""

    ref: str | None = None
    column: str
    column_index: int
    row: int | None = None


class FileListing(BaseModel):
    """Result of a best-effort directory listing."""

    path: str
    files: list[str] = Field(default_factory=list)
    error: str | None = None
