"""Pydantic models for responses and the error taxonomy."""

from xlcell.contracts.common import (
    ChangeRecord,
    ErrorDetail,
    FormulaOverwriteError,
    InvalidAddressError,
    InvalidIndexError,
    Metrics,
    NotWritableError,
    ResponseEnvelope,
    SheetNotFoundError,
    Target,
    WarningDetail,
    WorkbookCorruptError,
)
from xlcell.contracts.responses import (
    AddressInfo,
    CellValueResult,
    FileListing,
    SheetMeta,
    WorkbookMeta,
)

__all__ = [
    "AddressInfo",
    "CellValueResult",
    "ChangeRecord",
    "ErrorDetail",
    "FileListing",
    "FormulaOverwriteError",
    "InvalidAddressError",
    "InvalidIndexError",
    "Metrics",
    "NotWritableError",
    "ResponseEnvelope",
    "SheetMeta",
    "SheetNotFoundError",
    "Target",
    "WarningDetail",
    "WorkbookCorruptError",
    "WorkbookMeta",
]
