"""Response envelopes, error codes and exit-code mapping."""

from __future__ import annotations

import sys
from typing import Any

import orjson
import portalocker

from xlcell.contracts.common import (
    ErrorDetail,
    FormulaOverwriteError,
    InvalidAddressError,
    InvalidIndexError,
    Metrics,
    NotWritableError,
    ResponseEnvelope,
    SheetNotFoundError,
    Target,
    WorkbookCorruptError,
)

# Exit code mapping
EXIT_CODES = {
    "success": 0,
    "validation": 10,
    "formula": 30,
    "io": 50,
    "internal": 90,
}

ERROR_CLASSES = {
    "ERR_ADDRESS_INVALID": "validation",
    "ERR_INDEX_INVALID": "validation",
    "ERR_INVALID_ARGUMENT": "validation",
    "ERR_USAGE": "validation",
    "ERR_CONFIG_INVALID": "validation",
    "ERR_SHEET_NOT_FOUND": "validation",
    "ERR_SHEET_EXISTS": "validation",
    "ERR_FORMULA_OVERWRITE_BLOCKED": "formula",
    "ERR_WORKBOOK_NOT_FOUND": "io",
    "ERR_WORKBOOK_CORRUPT": "io",
    "ERR_NOT_WRITABLE": "io",
    "ERR_FILE_EXISTS": "io",
    "ERR_LOCK_HELD": "io",
    "ERR_IO": "io",
    "ERR_INTERNAL": "internal",
}

# First match wins: the domain errors subclass ValueError and OSError.
_EXCEPTION_CODES: tuple[tuple[type[BaseException], str], ...] = (
    (InvalidAddressError, "ERR_ADDRESS_INVALID"),
    (InvalidIndexError, "ERR_INDEX_INVALID"),
    (FormulaOverwriteError, "ERR_FORMULA_OVERWRITE_BLOCKED"),
    (SheetNotFoundError, "ERR_SHEET_NOT_FOUND"),
    (WorkbookCorruptError, "ERR_WORKBOOK_CORRUPT"),
    (NotWritableError, "ERR_NOT_WRITABLE"),
    (FileExistsError, "ERR_FILE_EXISTS"),
    (FileNotFoundError, "ERR_WORKBOOK_NOT_FOUND"),
    (portalocker.LockException, "ERR_LOCK_HELD"),
    (OSError, "ERR_IO"),
    (ValueError, "ERR_INVALID_ARGUMENT"),
)


def success_envelope(
    command: str,
    result: Any,
    *,
    target: Target | None = None,
    changes: list | None = None,
    warnings: list | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=True,
        command=command,
        target=target or Target(),
        result=result,
        changes=changes or [],
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    target: Target | None = None,
    details: dict | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_code_for(exc: BaseException) -> str:
    """Stable ``ERR_*`` code for an exception raised by the engine."""
    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code
    return "ERR_INTERNAL"


def exception_envelope(
    command: str,
    exc: BaseException,
    *,
    target: Target | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    """Error envelope for *exc*, coded by :func:`error_code_for`."""
    details = None
    if isinstance(exc, SheetNotFoundError):
        details = {"sheet": exc.name}
    return error_envelope(
        command,
        error_code_for(exc),
        str(exc),
        target=target,
        details=details,
        duration_ms=duration_ms,
    )


def output_json(envelope: ResponseEnvelope) -> str:
    """Serialize envelope to JSON string using orjson."""
    data = envelope.model_dump(mode="json")
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def print_response(envelope: ResponseEnvelope) -> None:
    """Print response as JSON to stdout."""
    sys.stdout.write(output_json(envelope) + "\n")


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Exit code for an envelope, from the class of its first error.

    Codes missing from ``ERROR_CLASSES`` fall back on their name: ``*NOT_FOUND``
    is an io failure, anything else is internal.
    """
    if envelope.ok:
        return EXIT_CODES["success"]
    if not envelope.errors:
        return EXIT_CODES["internal"]
    code = envelope.errors[0].code.upper()
    error_class = ERROR_CLASSES.get(code)
    if error_class is None:
        error_class = "io" if code.endswith("NOT_FOUND") else "internal"
    return EXIT_CODES[error_class]
