"""Exit code mapping regression tests."""

import portalocker
import pytest

from xlcell.contracts.common import (
    FormulaOverwriteError,
    InvalidAddressError,
    InvalidIndexError,
    NotWritableError,
    SheetNotFoundError,
    WorkbookCorruptError,
)
from xlcell.engine.dispatcher import (
    error_code_for,
    error_envelope,
    exception_envelope,
    exit_code_for,
    success_envelope,
)


def test_exit_code_success():
    assert exit_code_for(success_envelope("x", {})) == 0


@pytest.mark.parametrize(
    "code",
    [
        "ERR_ADDRESS_INVALID",
        "ERR_INDEX_INVALID",
        "ERR_SHEET_NOT_FOUND",
        "ERR_SHEET_EXISTS",
        "ERR_CONFIG_INVALID",
        "ERR_USAGE",
        "ERR_INVALID_ARGUMENT",
    ],
)
def test_exit_code_validation_class(code: str):
    assert exit_code_for(error_envelope("x", code, "bad")) == 10


def test_exit_code_formula_class():
    env = error_envelope("x", "ERR_FORMULA_OVERWRITE_BLOCKED", "blocked")
    assert exit_code_for(env) == 30


@pytest.mark.parametrize(
    "code",
    [
        "ERR_WORKBOOK_NOT_FOUND",
        "ERR_WORKBOOK_CORRUPT",
        "ERR_NOT_WRITABLE",
        "ERR_FILE_EXISTS",
        "ERR_LOCK_HELD",
        "ERR_IO",
    ],
)
def test_exit_code_io_class(code: str):
    assert exit_code_for(error_envelope("x", code, "io")) == 50


def test_exit_code_internal_fallback():
    env = error_envelope("x", "ERR_INTERNAL", "unknown")
    assert exit_code_for(env) == 90


def test_exit_code_failed_without_errors():
    env = success_envelope("x", None)
    env.ok = False
    assert exit_code_for(env) == 90


def test_unlisted_not_found_code_is_io():
    env = error_envelope("x", "ERR_PART_NOT_FOUND", "missing")
    assert exit_code_for(env) == 50


@pytest.mark.parametrize(
    "exc, code",
    [
        (InvalidAddressError("bad"), "ERR_ADDRESS_INVALID"),
        (InvalidIndexError("bad"), "ERR_INDEX_INVALID"),
        (FormulaOverwriteError("formula"), "ERR_FORMULA_OVERWRITE_BLOCKED"),
        (SheetNotFoundError("Data"), "ERR_SHEET_NOT_FOUND"),
        (WorkbookCorruptError("bad zip"), "ERR_WORKBOOK_CORRUPT"),
        (NotWritableError("read-only"), "ERR_NOT_WRITABLE"),
        (FileExistsError("exists"), "ERR_FILE_EXISTS"),
        (FileNotFoundError("gone"), "ERR_WORKBOOK_NOT_FOUND"),
        (portalocker.LockException("held"), "ERR_LOCK_HELD"),
        (OSError("disk"), "ERR_IO"),
        (ValueError("storage"), "ERR_INVALID_ARGUMENT"),
        (RuntimeError("?"), "ERR_INTERNAL"),
    ],
)
def test_error_code_for(exc: BaseException, code: str):
    assert error_code_for(exc) == code


def test_exception_envelope_carries_sheet_detail():
    env = exception_envelope("cell.get", SheetNotFoundError("Data"))
    assert env.ok is False
    assert env.errors[0].code == "ERR_SHEET_NOT_FOUND"
    assert env.errors[0].details == {"sheet": "Data"}
    assert exit_code_for(env) == 10
