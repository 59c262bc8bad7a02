"""Typer CLI application — top-level commands and subcommand groups."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import portalocker
import typer
import yaml

import xlcell
from xlcell.config.settings import Settings
from xlcell.contracts.common import (
    ChangeRecord,
    InvalidAddressError,
    InvalidIndexError,
    SheetNotFoundError,
    Target,
    WarningDetail,
    WorkbookCorruptError,
)
from xlcell.contracts.responses import AddressInfo
from xlcell.core.address import (
    column_letters_to_index,
    index_to_column_letters,
    parse_address,
    parse_column,
    split_sheet_ref,
)
from xlcell.engine.dispatcher import (
    error_envelope,
    exception_envelope,
    exit_code_for,
    print_response,
    success_envelope,
)
from xlcell.engine.package import SpreadsheetPackage
from xlcell.observe.events import EventEmitter, Timer

# ---------------------------------------------------------------------------
# App & subcommand groups
# ---------------------------------------------------------------------------

_MAIN_HELP = """\
Read and write cells in Excel workbooks (.xlsx) at the package level.

Cells are written straight into the worksheet XML: rows and cells are kept
in column order and text goes through the workbook's shared-string table,
so everything else in the file is left as it was.

**Typical session:**

1. `xlcell wb create -f data.xlsx --sheets Data,Summary`
2. `xlcell cell set -f data.xlsx --ref "Data!B2" --value "hello"`
3. `xlcell cell get -f data.xlsx --ref "Data!B2"`
4. `xlcell row get -f data.xlsx --sheet Data --row 2`

**Every command** returns a JSON `ResponseEnvelope`:
`{"ok": bool, "command": "...", "result": {...}, "errors": [...], "warnings": [...], "metrics": {"duration_ms": N}}`

**Ref syntax:** `Sheet1!B2`; quote sheet names with spaces as `'My Sheet'!B2`.

**Safety rails** — mutating commands hold a `<file>.xlcell.lock` sidecar lock and support:
- `--dry-run` previews changes without writing
- `--backup` creates a timestamped .bak copy before writing

**Exit codes:** 0=success, 10=validation, 30=formula, 50=io, 90=internal

**Global options:** `--config PATH` (default `./xlcell.yaml`), `--events` (NDJSON events on stderr).
"""

_WB_EPILOG = """\
**Examples:**

`xlcell wb create -f new.xlsx`  — one sheet named Sheet1

`xlcell wb inspect -f data.xlsx`  — sheets, used ranges, shared-string count, fingerprint

`xlcell wb lock-status -f data.xlsx`  — check if another process holds the lock
"""

_SHEET_EPILOG = """\
**Examples:**

`xlcell sheet ls -f data.xlsx`  — list all sheets with ids, visibility and used range

`xlcell sheet create -f data.xlsx --name Costs`

Sheet names are required in ref syntax for cell commands (e.g. `Sheet1!A1`).
"""

_CELL_EPILOG = """\
**Examples:**

`xlcell cell get -f data.xlsx --ref "Sheet1!B2"`

`xlcell cell set -f data.xlsx --ref "Sheet1!B2" --value "Hello"`

`xlcell cell set -f data.xlsx --ref "Sheet1!B2" --value "Hello" --storage inline`

**Ref format:** always include the sheet name — `SheetName!CellRef`.
`cell set` creates the sheet, row and cell when they do not exist yet.
**Formula protection:** setting a cell that contains a formula requires `--force-overwrite-formulas`.
"""

_ROW_EPILOG = """\
**Examples:**

`xlcell row get -f data.xlsx --sheet Sheet1 --row 1`  — decoded cells of row 1 in column order
"""

_ADDR_EPILOG = """\
**Examples:**

`xlcell addr parse --ref "$AB$12"`  — column AB, column index 28, row 12

`xlcell addr column --index 28`  — AB

`xlcell addr column --letters AB`  — 28

Columns are numbered from 1 (A=1, Z=26, AA=27).
"""

_FILES_EPILOG = """\
**Examples:**

`xlcell files ls --dir ./reports`

A missing or unreadable directory returns an empty list with a warning.
"""


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(xlcell.__version__)
        raise typer.Exit()


app = typer.Typer(
    name="xlcell",
    help=_MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)

wb_app = typer.Typer(
    name="wb", help="Workbook creation, inspection and lock status.",
    epilog=_WB_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
sheet_app = typer.Typer(
    name="sheet", help="Sheet listing and creation.",
    epilog=_SHEET_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
cell_app = typer.Typer(
    name="cell", help="Single-cell read and write.",
    epilog=_CELL_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
row_app = typer.Typer(
    name="row", help="Row reads.",
    epilog=_ROW_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
addr_app = typer.Typer(
    name="addr", help="A1 address and column-letter conversions. No workbook needed.",
    epilog=_ADDR_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
files_app = typer.Typer(
    name="files", help="Directory listing.",
    epilog=_FILES_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)

app.add_typer(wb_app)
app.add_typer(sheet_app)
app.add_typer(cell_app)
app.add_typer(row_app)
app.add_typer(addr_app)
app.add_typer(files_app)

# Global options, set by the root callback
_state: dict = {"config": None, "events": False}


@app.callback(invoke_without_command=True)
def root(
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Print version and exit.", is_eager=True)
    ] = False,
    config: Annotated[
        Optional[str], typer.Option("--config", help="Path to an xlcell.yaml config file (default: ./xlcell.yaml)")
    ] = None,
    events: Annotated[
        bool, typer.Option("--events", help="Emit NDJSON lifecycle events to stderr")
    ] = False,
) -> None:
    if version:
        _version_callback(True)
    _state["config"] = config
    _state["events"] = events


# Type aliases for common options
FilePath = Annotated[str, typer.Option("--file", "-f", help="Path to .xlsx workbook file")]
RefOpt = Annotated[str, typer.Option("--ref", help="Cell reference as SheetName!Cell (e.g. Sheet1!B2)")]
BackupFlag = Annotated[bool, typer.Option("--backup", help="Create timestamped .bak copy before writing (also on when config sets backup: true)")]
DryRunFlag = Annotated[bool, typer.Option("--dry-run", help="Preview changes without writing to disk")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _emit(envelope, code=None):
    print_response(envelope)
    raise typer.Exit(code if code is not None else exit_code_for(envelope))


def _settings_or_emit(cmd: str) -> Settings:
    """Load settings from --config or the working directory, or emit ERR_CONFIG_INVALID."""
    path = _state.get("config")
    try:
        if path:
            return Settings.load(path)
        return Settings.load_from_dir(Path.cwd())
    except (OSError, ValueError, yaml.YAMLError) as e:
        env = error_envelope(cmd, "ERR_CONFIG_INVALID", f"Cannot load config: {e}")
        _emit(env)


def _events(settings: Settings) -> EventEmitter:
    if _state.get("events"):
        return EventEmitter(enabled=True)
    return EventEmitter.from_env(default=settings.events)


def _load_pkg_or_emit(file: str, cmd: str, *, read_write: bool = False, events: EventEmitter | None = None) -> SpreadsheetPackage:
    """Open a SpreadsheetPackage, or emit an error envelope."""
    try:
        return SpreadsheetPackage.open(file, read_write=read_write, events=events)
    except FileNotFoundError:
        env = error_envelope(cmd, "ERR_WORKBOOK_NOT_FOUND", f"File not found: {file}", target=Target(file=file))
        _emit(env)
    except WorkbookCorruptError as e:
        _emit(exception_envelope(cmd, e, target=Target(file=file)))


def _split_ref_or_emit(ref: str, cmd: str, file: str | None = None) -> tuple[str, str]:
    try:
        return split_sheet_ref(ref)
    except InvalidAddressError as e:
        _emit(exception_envelope(cmd, e, target=Target(file=file, ref=ref)))


@contextmanager
def _mutation_lock(file: str, cmd: str, timeout: float) -> Iterator[None]:
    """Hold the workbook's sidecar lock for the body, or emit ERR_LOCK_HELD."""
    if not Path(file).exists():
        env = error_envelope(cmd, "ERR_WORKBOOK_NOT_FOUND", f"File not found: {file}", target=Target(file=file))
        _emit(env)
    from xlcell.io.fileops import WorkbookLock

    try:
        with WorkbookLock(file, timeout=timeout):
            yield
    except portalocker.LockException:
        env = error_envelope(
            cmd, "ERR_LOCK_HELD",
            f"Workbook is locked by another process: {file}. Check `xlcell wb lock-status`.",
            target=Target(file=file),
        )
        _emit(env)


def _save_or_emit(pkg: SpreadsheetPackage, file: str, cmd: str, *, dry_run: bool, backup: bool) -> str | None:
    """Back up and save unless dry-running. Returns the backup path, if any."""
    if dry_run:
        return None
    backup_path = None
    try:
        if backup:
            from xlcell.io.fileops import backup as make_backup
            backup_path = make_backup(file)
        pkg.save()
    except OSError as e:
        # NotWritableError included
        _emit(exception_envelope(cmd, e, target=Target(file=file)))
    return backup_path


# ---------------------------------------------------------------------------
# xlcell version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the xlcell version.

    Example: `xlcell version`
    """
    env = success_envelope("version", {"version": xlcell.__version__})
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell wb create
# ---------------------------------------------------------------------------
@wb_app.command("create")
def wb_create(
    file: FilePath,
    sheets: Annotated[Optional[str], typer.Option("--sheets", help="Comma-separated sheet names (e.g. 'Revenue,Summary')")] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite file if it already exists")] = False,
):
    """Create a new empty workbook.

    Creates a new .xlsx file. Errors if file already exists unless `--force`.
    Use `--sheets` to name the initial sheets (default: the configured
    `default_sheet`, normally 'Sheet1').

    Example: `xlcell wb create -f new.xlsx`

    Example: `xlcell wb create -f report.xlsx --sheets Revenue,Summary,Costs`

    See also: `xlcell sheet create` to add sheets to an existing workbook.
    """
    settings = _settings_or_emit("wb.create")
    events = _events(settings)
    sheet_list = [s.strip() for s in sheets.split(",") if s.strip()] if sheets else [settings.default_sheet]

    with Timer() as t:
        try:
            pkg = SpreadsheetPackage.create(file, sheets=sheet_list, overwrite=force, events=events)
        except FileExistsError as e:
            env = error_envelope(
                "wb.create", "ERR_FILE_EXISTS",
                f"{e}. Use --force to overwrite.",
                target=Target(file=file),
            )
            _emit(env)
        except (OSError, ValueError) as e:
            _emit(exception_envelope("wb.create", e, target=Target(file=file)))
        with pkg:
            meta = pkg.get_workbook_meta()

    result = {
        "path": meta.path,
        "fingerprint": meta.fingerprint,
        "sheets": [s.name for s in meta.sheets],
    }
    env = success_envelope("wb.create", result, target=Target(file=file), duration_ms=t.elapsed_ms)
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell wb inspect
# ---------------------------------------------------------------------------
@wb_app.command("inspect")
def wb_inspect(
    file: FilePath,
):
    """Inspect workbook metadata — sheets, used ranges, shared strings, fingerprint.

    Example: `xlcell wb inspect -f data.xlsx`

    See also: `xlcell sheet ls` for the sheet list alone.
    """
    events = _events(_settings_or_emit("wb.inspect"))
    with Timer() as t:
        with _load_pkg_or_emit(file, "wb.inspect", events=events) as pkg:
            meta = pkg.get_workbook_meta()

    env = success_envelope(
        "wb.inspect",
        meta.model_dump(),
        target=Target(file=file),
        duration_ms=t.elapsed_ms,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell wb lock-status
# ---------------------------------------------------------------------------
@wb_app.command("lock-status")
def wb_lock_status_cmd(
    file: FilePath,
):
    """Check if a workbook file is locked by another process.

    Returns lock status and lock holder info if available. Check this
    before mutating operations to avoid ERR_LOCK_HELD errors.

    Example: `xlcell wb lock-status -f data.xlsx`
    """
    from xlcell.io.fileops import check_lock

    with Timer() as t:
        result = check_lock(file)

    env = success_envelope("wb.lock_status", result, target=Target(file=file), duration_ms=t.elapsed_ms)
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell sheet ls
# ---------------------------------------------------------------------------
@sheet_app.command("ls")
def sheet_ls(
    file: FilePath,
):
    """List all sheets in a workbook with name, index, id and used range.

    Use this to discover valid sheet names for ref syntax (`SheetName!A1`).

    Example: `xlcell sheet ls -f data.xlsx`
    """
    events = _events(_settings_or_emit("sheet.ls"))
    with Timer() as t:
        with _load_pkg_or_emit(file, "sheet.ls", events=events) as pkg:
            sheets = pkg.get_workbook_meta().sheets

    env = success_envelope(
        "sheet.ls",
        [s.model_dump() for s in sheets],
        target=Target(file=file),
        duration_ms=t.elapsed_ms,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell sheet create
# ---------------------------------------------------------------------------
@sheet_app.command("create")
def sheet_create(
    file: FilePath,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Name for the new sheet (default: Sheet<id>)")] = None,
    backup: BackupFlag = False,
    dry_run: DryRunFlag = False,
):
    """Add a new worksheet to an existing workbook. Mutating.

    The sheet gets the next free sheet id. Without `--name` it is called
    `Sheet<id>`. Errors if a sheet with that name already exists.

    Example: `xlcell sheet create -f data.xlsx --name Costs`

    Example: `xlcell sheet create -f data.xlsx --backup`

    See also: `xlcell sheet ls` to list existing sheets.
    """
    settings = _settings_or_emit("sheet.create")
    events = _events(settings)
    backup = backup or settings.backup

    with Timer() as t:
        with _mutation_lock(file, "sheet.create", settings.lock_timeout):
            with _load_pkg_or_emit(file, "sheet.create", read_write=True, events=events) as pkg:
                if name is not None and name.casefold() in {n.casefold() for n in pkg.sheet_names()}:
                    env = error_envelope(
                        "sheet.create", "ERR_SHEET_EXISTS",
                        f"Sheet '{name}' already exists in workbook",
                        target=Target(file=file, sheet=name),
                    )
                    _emit(env)

                try:
                    ws = pkg.get_or_create_worksheet(name)
                except ValueError as e:
                    _emit(exception_envelope("sheet.create", e, target=Target(file=file, sheet=name)))
                backup_path = _save_or_emit(pkg, file, "sheet.create", dry_run=dry_run, backup=backup)

    result = {
        "dry_run": dry_run,
        "backup_path": backup_path,
        "sheet": ws.name,
        "sheet_id": ws.sheet_id,
    }
    env = success_envelope(
        "sheet.create", result,
        target=Target(file=file, sheet=ws.name),
        changes=[ChangeRecord(
            type="sheet.create",
            target=ws.name,
            after={"sheet": ws.name, "sheet_id": ws.sheet_id, "part": ws.part_name},
            impact={"cells": 0},
        )],
        duration_ms=t.elapsed_ms,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell cell get
# ---------------------------------------------------------------------------
@cell_app.command("get")
def cell_get_cmd(
    file: FilePath,
    ref: RefOpt,
):
    """Read a single cell's display value and type.

    Shared strings are resolved through the workbook's string table and
    booleans read as `TRUE`/`FALSE`. A cell that does not exist reads as
    `""` with type `empty`.

    Example: `xlcell cell get -f data.xlsx --ref "Sheet1!B2"`

    See also: `xlcell cell set` to write, `xlcell row get` for a whole row.
    """
    from xlcell.engine.cells import cell_get

    sheet_name, cell_ref = _split_ref_or_emit(ref, "cell.get", file)
    events = _events(_settings_or_emit("cell.get"))

    with Timer() as t:
        with _load_pkg_or_emit(file, "cell.get", events=events) as pkg:
            try:
                result = cell_get(pkg, sheet_name, cell_ref)
            except (SheetNotFoundError, InvalidAddressError, WorkbookCorruptError) as e:
                env = exception_envelope("cell.get", e, target=Target(file=file, sheet=sheet_name, ref=ref))
                _emit(env)

    env = success_envelope(
        "cell.get",
        result.model_dump(),
        target=Target(file=file, sheet=sheet_name, ref=ref),
        duration_ms=t.elapsed_ms,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell cell set
# ---------------------------------------------------------------------------
@cell_app.command("set")
def cell_set_cmd(
    file: FilePath,
    ref: RefOpt,
    value: Annotated[str, typer.Option("--value", help="Text to write")],
    storage: Annotated[Optional[str], typer.Option("--storage", help="'shared' (string table) or 'inline' (default from config)")] = None,
    force_overwrite_formulas: Annotated[bool, typer.Option("--force-overwrite-formulas", help="Allow overwriting a cell that contains a formula")] = False,
    backup: BackupFlag = False,
    dry_run: DryRunFlag = False,
):
    """Set a cell's text. Mutating.

    Writes text to a single cell, creating the sheet, row and cell as
    needed. With `shared` storage the text is interned in the shared-string
    table, so identical texts share one entry. Refuses to overwrite a
    formula unless `--force-overwrite-formulas` is set.

    Example: `xlcell cell set -f data.xlsx --ref "Sheet1!B2" --value "Hello"`

    Example: `xlcell cell set -f data.xlsx --ref "Sheet1!A1" --value "Hello" --storage inline --backup`

    See also: `xlcell cell get` to read.
    """
    from xlcell.engine.cells import set_cell_text

    sheet_name, cell_ref = _split_ref_or_emit(ref, "cell.set", file)
    settings = _settings_or_emit("cell.set")
    events = _events(settings)
    storage = storage or settings.string_storage
    backup = backup or settings.backup

    with Timer() as t:
        with _mutation_lock(file, "cell.set", settings.lock_timeout):
            with _load_pkg_or_emit(file, "cell.set", read_write=True, events=events) as pkg:
                try:
                    change = set_cell_text(
                        pkg, sheet_name, cell_ref, value,
                        storage=storage,
                        force_overwrite_formulas=force_overwrite_formulas,
                    )
                except (ValueError, WorkbookCorruptError) as e:
                    # bad address, unknown storage or a guarded formula
                    env = exception_envelope("cell.set", e, target=Target(file=file, sheet=sheet_name, ref=ref))
                    _emit(env)

                backup_path = _save_or_emit(pkg, file, "cell.set", dry_run=dry_run, backup=backup)

    result = {"dry_run": dry_run, "backup_path": backup_path}
    env = success_envelope(
        "cell.set",
        result,
        target=Target(file=file, sheet=sheet_name, ref=ref),
        changes=[change],
        duration_ms=t.elapsed_ms,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell row get
# ---------------------------------------------------------------------------
@row_app.command("get")
def row_get_cmd(
    file: FilePath,
    sheet: Annotated[str, typer.Option("--sheet", "-s", help="Sheet name (as shown by 'xlcell sheet ls')")],
    row: Annotated[int, typer.Option("--row", "-r", help="1-based row number")],
):
    """Read every cell of one row, in column order.

    Returns `[]` for a row with no cells.

    Example: `xlcell row get -f data.xlsx --sheet Sheet1 --row 1`
    """
    from xlcell.engine.cells import read_row

    if row < 1:
        env = error_envelope("row.get", "ERR_INDEX_INVALID", f"Row number must be >= 1, got {row}", target=Target(file=file, sheet=sheet))
        _emit(env)
    events = _events(_settings_or_emit("row.get"))

    with Timer() as t:
        with _load_pkg_or_emit(file, "row.get", events=events) as pkg:
            try:
                cells = read_row(pkg, sheet, row)
            except (SheetNotFoundError, WorkbookCorruptError) as e:
                _emit(exception_envelope("row.get", e, target=Target(file=file, sheet=sheet)))

    env = success_envelope(
        "row.get",
        {"row": row, "cells": cells},
        target=Target(file=file, sheet=sheet),
        duration_ms=t.elapsed_ms,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell addr parse
# ---------------------------------------------------------------------------
@addr_app.command("parse")
def addr_parse_cmd(
    ref: Annotated[str, typer.Option("--ref", help="A1-style cell reference, '$' anchors allowed (e.g. $AB$12)")],
):
    """Split a cell reference into column letters, column index and row.

    Example: `xlcell addr parse --ref B12`
    """
    try:
        addr = parse_address(ref)
    except InvalidAddressError as e:
        _emit(exception_envelope("addr.parse", e, target=Target(ref=ref)))

    info = AddressInfo(ref=str(addr), column=addr.column, column_index=addr.column_index, row=addr.row)
    env = success_envelope("addr.parse", info.model_dump(), target=Target(ref=ref))
    _emit(env)


# ---------------------------------------------------------------------------
# xlcell addr column
# ---------------------------------------------------------------------------
@addr_app.command("column")
def addr_column_cmd(
    index: Annotated[Optional[int], typer.Option("--index", "-i", help="1-based column index to convert to letters")] = None,
    letters: Annotated[Optional[str], typer.Option("--letters", "-l", help="Column letters to convert to an index")] = None,
):
    """Convert between column letters and 1-based column indices.

    Pass exactly one of `--index` or `--letters`.

    Example: `xlcell addr column --index 27`  — AA

    Example: `xlcell addr column --letters AZ`  — 52
    """
    if (index is None) == (letters is None):
        env = error_envelope("addr.column", "ERR_USAGE", "Pass exactly one of --index or --letters")
        _emit(env)

    if index is not None:
        try:
            column = index_to_column_letters(index)
        except InvalidIndexError as e:
            _emit(exception_envelope("addr.column", e))
        _emit(success_envelope("addr.column", {"column": column, "column_index": index}))

    try:
        column = parse_column(letters)
    except InvalidAddressError as e:
        _emit(exception_envelope("addr.column", e))
    _emit(success_envelope("addr.column", {"column": column, "column_index": column_letters_to_index(column)}))


# ---------------------------------------------------------------------------
# xlcell files ls
# ---------------------------------------------------------------------------
@files_app.command("ls")
def files_ls_cmd(
    directory: Annotated[str, typer.Option("--dir", "-d", help="Directory to list")] = ".",
    include_hidden: Annotated[bool, typer.Option("--hidden", help="Include dot-files and hidden files")] = False,
):
    """List the files directly inside a directory, sorted by name.

    Best-effort: a missing or unreadable directory returns an empty list and
    a `WARN_LIST_FAILED` warning rather than an error.

    Example: `xlcell files ls --dir ./reports`
    """
    from xlcell.io.fileops import list_files

    events = _events(_settings_or_emit("files.ls"))
    with Timer() as t:
        listing = list_files(directory, include_hidden=include_hidden)

    warnings: list[WarningDetail] = []
    if listing.error:
        events.emit("files.list_failed", {"path": directory, "error": listing.error})
        warnings.append(WarningDetail(code="WARN_LIST_FAILED", message=listing.error))
    env = success_envelope(
        "files.ls",
        listing.model_dump(),
        warnings=warnings,
        duration_ms=t.elapsed_ms,
    )
    _emit(env)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------
def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Machine consumers get an envelope, never a raw traceback.
        env = error_envelope(
            "unknown",
            "ERR_INTERNAL",
            str(exc),
        )
        print_response(env)
        raise SystemExit(90) from exc


if __name__ == "__main__":
    main()
