"""File operations: fingerprinting, backup, atomic write, locking, listing."""

from __future__ import annotations

import hashlib
import os
import shutil
import stat
import tempfile
import time
from datetime import datetime, timezone
from io import TextIOWrapper
from pathlib import Path

import portalocker

from xlcell.contracts.responses import FileListing

LOCK_SUFFIX = ".xlcell.lock"


def fingerprint(path: str | Path) -> str:
    """Compute SHA-256 fingerprint of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return f"sha256:{h.hexdigest()}"


def backup(path: str | Path) -> str:
    """Copy a workbook to ``<stem>.<UTC timestamp>.bak<suffix>``. Returns the copy's path."""
    path = Path(path)
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    backup_path = path.with_name(f"{path.stem}.{ts}.bak{path.suffix}")
    shutil.copy2(path, backup_path)
    return str(backup_path)


def atomic_write(target: str | Path, data: bytes) -> None:
    """Write data to target atomically via temp file + rename."""
    target = Path(target)
    fd, tmp_path = tempfile.mkstemp(
        dir=target.parent, suffix=target.suffix, prefix=".xlcell_tmp_"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        shutil.move(tmp_path, target)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def lock_path_for(path: str | Path) -> Path:
    path = Path(path).resolve()
    return path.parent / (path.name + LOCK_SUFFIX)


def _try_lock(fh: TextIOWrapper) -> None:
    portalocker.lock(fh, portalocker.LOCK_EX | portalocker.LOCK_NB)


class WorkbookLock:
    """Exclusive sidecar lock held across a read-modify-write of a package.

    The ``<file>.xlcell.lock`` sidecar outlives the lock; a crashed holder
    leaves it unlocked, so the next process acquires it normally.
    """

    def __init__(self, workbook_path: str | Path, *, timeout: float = 0) -> None:
        self.workbook_path = Path(workbook_path).resolve()
        self.timeout = timeout
        self._lock_path = lock_path_for(self.workbook_path)
        self._lock_file: TextIOWrapper | None = None

    @property
    def lock_path(self) -> Path:
        return self._lock_path

    def _acquire(self, fh: TextIOWrapper) -> None:
        if self.timeout <= 0:
            _try_lock(fh)
            return
        deadline = time.monotonic() + self.timeout
        interval = min(0.1, max(0.01, self.timeout / 20))
        while True:
            try:
                _try_lock(fh)
                return
            except portalocker.LockException:
                if time.monotonic() >= deadline:
                    raise
                time.sleep(interval)

    def __enter__(self) -> "WorkbookLock":
        fh = open(self._lock_path, "a+")  # noqa: SIM115
        try:
            self._acquire(fh)
        except portalocker.LockException:
            fh.close()
            raise
        self._lock_file = fh

        # holder info for check_lock
        fh.seek(0)
        fh.truncate()
        fh.write(f"pid={os.getpid()}\n")
        fh.write(f"time={datetime.now(timezone.utc).isoformat()}\n")
        fh.flush()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if self._lock_file is None:
            return
        try:
            portalocker.unlock(self._lock_file)
        finally:
            self._lock_file.close()
            self._lock_file = None


def _read_holder(lock_path: Path) -> dict[str, str]:
    holder: dict[str, str] = {}
    try:
        for line in lock_path.read_text().strip().splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                holder[k.strip()] = v.strip()
    except OSError:
        pass
    return holder


def check_lock(path: str | Path) -> dict:
    """Best-effort probe of a workbook's sidecar lock.

    Returns ``exists`` (workbook present), ``locked``, ``lock_file`` and,
    when locked, the ``holder`` pid/time written by :class:`WorkbookLock`.
    """
    path = Path(path).resolve()
    lock_path = lock_path_for(path)
    status = {"exists": path.exists(), "locked": False, "lock_file": str(lock_path)}
    if not lock_path.exists():
        return status

    try:
        with open(lock_path, "a+") as fh:
            _try_lock(fh)
            portalocker.unlock(fh)
    except portalocker.LockException:
        status["locked"] = True
        status["holder"] = _read_holder(lock_path)
    except OSError:
        status["check_error"] = True
    return status


def read_text_safe(path: str | Path) -> str:
    """Read UTF-8 text, dropping a leading BOM if present."""
    return Path(path).read_text(encoding="utf-8-sig")


def _is_hidden(entry: os.DirEntry) -> bool:
    if entry.name.startswith("."):
        return True
    attrs = getattr(entry.stat(), "st_file_attributes", 0)
    return bool(attrs & getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0))


def list_files(folder: str | Path, *, include_hidden: bool = False) -> FileListing:
    """List the regular files directly inside *folder*, sorted by name.

    Best-effort: a missing or unreadable directory yields an empty listing
    with ``error`` set instead of raising.
    """
    listing = FileListing(path=str(folder))
    try:
        with os.scandir(folder) as it:
            names = [
                entry.name
                for entry in it
                if entry.is_file() and (include_hidden or not _is_hidden(entry))
            ]
    except FileNotFoundError:
        listing.error = f"The specified directory does not exist: {folder}"
        return listing
    except OSError as e:
        listing.error = f"Cannot list {folder}: {e}"
        return listing
    listing.files = sorted(names)
    return listing
