"""Append-only TSV log with one line per finalized upload.

Columns (no header): upload id, archived filename, identity-1, identity-2,
size in bytes, absolute archive path, localized completion timestamp.
"""

import threading
from dataclasses import dataclass
from pathlib import Path

from archiver.logging.logger import Log

_locks_guard = threading.Lock()
_locks: dict[Path, threading.Lock] = {}


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _locks_guard:
        return _locks.setdefault(key, threading.Lock())


def _clean(value: object) -> str:
    return str(value).replace("\t", " ").replace("\r", " ").replace("\n", " ")


@dataclass(frozen=True)
class LedgerEntry:
    upload_id: str
    archived_filename: str
    identity1: str
    identity2: str
    size: int
    archive_path: Path
    completed_at: str

    def to_line(self) -> str:
        fields = (
            self.upload_id,
            self.archived_filename,
            self.identity1,
            self.identity2,
            self.size,
            self.archive_path,
            self.completed_at,
        )
        return "\t".join(_clean(field) for field in fields) + "\n"

    @classmethod
    def from_line(cls, line: str) -> "LedgerEntry":
        upload_id, filename, identity1, identity2, size, path, completed_at = (
            line.rstrip("\n").split("\t")
        )
        return cls(
            upload_id=upload_id,
            archived_filename=filename,
            identity1=identity1,
            identity2=identity2,
            size=int(size),
            archive_path=Path(path),
            completed_at=completed_at,
        )


class AuditLedger:
    """Serializes appends within the process; each line is written in one call."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, entry: LedgerEntry) -> None:
        line = entry.to_line().encode("utf-8")
        with _lock_for(self._path):
            with self._path.open("ab") as handle:
                handle.write(line)
        Log.debug(f"Ledger entry appended for {entry.upload_id}", upload_id=entry.upload_id)

    def entries(self) -> list[LedgerEntry]:
        if not self._path.exists():
            return []
        with self._path.open(encoding="utf-8") as handle:
            return [LedgerEntry.from_line(line) for line in handle if line.strip()]
