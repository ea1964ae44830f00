from dataclasses import dataclass
from pathlib import Path

LEDGER_FILENAME = "uploads.tsv"


@dataclass(frozen=True)
class ArchiveLayout:
    """Directory structure of the archive and its per-upload sidecar records."""

    archive_dir: Path

    @property
    def meta_dir(self) -> Path:
        return self.archive_dir / "meta"

    @property
    def hash_dir(self) -> Path:
        return self.archive_dir / "hash"

    @property
    def receipt_dir(self) -> Path:
        return self.archive_dir / "receipt"

    @property
    def progress_dir(self) -> Path:
        return self.archive_dir / ".progress"

    @property
    def ledger_path(self) -> Path:
        return self.archive_dir / LEDGER_FILENAME

    def meta_path(self, upload_id: str) -> Path:
        return self.meta_dir / f"{upload_id}.json"

    def digest_path(self, upload_id: str) -> Path:
        return self.hash_dir / f"{upload_id}.sha256"

    def receipt_path(self, upload_id: str, extension: str) -> Path:
        return self.receipt_dir / f"{upload_id}.{extension}"

    def progress_path(self, upload_id: str) -> Path:
        return self.progress_dir / f"{upload_id}.json"

    def ensure(self) -> None:
        """Create the archive root and every record directory."""
        for directory in (
            self.archive_dir,
            self.meta_dir,
            self.hash_dir,
            self.receipt_dir,
            self.progress_dir,
        ):
            directory.mkdir(parents=True, exist_ok=True)


def sidecar_paths(staging_dir: Path, upload_id: str) -> list[Path]:
    """Transport-layer metadata files kept next to a staged upload."""
    return [staging_dir / f"{upload_id}.json", staging_dir / f"{upload_id}.info"]
