"""Per-upload progress records for external observability.

One JSON file per upload, overwritten on every stage transition. The pipeline
never reads these back; they exist so an operator can see where a failed run
stopped and recover it by hand.
"""

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any


class Stage(str, Enum):
    MOVE = "move"
    FFPROBE = "ffprobe"
    HASH = "hash"
    RECEIPT = "receipt"
    COMPLETED = "completed"
    ERROR = "error"


def iso_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return iso_utc(datetime.now(timezone.utc))


@dataclass(frozen=True)
class ProgressRecord:
    upload_id: str
    current_step: Stage
    started_at: str
    completed_at: str | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "uploadId": self.upload_id,
            "currentStep": self.current_step.value,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ProgressRecord":
        return cls(
            upload_id=data["uploadId"],
            current_step=Stage(data["currentStep"]),
            started_at=data["startedAt"],
            completed_at=data.get("completedAt"),
        )


class ProgressTracker:
    """Writes the progress record of a single upload."""

    def __init__(self, progress_dir: Path, upload_id: str, started_at: str | None = None) -> None:
        self._progress_dir = progress_dir
        self._upload_id = upload_id
        self._started_at = started_at or utc_now_iso()

    @property
    def path(self) -> Path:
        return self._progress_dir / f"{self._upload_id}.json"

    def advance(self, stage: Stage, completed_at: str | None = None) -> ProgressRecord:
        """Overwrite the record; the temp-file swap keeps readers from seeing half a file."""
        record = ProgressRecord(
            upload_id=self._upload_id,
            current_step=stage,
            started_at=self._started_at,
            completed_at=completed_at,
        )
        self._progress_dir.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(f".{self.path.name}.tmp")
        temp_path.write_text(json.dumps(record.to_json(), indent=2), encoding="utf-8")
        os.replace(temp_path, self.path)
        return record

    def enter(self, stage: Stage) -> ProgressRecord:
        return self.advance(stage, completed_at=None)

    def finish(self, stage: Stage) -> ProgressRecord:
        return self.advance(stage, completed_at=utc_now_iso())

    def fail(self) -> ProgressRecord:
        return self.advance(Stage.ERROR, completed_at=utc_now_iso())


def read_progress(progress_dir: Path, upload_id: str) -> ProgressRecord | None:
    path = progress_dir / f"{upload_id}.json"
    if not path.exists():
        return None
    return ProgressRecord.from_json(json.loads(path.read_text(encoding="utf-8")))
