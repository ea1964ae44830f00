from dataclasses import dataclass, field
from pathlib import Path

from archiver.probe.models import ProbeFailure
from archiver.validation.models import FormatCheck

# Keys of the client-submitted metadata map.
FILENAME_KEY = "filename"
TITLE_KEY = "displayname"
IDENTITY1_KEY = "studentId"
IDENTITY2_KEY = "name"


@dataclass(frozen=True)
class UploadRecord:
    """A completed transfer as handed over by the transport layer."""

    upload_id: str
    staging_path: Path
    size: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FinalizeResult:
    upload_id: str
    archived_filename: str
    archived_path: Path
    size: int
    digest: str
    format_check: FormatCheck
    probe_failure: ProbeFailure | None
    receipt_path: Path
