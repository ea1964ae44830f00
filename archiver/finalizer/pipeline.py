from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from archiver.config.pipeline_config import PipelineConfig
from archiver.finalizer.models import FinalizeResult, UploadRecord
from archiver.probe.models import ProbeResult
from archiver.progress.tracker import ProgressTracker
from archiver.storage.layout import ArchiveLayout
from archiver.validation.models import FormatCheck


@dataclass(slots=True)
class PipelineContext:
    upload: UploadRecord
    config: PipelineConfig
    layout: ArchiveLayout
    progress: ProgressTracker
    started_at: datetime
    staged_size: int = 0
    title: str = ""
    identity1: str = ""
    identity2: str = ""
    original_filename: str = ""
    name_candidate: str = ""
    archived_filename: str = ""
    archived_path: Path | None = None
    relocation: str = ""
    probe: ProbeResult = field(default_factory=ProbeResult)
    digest: str = ""
    format_check: FormatCheck = field(default_factory=FormatCheck)
    size: int = 0
    receipt_path: Path | None = None
    completed_at: datetime | None = None
    error_message: str = ""

    @property
    def upload_id(self) -> str:
        return self.upload.upload_id

    def require_archived_path(self) -> Path:
        if self.archived_path is None:
            raise ValueError("PipelineContext.archived_path must be set before this step")
        return self.archived_path

    def to_result(self) -> FinalizeResult:
        if self.receipt_path is None:
            raise ValueError("PipelineContext.receipt_path must be set before building a result")
        return FinalizeResult(
            upload_id=self.upload_id,
            archived_filename=self.archived_filename,
            archived_path=self.require_archived_path(),
            size=self.size,
            digest=self.digest,
            format_check=self.format_check,
            probe_failure=self.probe.failure_reason,
            receipt_path=self.receipt_path,
        )


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
