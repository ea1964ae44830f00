from datetime import datetime, timezone

from archiver.config.pipeline_config import PipelineConfig
from archiver.finalizer.models import FinalizeResult, UploadRecord
from archiver.finalizer.pipeline import PipelineContext, PipelineStep
from archiver.finalizer.steps import (
    AppendLedgerStep,
    CleanupSidecarsStep,
    DecodeMetadataStep,
    ExtractMetadataStep,
    HashStep,
    MarkCompletedStep,
    MarkErrorStep,
    PrepareArchiveStep,
    RelocateStep,
    RenderReceiptStep,
    ResolveNameStep,
    SpaceCheckStep,
    StatStagingStep,
    ValidateFormatStep,
)
from archiver.logging.logger import Log
from archiver.probe.base import BaseMetadataExtractor
from archiver.probe.factory import MetadataExtractorFactory
from archiver.progress.tracker import ProgressTracker, iso_utc
from archiver.receipt.base import BaseReceiptRenderer
from archiver.receipt.factory import ReceiptRendererFactory
from archiver.storage.hasher import sha256_file
from archiver.storage.layout import ArchiveLayout
from archiver.storage.relocator import relocate


class Finalizer:
    """Orchestrates the post-upload finalization pipeline.

    Pipeline: stat -> space check -> name -> relocate -> sidecar cleanup ->
    metadata -> hash -> format check -> receipt -> completed -> ledger.
    Steps run strictly in order. On failure the error step records the
    ``error`` stage and the original exception is re-raised; the relocation
    is not rolled back.
    """

    def __init__(
        self,
        config: PipelineConfig,
        steps: list[PipelineStep],
        failed_step: PipelineStep,
    ) -> None:
        self._config = config
        self._steps = steps
        self._failed_step = failed_step

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def finalize(self, upload: UploadRecord) -> FinalizeResult:
        """Run the full pipeline for one completed upload."""
        started_at = datetime.now(timezone.utc)
        layout = ArchiveLayout(self._config.archive_dir)
        context = PipelineContext(
            upload=upload,
            config=self._config,
            layout=layout,
            progress=ProgressTracker(
                layout.progress_dir,
                upload.upload_id,
                started_at=iso_utc(started_at),
            ),
            started_at=started_at,
        )
        Log.info("Finalization started", upload_id=upload.upload_id)
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc)
            Log.error(f"Finalization failed: {exc}", upload_id=upload.upload_id)
            self._failed_step.run(context)
            raise
        Log.info(
            f"Finalization completed: {context.archived_filename}",
            upload_id=upload.upload_id,
        )
        return context.to_result()


def build_finalizer(
    config: PipelineConfig,
    extractor: BaseMetadataExtractor | None = None,
    renderer: BaseReceiptRenderer | None = None,
) -> Finalizer:
    """Build a Finalizer with all required adapters."""
    extractor = extractor or MetadataExtractorFactory.create(config)
    renderer = renderer or ReceiptRendererFactory.create(config.receipt_format)
    steps: list[PipelineStep] = [
        PrepareArchiveStep(),
        StatStagingStep(),
        SpaceCheckStep(),
        DecodeMetadataStep(),
        ResolveNameStep(),
        RelocateStep(relocator=relocate),
        CleanupSidecarsStep(),
        ExtractMetadataStep(extractor=extractor),
        HashStep(hasher=sha256_file),
        ValidateFormatStep(),
        RenderReceiptStep(renderer=renderer),
        MarkCompletedStep(),
        AppendLedgerStep(),
    ]
    return Finalizer(config=config, steps=steps, failed_step=MarkErrorStep())
