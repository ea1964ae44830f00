from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from archiver.finalizer.exceptions import (
    FinalizationError,
    InsufficientStorageError,
    StagedFileNotFoundError,
)
from archiver.finalizer.models import FILENAME_KEY, IDENTITY1_KEY, IDENTITY2_KEY, TITLE_KEY
from archiver.finalizer.pipeline import PipelineContext, PipelineStep
from archiver.ledger.audit_ledger import AuditLedger, LedgerEntry
from archiver.logging.logger import Log
from archiver.naming.resolver import archive_filename, resolve_collision
from archiver.probe.base import BaseMetadataExtractor
from archiver.probe.models import ProbeFailure
from archiver.progress.tracker import Stage
from archiver.receipt.base import BaseReceiptRenderer
from archiver.receipt.builder import build_receipt
from archiver.receipt.formatting import localize_timestamp
from archiver.receipt.models import ReceiptFields
from archiver.storage.layout import sidecar_paths
from archiver.storage.record_store import write_bytes_once, write_json_once, write_text_once
from archiver.storage.space_guard import check_sufficient, format_bytes, usage_warning
from archiver.validation.format_validator import validate_format

MAX_CLAIM_ATTEMPTS = 100


def decode_field(value: str | None) -> str:
    """The transport layer already delivers decoded metadata values."""
    return value or ""


class PrepareArchiveStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.layout.ensure()
        return context


class StatStagingStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        path = context.upload.staging_path
        if not path.is_file():
            raise StagedFileNotFoundError(f"Staged upload not found: {path}")
        context.staged_size = path.stat().st_size
        Log.info(
            f"Staged upload is {format_bytes(context.staged_size)}",
            upload_id=context.upload_id,
        )
        return context


class SpaceCheckStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        archive_dir = context.config.archive_dir
        check = check_sufficient(
            archive_dir,
            context.staged_size,
            context.config.finalize_margin_bytes,
        )
        if not check.sufficient:
            raise InsufficientStorageError(
                f"Insufficient disk space: required={format_bytes(check.required_with_margin)}, "
                f"available={format_bytes(check.available)}",
                required=check.required_with_margin,
                available=check.available,
            )
        usage_warning(archive_dir, context.config.usage_warning_percent)
        return context


class DecodeMetadataStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        metadata = context.upload.metadata
        context.original_filename = decode_field(metadata.get(FILENAME_KEY))
        context.title = decode_field(metadata.get(TITLE_KEY))
        context.identity1 = decode_field(metadata.get(IDENTITY1_KEY))
        context.identity2 = decode_field(metadata.get(IDENTITY2_KEY))
        Log.debug(
            f"Submitted metadata: filename={context.original_filename!r} "
            f"title={context.title!r} id1={context.identity1!r} id2={context.identity2!r}",
            upload_id=context.upload_id,
        )
        return context


class ResolveNameStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.name_candidate = archive_filename(
            context.identity1,
            context.identity2,
            context.title,
            context.original_filename,
        )
        _assign_free_name(context)
        return context


def _assign_free_name(context: PipelineContext) -> None:
    archive_dir = context.config.archive_dir
    context.archived_filename = resolve_collision(archive_dir, context.name_candidate)
    context.archived_path = archive_dir / context.archived_filename


class RelocateStep(PipelineStep):
    def __init__(self, relocator: Callable[[Path, Path], str]) -> None:
        self._relocator = relocator

    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.enter(Stage.MOVE)
        dest = self._move(context)
        context.progress.finish(Stage.MOVE)
        Log.info(f"Moved to archive ({context.relocation}): {dest}", upload_id=context.upload_id)
        return context

    def _move(self, context: PipelineContext) -> Path:
        """Relocate, picking the next free name if a concurrent upload claims ours first."""
        for _attempt in range(MAX_CLAIM_ATTEMPTS):
            dest = context.require_archived_path()
            try:
                context.relocation = self._relocator(context.upload.staging_path, dest)
                return dest
            except FileExistsError:
                Log.info(f"Archive name taken during move: {dest.name}", upload_id=context.upload_id)
                if not context.name_candidate:
                    raise
                _assign_free_name(context)
        raise FinalizationError(
            f"No free archive name after {MAX_CLAIM_ATTEMPTS} attempts: {context.name_candidate}"
        )


class CleanupSidecarsStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        staging_dir = context.upload.staging_path.parent
        for path in sidecar_paths(staging_dir, context.upload_id):
            try:
                path.unlink()
                Log.debug(f"Removed transport metadata {path.name}", upload_id=context.upload_id)
            except FileNotFoundError:
                continue
            except OSError as exc:
                Log.warning(
                    f"Could not remove transport metadata {path.name}: {exc}",
                    upload_id=context.upload_id,
                )
        return context


class ExtractMetadataStep(PipelineStep):
    def __init__(self, extractor: BaseMetadataExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.enter(Stage.FFPROBE)
        context.probe = self._extractor.extract(context.require_archived_path())
        reason = context.probe.failure_reason
        if reason is None:
            Log.info("Media metadata extracted", upload_id=context.upload_id)
        elif reason is ProbeFailure.TOOL_NOT_FOUND:
            Log.warning("Metadata skipped: ffprobe not found", upload_id=context.upload_id)
        else:
            Log.warning("Metadata skipped: unsupported input", upload_id=context.upload_id)
        context.progress.finish(Stage.FFPROBE)
        write_json_once(context.layout.meta_path(context.upload_id), context.probe.metadata)
        return context


class HashStep(PipelineStep):
    def __init__(self, hasher: Callable[[Path], str]) -> None:
        self._hasher = hasher

    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.enter(Stage.HASH)
        context.digest = self._hasher(context.require_archived_path())
        write_text_once(context.layout.digest_path(context.upload_id), context.digest)
        context.progress.finish(Stage.HASH)
        Log.info(f"SHA-256: {context.digest}", upload_id=context.upload_id)
        return context


class ValidateFormatStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        mode = "basic" if context.config.allow_non_video_files else "strict"
        if not context.probe.has_metadata:
            Log.info(
                f"Skipping {mode} format check: no metadata",
                upload_id=context.upload_id,
            )
            return context
        context.format_check = validate_format(
            context.probe.metadata,
            context.config.requirements,
            allow_non_video=context.config.allow_non_video_files,
        )
        Log.info(
            f"{mode.capitalize()} format check: valid={context.format_check.valid} "
            f"errors={len(context.format_check.errors)} "
            f"warnings={len(context.format_check.warnings)}",
            upload_id=context.upload_id,
        )
        return context


class RenderReceiptStep(PipelineStep):
    def __init__(self, renderer: BaseReceiptRenderer) -> None:
        self._renderer = renderer

    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.enter(Stage.RECEIPT)
        context.size = context.probe.container_size() or context.staged_size
        receipt = build_receipt(
            ReceiptFields(
                receipt_id=context.upload_id,
                filename=context.archived_filename,
                display_name=context.title,
                size=context.size,
                digest=context.digest,
                metadata=context.probe.metadata,
                format_check=context.format_check,
                timestamp=datetime.now(timezone.utc),
                probe_failure=context.probe.failure_reason,
                allow_non_video=context.config.allow_non_video_files,
                timezone=context.config.timezone,
            )
        )
        path = context.layout.receipt_path(context.upload_id, self._renderer.extension)
        context.receipt_path = write_bytes_once(path, self._renderer.render(receipt))
        context.progress.finish(Stage.RECEIPT)
        Log.info(f"Receipt written: {path}", upload_id=context.upload_id)
        return context


class MarkCompletedStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.enter(Stage.COMPLETED)
        context.completed_at = datetime.now(timezone.utc)
        context.progress.finish(Stage.COMPLETED)
        return context


class AppendLedgerStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        completed_at = context.completed_at or datetime.now(timezone.utc)
        entry = LedgerEntry(
            upload_id=context.upload_id,
            archived_filename=context.archived_filename,
            identity1=context.identity1,
            identity2=context.identity2,
            size=context.size,
            archive_path=context.require_archived_path().resolve(),
            completed_at=localize_timestamp(completed_at, context.config.timezone),
        )
        AuditLedger(context.layout.ledger_path).append(entry)
        Log.info("Recorded in audit ledger", upload_id=context.upload_id)
        return context


class MarkErrorStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            context.progress.fail()
        except OSError as exc:
            Log.error(f"Could not record error progress: {exc}", upload_id=context.upload_id)
        return context
