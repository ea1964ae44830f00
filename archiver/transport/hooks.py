"""Interface the upload transport calls into: ``on_admit`` and ``on_complete``.

The transport decides how it waits: ``on_complete`` hands back a Future from a
thread pool so one upload's blocking I/O never holds up another, while
``on_complete_sync`` runs the pipeline inline.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from http import HTTPStatus

from archiver.config.pipeline_config import PipelineConfig
from archiver.finalizer.finalizer import Finalizer, build_finalizer
from archiver.finalizer.models import FinalizeResult, UploadRecord
from archiver.logging.logger import Log
from archiver.storage.space_guard import check_sufficient, format_bytes
from archiver.worker.job_runner import FinalizationRunner


@dataclass(frozen=True)
class AdmissionDecision:
    accepted: bool
    status_code: int = HTTPStatus.OK
    message: str = ""


class UploadHooks:
    """Pre-accept and post-complete hooks backed by the finalization pipeline."""

    def __init__(
        self,
        config_loader: Callable[[], PipelineConfig],
        finalizer_factory: Callable[[PipelineConfig], Finalizer] = build_finalizer,
        max_workers: int = 2,
    ) -> None:
        self._config_loader = config_loader
        self._finalizer_factory = finalizer_factory
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="Finalize"
        )

    def on_admit(self, declared_size: int | None) -> AdmissionDecision:
        """Reject an upload up front when staging storage cannot hold it."""
        if not declared_size:
            return AdmissionDecision(accepted=True)
        config = self._config_loader()
        check = check_sufficient(
            config.staging_dir, declared_size, config.admission_margin_bytes
        )
        if check.sufficient:
            return AdmissionDecision(accepted=True)
        message = (
            f"Insufficient storage: required {format_bytes(check.required_with_margin)}, "
            f"available {format_bytes(check.available)}"
        )
        Log.error(f"Upload rejected: {message}")
        return AdmissionDecision(
            accepted=False,
            status_code=HTTPStatus.INSUFFICIENT_STORAGE,
            message=message,
        )

    def _runner(self) -> FinalizationRunner:
        return FinalizationRunner(self._finalizer_factory(self._config_loader()))

    def on_complete(self, upload: UploadRecord) -> "Future[FinalizeResult | None]":
        return self._executor.submit(self._runner().run, upload)

    def on_complete_sync(self, upload: UploadRecord) -> FinalizeResult | None:
        return self._runner().run(upload)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "UploadHooks":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
