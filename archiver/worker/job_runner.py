from archiver.finalizer.finalizer import Finalizer
from archiver.finalizer.models import FinalizeResult, UploadRecord
from archiver.logging.logger import Log


class FinalizationRunner:
    """Run one finalization and log, rather than propagate, its failure."""

    def __init__(self, finalizer: Finalizer) -> None:
        self._finalizer = finalizer

    def run(self, upload: UploadRecord) -> FinalizeResult | None:
        Log.info("Upload complete, running post-finish pipeline", upload_id=upload.upload_id)
        try:
            result = self._finalizer.finalize(upload)
        except Exception as exc:
            Log.exception(f"Post-finish pipeline failed: {exc}", upload_id=upload.upload_id)
            return None
        Log.info(f"Post-finish pipeline done: {result.archived_path}", upload_id=upload.upload_id)
        return result
