import time
from pathlib import Path

from archiver.finalizer.models import UploadRecord
from archiver.logging.logger import Log
from archiver.transport.hooks import UploadHooks
from archiver.worker.upload_info import completed_uploads, staged_upload_ids


class Worker:
    """Poll loop: sleep -> scan staging -> dispatch newly completed uploads."""

    def __init__(
        self,
        hooks: UploadHooks,
        staging_dir: Path,
        poll_interval_seconds: int,
    ) -> None:
        self._hooks = hooks
        self._staging_dir = staging_dir
        self._poll_interval_seconds = poll_interval_seconds
        self._dispatched: set[str] = set()

    def run(self, max_uploads: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_uploads is set, stop after dispatching that many uploads (for testing).
        """
        Log.info(f"Worker started, watching {self._staging_dir}")
        dispatched = 0
        try:
            while max_uploads is None or dispatched < max_uploads:
                uploads = self._claim_new_uploads()
                if not uploads:
                    Log.debug("No completed uploads, sleeping")
                    time.sleep(self._poll_interval_seconds)
                    continue
                for upload in uploads:
                    self._hooks.on_complete(upload)
                    dispatched += 1
                    if max_uploads is not None and dispatched >= max_uploads:
                        break
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _claim_new_uploads(self) -> list[UploadRecord]:
        """Each upload id is dispatched at most once while its info file is in staging."""
        try:
            self._dispatched &= staged_upload_ids(self._staging_dir)
            uploads = completed_uploads(self._staging_dir)
        except OSError as exc:
            Log.warning(f"Staging scan failed, will retry: {exc}")
            return []
        fresh = [u for u in uploads if u.upload_id not in self._dispatched]
        self._dispatched.update(u.upload_id for u in fresh)
        return fresh
