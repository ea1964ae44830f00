import json
from pathlib import Path
from unittest.mock import MagicMock, patch

from archiver.finalizer.models import UploadRecord
from archiver.transport.hooks import UploadHooks
from archiver.worker.worker import Worker


def _make_worker(staging_dir: Path = Path("/staging")) -> tuple[Worker, MagicMock]:
    """Create a Worker with mocked hooks."""
    mock_hooks = MagicMock(spec=UploadHooks)
    worker = Worker(mock_hooks, staging_dir, poll_interval_seconds=1)
    return worker, mock_hooks


def _make_upload(upload_id: str = "abc123") -> UploadRecord:
    return UploadRecord(upload_id=upload_id, staging_path=Path("/staging") / upload_id, size=1)


def _stage(staging_dir: Path, upload_id: str, payload: bytes, declared: int) -> None:
    staging_dir.mkdir(parents=True, exist_ok=True)
    (staging_dir / upload_id).write_bytes(payload)
    (staging_dir / f"{upload_id}.json").write_text(
        json.dumps({"id": upload_id, "size": declared, "metadata": {}}), encoding="utf-8"
    )


class TestWorkerDispatch:
    def test_dispatches_upload_to_hooks(self) -> None:
        worker, mock_hooks = _make_worker()
        upload = _make_upload()

        with patch.object(
            worker, "_claim_new_uploads", side_effect=[[upload], KeyboardInterrupt]
        ):
            worker.run()

        mock_hooks.on_complete.assert_called_once_with(upload)

    def test_dispatches_multiple_uploads(self) -> None:
        worker, mock_hooks = _make_worker()

        with patch.object(
            worker,
            "_claim_new_uploads",
            side_effect=[[_make_upload("a"), _make_upload("b")], KeyboardInterrupt],
        ):
            worker.run()

        assert mock_hooks.on_complete.call_count == 2

    def test_stops_after_max_uploads(self) -> None:
        worker, mock_hooks = _make_worker()

        with patch.object(
            worker,
            "_claim_new_uploads",
            return_value=[_make_upload("a"), _make_upload("b")],
        ):
            worker.run(max_uploads=1)

        assert mock_hooks.on_complete.call_count == 1


class TestWorkerSleep:
    def test_sleeps_when_nothing_completed(self) -> None:
        worker, _hooks = _make_worker()

        with (
            patch.object(worker, "_claim_new_uploads", side_effect=[[], KeyboardInterrupt]),
            patch("archiver.worker.worker.time.sleep") as mock_sleep,
        ):
            worker.run()

        mock_sleep.assert_called_once_with(1)


class TestWorkerShutdown:
    def test_handles_keyboard_interrupt(self) -> None:
        worker, _hooks = _make_worker()

        with patch.object(worker, "_claim_new_uploads", side_effect=KeyboardInterrupt):
            worker.run()  # Should not raise


class TestClaimNewUploads:
    def test_claims_completed_upload_once(self, tmp_path: Path) -> None:
        _stage(tmp_path, "abc123", b"12345", declared=5)
        worker, _hooks = _make_worker(tmp_path)

        first = worker._claim_new_uploads()
        second = worker._claim_new_uploads()

        assert [u.upload_id for u in first] == ["abc123"]
        assert second == []

    def test_skips_partial_upload(self, tmp_path: Path) -> None:
        _stage(tmp_path, "abc123", b"123", declared=5)
        worker, _hooks = _make_worker(tmp_path)

        assert worker._claim_new_uploads() == []

    def test_partial_upload_claimed_once_complete(self, tmp_path: Path) -> None:
        _stage(tmp_path, "abc123", b"123", declared=5)
        worker, _hooks = _make_worker(tmp_path)
        assert worker._claim_new_uploads() == []

        (tmp_path / "abc123").write_bytes(b"12345")

        assert [u.upload_id for u in worker._claim_new_uploads()] == ["abc123"]

    def test_forgets_upload_once_info_file_is_gone(self, tmp_path: Path) -> None:
        _stage(tmp_path, "abc123", b"12345", declared=5)
        worker, _hooks = _make_worker(tmp_path)
        worker._claim_new_uploads()
        assert worker._dispatched == {"abc123"}

        (tmp_path / "abc123.json").unlink()
        (tmp_path / "abc123").unlink()
        worker._claim_new_uploads()

        assert worker._dispatched == set()
