from collections import namedtuple
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from archiver.config.pipeline_config import PipelineConfig
from archiver.finalizer.models import UploadRecord

GIB = 1024 * 1024 * 1024

DiskUsage = namedtuple("DiskUsage", ["total", "used", "free"])


def make_metadata(
    video: dict[str, Any] | None = None,
    audio: dict[str, Any] | None = None,
    size: int = 2048,
) -> dict[str, Any]:
    """Build ffprobe-style output with one video and one audio stream by default."""
    video_stream = {
        "index": 0,
        "codec_type": "video",
        "codec_name": "h264",
        "codec_long_name": "H.264 / AVC / MPEG-4 AVC / MPEG-4 part 10",
        "width": 1920,
        "height": 1080,
        "r_frame_rate": "24000/1001",
        "bit_rate": "8000000",
    }
    audio_stream = {
        "index": 1,
        "codec_type": "audio",
        "codec_name": "pcm_s16le",
        "codec_long_name": "PCM signed 16-bit little-endian",
        "sample_rate": "48000",
        "channels": 2,
        "bit_rate": "1536000",
    }
    video_stream.update(video or {})
    audio_stream.update(audio or {})
    return {
        "streams": [video_stream, audio_stream],
        "format": {
            "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
            "size": str(size),
            "duration": "10.010000",
        },
    }


@pytest.fixture()
def video_metadata() -> dict[str, Any]:
    return make_metadata()


@pytest.fixture()
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    archive_dir = tmp_path / "archive"
    return PipelineConfig(
        archive_dir=archive_dir,
        staging_dir=archive_dir / "incoming",
        admission_margin_bytes=5 * GIB,
        finalize_margin_bytes=2 * GIB,
        receipt_format="html",
        timezone="UTC",
    )


@pytest.fixture()
def plenty_of_space():
    """Pretend every filesystem has 50 GiB free and is 10% used."""
    usage = DiskUsage(total=60 * GIB, used=6 * GIB, free=50 * GIB)
    with patch("archiver.storage.space_guard.shutil.disk_usage", return_value=usage) as mock:
        yield mock


def stage_upload(
    config: PipelineConfig,
    upload_id: str = "abc123",
    payload: bytes = b"\x00\x00\x00\x18ftypqt  " * 128,
    metadata: dict[str, str] | None = None,
) -> UploadRecord:
    """Write a staged upload plus the transport's sidecar files."""
    config.staging_dir.mkdir(parents=True, exist_ok=True)
    staging_path = config.staging_dir / upload_id
    staging_path.write_bytes(payload)
    (config.staging_dir / f"{upload_id}.json").write_text("{}", encoding="utf-8")
    (config.staging_dir / f"{upload_id}.info").write_text("{}", encoding="utf-8")
    return UploadRecord(
        upload_id=upload_id,
        staging_path=staging_path,
        size=len(payload),
        metadata=metadata
        if metadata is not None
        else {
            "filename": "clip.mov",
            "displayname": "Final Cut",
            "studentId": "S001",
            "name": "Jane Doe",
        },
    )


@pytest.fixture()
def metadata_factory() -> Callable[..., dict[str, Any]]:
    return make_metadata


@pytest.fixture()
def staged_upload_factory() -> Callable[..., UploadRecord]:
    return stage_upload
