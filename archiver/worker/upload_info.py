"""Reads the per-upload info files the file-based transport store keeps in staging.

``<staging>/<id>`` holds the bytes and ``<staging>/<id>.json`` describes the
upload (``id``, declared ``size``, client ``metadata``).
"""

import json
from pathlib import Path

from archiver.finalizer.models import UploadRecord
from archiver.logging.logger import Log


def read_upload_info(info_path: Path) -> UploadRecord | None:
    """Parse one info file; None if it is unreadable or not an upload description."""
    try:
        data = json.loads(info_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        Log.warning(f"Skipping unreadable upload info {info_path.name}: {exc}")
        return None
    if not isinstance(data, dict) or not data.get("id"):
        return None
    upload_id = str(data["id"])
    raw_metadata = data.get("metadata") or {}
    metadata = {
        str(key): "" if value is None else str(value)
        for key, value in raw_metadata.items()
    } if isinstance(raw_metadata, dict) else {}
    size = data.get("size")
    return UploadRecord(
        upload_id=upload_id,
        staging_path=info_path.parent / upload_id,
        size=int(size) if isinstance(size, (int, float)) else None,
        metadata=metadata,
    )


def is_complete(upload: UploadRecord) -> bool:
    """All declared bytes are on disk; deferred-length uploads never count."""
    if upload.size is None:
        return False
    try:
        return upload.staging_path.stat().st_size == upload.size
    except OSError:
        return False


def staged_upload_ids(staging_dir: Path) -> set[str]:
    """Ids that still have an info file in staging."""
    return {path.stem for path in staging_dir.glob("*.json")}


def completed_uploads(staging_dir: Path) -> list[UploadRecord]:
    uploads = []
    for info_path in sorted(staging_dir.glob("*.json")):
        upload = read_upload_info(info_path)
        if upload is not None and is_complete(upload):
            uploads.append(upload)
    return uploads
