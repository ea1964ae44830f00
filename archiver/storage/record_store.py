"""Write-once persistence for per-upload sidecar records.

Records are created with exclusive mode: an existing record for the same upload
id is never overwritten and surfaces as ``FileExistsError``.
"""

import json
from pathlib import Path
from typing import Any


def write_bytes_once(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("xb") as handle:
        handle.write(data)
    return path


def write_text_once(path: Path, text: str) -> Path:
    return write_bytes_once(path, text.encode("utf-8"))


def write_json_once(path: Path, payload: dict[str, Any]) -> Path:
    return write_text_once(path, json.dumps(payload, indent=2, ensure_ascii=False))
