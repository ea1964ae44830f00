import json
import subprocess
from pathlib import Path

from archiver.logging.logger import Log
from archiver.probe.base import BaseMetadataExtractor
from archiver.probe.models import ProbeFailure, ProbeResult

FFPROBE_ARGS = ("-v", "quiet", "-print_format", "json", "-show_format", "-show_streams")


class FfprobeAdapter(BaseMetadataExtractor):
    """Extracts container and stream metadata by running ffprobe."""

    def __init__(self, ffprobe_path: str = "ffprobe", timeout_seconds: int = 120) -> None:
        self._ffprobe_path = ffprobe_path
        self._timeout_seconds = timeout_seconds

    def command(self, path: Path) -> list[str]:
        return [self._ffprobe_path, *FFPROBE_ARGS, str(path)]

    def extract(self, path: Path) -> ProbeResult:
        try:
            completed = subprocess.run(
                self.command(path),
                check=True,
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
            )
        except (FileNotFoundError, PermissionError) as exc:
            Log.warning(f"ffprobe not available ({self._ffprobe_path}): {exc}")
            return ProbeResult(failure_reason=ProbeFailure.TOOL_NOT_FOUND)
        except subprocess.CalledProcessError as exc:
            Log.warning(f"ffprobe rejected {path} (exit {exc.returncode})")
            return ProbeResult(failure_reason=ProbeFailure.UNSUPPORTED_INPUT)
        except subprocess.TimeoutExpired:
            Log.warning(f"ffprobe timed out after {self._timeout_seconds}s on {path}")
            return ProbeResult(failure_reason=ProbeFailure.UNSUPPORTED_INPUT)

        try:
            metadata = json.loads(completed.stdout)
        except json.JSONDecodeError as exc:
            Log.warning(f"ffprobe returned malformed output for {path}: {exc}")
            return ProbeResult(failure_reason=ProbeFailure.UNSUPPORTED_INPUT)
        if not isinstance(metadata, dict) or not metadata:
            Log.warning(f"ffprobe returned no metadata for {path}")
            return ProbeResult(failure_reason=ProbeFailure.UNSUPPORTED_INPUT)
        return ProbeResult(metadata=metadata)
