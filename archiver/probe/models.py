from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProbeFailure(str, Enum):
    """Why no metadata could be extracted."""

    TOOL_NOT_FOUND = "tool-not-found"  # inspection binary missing or not executable
    UNSUPPORTED_INPUT = "unsupported-input"  # binary ran but rejected the file


def media_streams(metadata: dict[str, Any]) -> list[dict[str, Any]]:
    streams = metadata.get("streams")
    if not isinstance(streams, list):
        return []
    return [stream for stream in streams if isinstance(stream, dict)]


def first_stream(metadata: dict[str, Any], codec_type: str) -> dict[str, Any] | None:
    return next(
        (s for s in media_streams(metadata) if s.get("codec_type") == codec_type),
        None,
    )


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one inspection call; failure_reason is None on success."""

    metadata: dict[str, Any] = field(default_factory=dict)
    failure_reason: ProbeFailure | None = None

    @property
    def has_metadata(self) -> bool:
        return self.failure_reason is None and bool(self.metadata)

    def container_size(self) -> int | None:
        """``format.size`` as reported by the tool, if present and numeric."""
        container = self.metadata.get("format")
        if not isinstance(container, dict):
            return None
        try:
            return int(container["size"])
        except (KeyError, TypeError, ValueError):
            return None
