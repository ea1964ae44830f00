from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from archiver.probe.models import ProbeFailure
from archiver.validation.models import FormatCheck


@dataclass(frozen=True)
class ReceiptFields:
    """Everything the receipt needs to know about one finalized upload."""

    receipt_id: str
    filename: str
    display_name: str
    size: int
    digest: str
    metadata: dict[str, Any]
    format_check: FormatCheck
    timestamp: datetime
    probe_failure: ProbeFailure | None = None
    allow_non_video: bool = False
    timezone: str = "Asia/Tokyo"


@dataclass(frozen=True)
class Notice:
    level: str  # "info", "warning", "error", "success"
    heading: str
    lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReceiptSection:
    title: str
    rows: tuple[tuple[str, str], ...]
    subtitle: str = ""


@dataclass(frozen=True)
class Receipt:
    """Renderer-independent receipt document."""

    title: str
    receipt_id: str
    notices: tuple[Notice, ...] = ()
    sections: tuple[ReceiptSection, ...] = field(default_factory=tuple)

    def text(self) -> str:
        """Plain-text rendition, used for logging and assertions."""
        lines = [self.title]
        for notice in self.notices:
            lines.append(f"[{notice.level}] {notice.heading}")
            lines.extend(f"  {line}" for line in notice.lines)
        for section in self.sections:
            lines.append(section.title if not section.subtitle else f"{section.title} / {section.subtitle}")
            lines.extend(f"  {label}: {value}" for label, value in section.rows)
        return "\n".join(lines)
