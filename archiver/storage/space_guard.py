"""Free-space checks used at admission and before finalization.

Disk queries fail open: if the filesystem cannot be inspected the guard reports
effectively unlimited space instead of blocking ingestion. This is a policy
choice kept for compatibility and should be reviewed before relying on the
guard as a hard limit.
"""

import math
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from archiver.logging.logger import Log

_UNITS = ("B", "KB", "MB", "GB", "TB")


@dataclass(frozen=True)
class DiskSpace:
    path: Path
    total: int
    used: int
    available: int
    used_percent: int
    error: str | None = None


@dataclass(frozen=True)
class SpaceCheck:
    sufficient: bool
    available: int
    required: int
    margin: int

    @property
    def required_with_margin(self) -> int:
        return self.required + self.margin


def check_space(path: Path) -> DiskSpace:
    """Query the filesystem containing ``path``; never raises."""
    try:
        usage = shutil.disk_usage(path)
    except OSError as exc:
        Log.error(f"Disk space query failed for {path}: {exc}")
        return DiskSpace(
            path=path,
            total=0,
            used=0,
            available=sys.maxsize,
            used_percent=0,
            error=str(exc),
        )
    # Same rounding as df's Capacity column: used / (used + available), rounded up.
    denominator = usage.used + usage.free
    used_percent = math.ceil(usage.used * 100 / denominator) if denominator else 0
    return DiskSpace(
        path=path,
        total=usage.total,
        used=usage.used,
        available=usage.free,
        used_percent=used_percent,
    )


def check_sufficient(path: Path, required_bytes: int, margin_bytes: int) -> SpaceCheck:
    disk = check_space(path)
    result = SpaceCheck(
        sufficient=disk.available >= required_bytes + margin_bytes,
        available=disk.available,
        required=required_bytes,
        margin=margin_bytes,
    )
    if not result.sufficient:
        Log.warning(
            f"Insufficient disk space on {path}: "
            f"required={format_bytes(result.required_with_margin)}, "
            f"available={format_bytes(result.available)}"
        )
    return result


def sufficient(path: Path, required_bytes: int, margin_bytes: int) -> bool:
    """True iff available >= required + margin."""
    return check_sufficient(path, required_bytes, margin_bytes).sufficient


def usage_warning(path: Path, threshold_percent: int) -> bool:
    """Advisory only: True iff usage is at or above the threshold."""
    disk = check_space(path)
    warn = disk.used_percent >= threshold_percent
    if warn:
        Log.warning(
            f"Disk usage on {path} is {disk.used_percent}% "
            f"(threshold {threshold_percent}%)"
        )
    return warn


def format_bytes(size: int) -> str:
    if not size or size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {_UNITS[unit]}"
