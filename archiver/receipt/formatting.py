from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from archiver.logging.logger import Log
from archiver.storage.space_guard import format_bytes

NOT_AVAILABLE = "N/A"
TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


def resolve_timezone(name: str) -> timezone | ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        Log.warning(f"Unknown timezone '{name}', using UTC")
        return timezone.utc


def localize_timestamp(moment: datetime, timezone_name: str) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(resolve_timezone(timezone_name)).strftime(TIMESTAMP_FORMAT)


def format_bitrate(bitrate: object) -> str:
    try:
        value = float(bitrate)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return NOT_AVAILABLE
    if value <= 0:
        return NOT_AVAILABLE
    kbps = value / 1000
    if kbps >= 1000:
        return f"{kbps / 1000:.2f} Mbps"
    return f"{kbps:.2f} kbps"


def format_size(size: int) -> str:
    return f"{format_bytes(size)} ({size:,} bytes)"


def or_na(value: object) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(value)
