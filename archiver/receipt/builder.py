from typing import Any

from archiver.probe.models import ProbeFailure, first_stream
from archiver.receipt.formatting import (
    NOT_AVAILABLE,
    format_bitrate,
    format_size,
    localize_timestamp,
    or_na,
)
from archiver.receipt.models import Notice, Receipt, ReceiptFields, ReceiptSection

RECEIPT_TITLE = "Video File Receipt"

_COMPLETED = Notice(
    level="success",
    heading="Upload completed",
    lines=("Please save or print this receipt for your records.",),
)
_TOOL_MISSING = Notice(
    level="warning",
    heading="Notice",
    lines=(
        "ffprobe is not installed, so media metadata was not extracted and the "
        "format check was not performed.",
        f"The upload completed normally; unavailable details are shown as {NOT_AVAILABLE}.",
    ),
)
_NON_VIDEO_ALLOWED = Notice(
    level="info",
    heading="Information",
    lines=(
        "This file is not in a video format, so metadata extraction and the "
        "format check were not performed.",
        "The upload completed normally.",
    ),
)
_NON_VIDEO_REJECTED = Notice(
    level="warning",
    heading="Notice",
    lines=(
        "The uploaded file is not in a supported video format.",
        "Metadata extraction and the format check were not performed.",
    ),
)


def advisory_notice(probe_failure: ProbeFailure | None, allow_non_video: bool) -> Notice | None:
    """Pick the metadata advisory for a failed extraction, if any."""
    if probe_failure is ProbeFailure.TOOL_NOT_FOUND:
        return _TOOL_MISSING
    if probe_failure is ProbeFailure.UNSUPPORTED_INPUT:
        return _NON_VIDEO_ALLOWED if allow_non_video else _NON_VIDEO_REJECTED
    return None


def _codec(stream: dict[str, Any]) -> str:
    return or_na(stream.get("codec_long_name") or stream.get("codec_name"))


def _video_rows(stream: dict[str, Any]) -> tuple[tuple[str, str], ...]:
    return (
        ("Codec", _codec(stream)),
        ("Resolution", f"{or_na(stream.get('width'))} x {or_na(stream.get('height'))}"),
        ("Frame rate", or_na(stream.get("r_frame_rate"))),
        ("Bitrate", format_bitrate(stream.get("bit_rate"))),
    )


def _audio_rows(stream: dict[str, Any]) -> tuple[tuple[str, str], ...]:
    sample_rate = stream.get("sample_rate")
    return (
        ("Codec", _codec(stream)),
        ("Sample rate", f"{sample_rate} Hz" if sample_rate else NOT_AVAILABLE),
        ("Channels", or_na(stream.get("channels"))),
        ("Bitrate", format_bitrate(stream.get("bit_rate"))),
    )


def build_receipt(fields: ReceiptFields) -> Receipt:
    notices = [_COMPLETED]
    advisory = advisory_notice(fields.probe_failure, fields.allow_non_video)
    if advisory is not None:
        notices.append(advisory)
    if fields.format_check.errors:
        notices.append(
            Notice(level="error", heading="Format errors", lines=tuple(fields.format_check.errors))
        )
    if fields.format_check.warnings:
        notices.append(
            Notice(
                level="warning",
                heading="Format warnings",
                lines=tuple(fields.format_check.warnings),
            )
        )

    summary_rows = [
        ("Receipt ID", fields.receipt_id),
        ("Received at", localize_timestamp(fields.timestamp, fields.timezone)),
        ("File name", fields.filename),
    ]
    if fields.display_name:
        summary_rows.append(("Title", fields.display_name))
    summary_rows.append(("File size", format_size(fields.size)))

    sections = (
        ReceiptSection(title="Submission", rows=tuple(summary_rows)),
        ReceiptSection(title="Integrity", rows=(("SHA-256", fields.digest),)),
        ReceiptSection(
            title="Media",
            subtitle="Video",
            rows=_video_rows(first_stream(fields.metadata, "video") or {}),
        ),
        ReceiptSection(
            title="Media",
            subtitle="Audio",
            rows=_audio_rows(first_stream(fields.metadata, "audio") or {}),
        ),
    )
    return Receipt(
        title=RECEIPT_TITLE,
        receipt_id=fields.receipt_id,
        notices=tuple(notices),
        sections=sections,
    )
