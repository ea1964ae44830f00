"""Checks extracted media metadata against the archive's delivery format.

Basic mode only classifies the file (video/audio/image). Strict mode requires a
video stream and reports every other mismatch as a warning.
"""

from typing import Any

from archiver.config.pipeline_config import FormatRequirements
from archiver.probe.models import first_stream, media_streams
from archiver.validation.frame_rate import matches_any, parse_frame_rate
from archiver.validation.models import FormatCheck

FRAME_RATE_TOLERANCE = 0.1

VIDEO_CODEC_FAMILIES: dict[str, frozenset[str]] = {
    "prores": frozenset({"prores", "prores_ks", "prores_aw"}),
    "h.264": frozenset({"h264"}),
    "h264": frozenset({"h264"}),
    "hevc": frozenset({"hevc"}),
    "h.265": frozenset({"hevc"}),
    "dnxhd": frozenset({"dnxhd"}),
}

AUDIO_CODEC_PREFIXES: dict[str, str] = {
    "pcm": "pcm_",
    "aac": "aac",
}

_RECOGNIZED_TYPES = ("video", "audio", "image")


def video_codec_matches(family: str, codec: str) -> bool:
    members = VIDEO_CODEC_FAMILIES.get(family.lower())
    if members is None:
        return codec.lower() == family.lower()
    return codec.lower() in members


def audio_codec_matches(family: str, codec: str) -> bool:
    prefix = AUDIO_CODEC_PREFIXES.get(family.lower(), family.lower())
    return codec.lower().startswith(prefix)


def check_format_basic(metadata: dict[str, Any]) -> FormatCheck:
    result = FormatCheck()
    if not media_streams(metadata):
        return result.fail("No streams found")
    for media_type in _RECOGNIZED_TYPES:
        if first_stream(metadata, media_type) is not None:
            result.media_type = media_type
            return result
    return result.fail("Unsupported file type")


def check_format_strict(
    metadata: dict[str, Any],
    requirements: FormatRequirements,
) -> FormatCheck:
    result = FormatCheck()
    video = first_stream(metadata, "video")
    if video is None:
        return result.fail("No video stream found")
    result.media_type = "video"
    audio = first_stream(metadata, "audio")

    _check_resolution(result, video, requirements)
    _check_video_codec(result, video, requirements)
    _check_frame_rate(result, video, requirements)
    if audio is not None:
        _check_audio_codec(result, audio, requirements)
        _check_sample_rate(result, audio, requirements)
    return result


def _check_resolution(
    result: FormatCheck, video: dict[str, Any], requirements: FormatRequirements
) -> None:
    expected = requirements.resolution_size()
    if expected is None:
        return
    actual = (video.get("width"), video.get("height"))
    if actual != expected:
        result.warn(
            f"Resolution differs from requirement "
            f"(required: {requirements.resolution}, actual: {actual[0]}x{actual[1]})"
        )


def _check_video_codec(
    result: FormatCheck, video: dict[str, Any], requirements: FormatRequirements
) -> None:
    if not requirements.video_codec:
        return
    codec = str(video.get("codec_name") or "")
    if not video_codec_matches(requirements.video_codec, codec):
        result.warn(
            f"Video codec differs from requirement "
            f"(required: {requirements.video_codec}, actual: {codec or 'unknown'})"
        )


def _check_frame_rate(
    result: FormatCheck, video: dict[str, Any], requirements: FormatRequirements
) -> None:
    if not requirements.frame_rates or "r_frame_rate" not in video:
        return
    accepted = "/".join(f"{rate:g}" for rate in requirements.frame_rates)
    fps = parse_frame_rate(video["r_frame_rate"])
    if fps is None:
        result.warn(
            f"Frame rate could not be determined "
            f"(required: {accepted}, reported: {video['r_frame_rate']})"
        )
        return
    if not matches_any(fps, requirements.frame_rates, FRAME_RATE_TOLERANCE):
        result.warn(
            f"Frame rate differs from requirement (required: {accepted}, actual: {fps:.2f})"
        )


def _check_audio_codec(
    result: FormatCheck, audio: dict[str, Any], requirements: FormatRequirements
) -> None:
    if not requirements.audio_codec:
        return
    codec = str(audio.get("codec_name") or "")
    if not audio_codec_matches(requirements.audio_codec, codec):
        result.warn(
            f"Audio codec differs from requirement "
            f"(required: {requirements.audio_codec}, actual: {codec or 'unknown'})"
        )


def _check_sample_rate(
    result: FormatCheck, audio: dict[str, Any], requirements: FormatRequirements
) -> None:
    if not requirements.sample_rate:
        return
    raw = audio.get("sample_rate")
    try:
        sample_rate: int | None = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        sample_rate = None
    if sample_rate != requirements.sample_rate:
        result.warn(
            f"Sample rate differs from requirement "
            f"(required: {requirements.sample_rate}Hz, actual: {raw if raw is not None else 'unknown'}Hz)"
        )


def validate_format(
    metadata: dict[str, Any],
    requirements: FormatRequirements,
    allow_non_video: bool,
) -> FormatCheck:
    """Run basic mode when non-video files are allowed, strict mode otherwise."""
    if allow_non_video:
        return check_format_basic(metadata)
    return check_format_strict(metadata, requirements)
