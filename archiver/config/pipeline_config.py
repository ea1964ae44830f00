from dataclasses import dataclass, field
from pathlib import Path

from archiver.config.settings import Settings

GIB = 1024 * 1024 * 1024


@dataclass(frozen=True)
class FormatRequirements:
    """Delivery format the archive expects (container/codec/resolution/rate)."""

    container: str = "QuickTime/MOV"
    video_codec: str = "ProRes"
    resolution: str = "1920x1080"
    frame_rates: tuple[float, ...] = (23.98, 24.0, 29.97, 30.0)
    audio_codec: str = "PCM"
    sample_rate: int = 48000

    def resolution_size(self) -> tuple[int, int] | None:
        """Parse ``WIDTHxHEIGHT``; None when the value is empty or malformed."""
        width, sep, height = self.resolution.lower().partition("x")
        if not sep:
            return None
        try:
            return int(width), int(height)
        except ValueError:
            return None


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration snapshot for a single finalization run."""

    archive_dir: Path
    staging_dir: Path
    admission_margin_bytes: int = 5 * GIB
    finalize_margin_bytes: int = 2 * GIB
    usage_warning_percent: int = 90
    allow_non_video_files: bool = False
    ffprobe_path: str = "ffprobe"
    probe_timeout_seconds: int = 120
    receipt_format: str = "pdf"
    timezone: str = "Asia/Tokyo"
    requirements: FormatRequirements = field(default_factory=FormatRequirements)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        archive_dir = Path(settings.archive_dir).expanduser()
        staging_dir = (
            Path(settings.staging_dir).expanduser()
            if settings.staging_dir
            else archive_dir / "incoming"
        )
        return cls(
            archive_dir=archive_dir,
            staging_dir=staging_dir,
            admission_margin_bytes=int(settings.admission_margin_gb * GIB),
            finalize_margin_bytes=int(settings.finalize_margin_gb * GIB),
            usage_warning_percent=settings.usage_warning_percent,
            allow_non_video_files=settings.allow_non_video_files,
            ffprobe_path=settings.ffprobe_path or "ffprobe",
            probe_timeout_seconds=settings.probe_timeout_seconds,
            receipt_format=settings.receipt_format,
            timezone=settings.timezone,
            requirements=FormatRequirements(
                container=settings.format_container,
                video_codec=settings.format_video_codec,
                resolution=settings.format_resolution,
                frame_rates=tuple(settings.format_frame_rates),
                audio_codec=settings.format_audio_codec,
                sample_rate=settings.format_sample_rate,
            ),
        )


def load_pipeline_config() -> PipelineConfig:
    """Read a fresh snapshot from the environment; used once per finalization run."""
    return PipelineConfig.from_settings(Settings())
