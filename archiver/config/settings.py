from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    archive_dir: str = "~/TOD-M-Files/archive"
    staging_dir: str = "~/TOD-M-Files/archive/incoming"

    admission_margin_gb: float = 5
    finalize_margin_gb: float = 2
    usage_warning_percent: int = 90

    allow_non_video_files: bool = False

    ffprobe_path: str = ""
    ffmpeg_path: str = ""
    probe_timeout_seconds: int = 120

    receipt_format: str = "pdf"
    timezone: str = "Asia/Tokyo"

    format_container: str = "QuickTime/MOV"
    format_video_codec: str = "ProRes"
    format_resolution: str = "1920x1080"
    format_frame_rates: list[float] = [23.98, 24, 29.97, 30]
    format_audio_codec: str = "PCM"
    format_sample_rate: int = 48000

    max_concurrent_finalizations: int = 2
    staging_poll_interval_seconds: int = 5
