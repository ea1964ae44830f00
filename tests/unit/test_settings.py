import pytest
from pydantic import ValidationError

from archiver.config.pipeline_config import GIB, PipelineConfig, load_pipeline_config
from archiver.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_margins(self) -> None:
        s = Settings()
        assert s.admission_margin_gb == 5
        assert s.finalize_margin_gb == 2

    def test_default_usage_warning_percent(self) -> None:
        s = Settings()
        assert s.usage_warning_percent == 90

    def test_non_video_files_rejected_by_default(self) -> None:
        s = Settings()
        assert s.allow_non_video_files is False

    def test_default_format_requirements(self) -> None:
        s = Settings()
        assert s.format_video_codec == "ProRes"
        assert s.format_resolution == "1920x1080"
        assert s.format_frame_rates == [23.98, 24, 29.97, 30]
        assert s.format_audio_codec == "PCM"
        assert s.format_sample_rate == 48000

    def test_default_receipt_format(self) -> None:
        s = Settings()
        assert s.receipt_format == "pdf"


class TestSettingsFromEnv:
    def test_loads_archive_dir(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARCHIVE_DIR", "/srv/archive")
        s = Settings()
        assert s.archive_dir == "/srv/archive"

    def test_loads_allow_non_video(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ALLOW_NON_VIDEO_FILES", "true")
        s = Settings()
        assert s.allow_non_video_files is True

    def test_loads_frame_rates_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FORMAT_FRAME_RATES", "[25, 50]")
        s = Settings()
        assert s.format_frame_rates == [25.0, 50.0]


class TestSettingsValidation:
    def test_invalid_margin_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FINALIZE_MARGIN_GB", "lots")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_sample_rate_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FORMAT_SAMPLE_RATE", "abc")
        with pytest.raises(ValidationError):
            Settings()


class TestPipelineConfig:
    def test_converts_margins_to_bytes(self) -> None:
        config = PipelineConfig.from_settings(
            Settings(admission_margin_gb=5, finalize_margin_gb=0.5)
        )
        assert config.admission_margin_bytes == 5 * GIB
        assert config.finalize_margin_bytes == GIB // 2

    def test_expands_home_directory(self) -> None:
        config = PipelineConfig.from_settings(Settings(archive_dir="~/archive"))
        assert "~" not in str(config.archive_dir)
        assert config.archive_dir.name == "archive"

    def test_empty_staging_dir_defaults_to_incoming(self) -> None:
        config = PipelineConfig.from_settings(
            Settings(archive_dir="/srv/archive", staging_dir="")
        )
        assert str(config.staging_dir) == "/srv/archive/incoming"

    def test_empty_ffprobe_path_uses_path_lookup(self) -> None:
        config = PipelineConfig.from_settings(Settings(ffprobe_path=""))
        assert config.ffprobe_path == "ffprobe"

    def test_builds_requirements(self) -> None:
        config = PipelineConfig.from_settings(
            Settings(format_resolution="3840x2160", format_frame_rates=[25])
        )
        assert config.requirements.resolution_size() == (3840, 2160)
        assert config.requirements.frame_rates == (25.0,)

    def test_malformed_resolution_is_ignored(self) -> None:
        config = PipelineConfig.from_settings(Settings(format_resolution="full-hd"))
        assert config.requirements.resolution_size() is None

    def test_load_reads_environment_each_call(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECEIPT_FORMAT", "html")
        first = load_pipeline_config()
        monkeypatch.setenv("RECEIPT_FORMAT", "pdf")
        second = load_pipeline_config()
        assert first.receipt_format == "html"
        assert second.receipt_format == "pdf"
