from archiver.config.pipeline_config import PipelineConfig
from archiver.probe.base import BaseMetadataExtractor
from archiver.probe.ffprobe_adapter import FfprobeAdapter


class MetadataExtractorFactory:
    """Creates the metadata extractor for a pipeline configuration."""

    @classmethod
    def create(cls, config: PipelineConfig) -> BaseMetadataExtractor:
        return FfprobeAdapter(
            ffprobe_path=config.ffprobe_path,
            timeout_seconds=config.probe_timeout_seconds,
        )
