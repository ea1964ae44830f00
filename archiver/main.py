from archiver.config.pipeline_config import PipelineConfig, load_pipeline_config
from archiver.config.settings import Settings
from archiver.logging.logger import Log
from archiver.probe.tool_check import check_tools
from archiver.storage.layout import ArchiveLayout
from archiver.transport.hooks import UploadHooks
from archiver.worker.worker import Worker


def main() -> None:
    """Entry point: load settings -> check tools -> prepare archive -> watch staging."""
    settings = Settings()
    Log.configure(settings.log_level)
    config = PipelineConfig.from_settings(settings)

    tools = check_tools(settings.ffprobe_path, settings.ffmpeg_path)
    if tools.ffprobe:
        Log.info(tools.message)
    else:
        Log.warning(tools.message)

    ArchiveLayout(config.archive_dir).ensure()
    config.staging_dir.mkdir(parents=True, exist_ok=True)

    hooks = UploadHooks(
        config_loader=load_pipeline_config,
        max_workers=settings.max_concurrent_finalizations,
    )
    try:
        worker = Worker(hooks, config.staging_dir, settings.staging_poll_interval_seconds)
        worker.run()
    finally:
        hooks.shutdown()


if __name__ == "__main__":
    main()
