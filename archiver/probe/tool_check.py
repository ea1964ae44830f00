"""Start-up check that ffmpeg/ffprobe are installed; informational only."""

import re
import subprocess
from dataclasses import dataclass

INSTALL_HINT = "Install ffmpeg (e.g. `brew install ffmpeg` or your package manager)."


@dataclass(frozen=True)
class ToolStatus:
    ffmpeg: bool
    ffprobe: bool
    ffmpeg_version: str | None = None
    ffprobe_version: str | None = None

    @property
    def message(self) -> str:
        if self.ffmpeg and self.ffprobe:
            return (
                f"ffmpeg {self.ffmpeg_version} and ffprobe {self.ffprobe_version} "
                "are available."
            )
        if not self.ffmpeg and not self.ffprobe:
            return f"ffmpeg and ffprobe are not installed. {INSTALL_HINT}"
        missing = "ffmpeg" if not self.ffmpeg else "ffprobe"
        return f"{missing} is not installed. {INSTALL_HINT}"


def tool_version(command: str, tool_name: str) -> str | None:
    """Run ``<command> -version``; None if the tool cannot be executed.

    Returns an empty string when the tool runs but prints no recognizable
    version banner.
    """
    try:
        completed = subprocess.run(
            [command, "-version"],
            check=True,
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    match = re.search(rf"{re.escape(tool_name)} version (\S+)", completed.stdout)
    return match.group(1) if match else ""


def check_tools(ffprobe_path: str = "", ffmpeg_path: str = "") -> ToolStatus:
    ffmpeg_version = tool_version(ffmpeg_path or "ffmpeg", "ffmpeg")
    ffprobe_version = tool_version(ffprobe_path or "ffprobe", "ffprobe")
    return ToolStatus(
        ffmpeg=ffmpeg_version is not None,
        ffprobe=ffprobe_version is not None,
        ffmpeg_version=ffmpeg_version or None,
        ffprobe_version=ffprobe_version or None,
    )
