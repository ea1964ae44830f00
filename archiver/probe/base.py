from abc import ABC, abstractmethod
from pathlib import Path

from archiver.probe.models import ProbeResult


class BaseMetadataExtractor(ABC):
    """Contract for all media-inspection adapters."""

    @abstractmethod
    def extract(self, path: Path) -> ProbeResult:
        """Describe the container and streams of the file at ``path``.

        Args:
            path: File to inspect. Never modified.

        Returns:
            ProbeResult with parsed metadata, or with a failure reason when the
            tool is missing or rejected the input. Never raises.
        """
