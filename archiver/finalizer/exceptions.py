class FinalizationError(Exception):
    """Base exception for all finalization-related errors."""


class InsufficientStorageError(FinalizationError):
    """Raised when the archive volume cannot hold the upload plus its safety margin."""

    def __init__(self, message: str, required: int = 0, available: int = 0) -> None:
        super().__init__(message)
        self.required = required
        self.available = available


class StagedFileNotFoundError(FinalizationError, FileNotFoundError):
    """Raised when the staged upload is missing at finalization time."""
