from dataclasses import dataclass, field


@dataclass
class FormatCheck:
    """Result of a format check. Warnings never change ``valid``; errors do."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    media_type: str = "unknown"

    def fail(self, message: str) -> "FormatCheck":
        self.valid = False
        self.errors.append(message)
        return self

    def warn(self, message: str) -> None:
        self.warnings.append(message)
