from abc import ABC, abstractmethod

from archiver.receipt.models import Receipt


class BaseReceiptRenderer(ABC):
    """Contract for all receipt output formats."""

    extension: str = ""
    media_type: str = ""

    @abstractmethod
    def render(self, receipt: Receipt) -> bytes:
        """Serialize a receipt into a self-contained printable document.

        Args:
            receipt: Structured receipt built from a finalize result.

        Returns:
            Document bytes, ready to be written under ``extension``.
        """
