from archiver.receipt.base import BaseReceiptRenderer
from archiver.receipt.html_adapter import HtmlReceiptRenderer
from archiver.receipt.pdf_adapter import PdfReceiptRenderer


class ReceiptRendererFactory:
    """Creates the receipt renderer for the configured output format."""

    RENDERERS: dict[str, type[BaseReceiptRenderer]] = {
        "pdf": PdfReceiptRenderer,
        "html": HtmlReceiptRenderer,
    }

    @classmethod
    def create(cls, receipt_format: str) -> BaseReceiptRenderer:
        key = receipt_format.lower()
        renderer_cls = cls.RENDERERS.get(key)
        if renderer_cls is None:
            raise ValueError(
                f"Unknown receipt format '{key}'. Choose from: {list(cls.RENDERERS)}"
            )
        return renderer_cls()
