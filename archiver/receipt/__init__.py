from archiver.receipt.base import BaseReceiptRenderer
from archiver.receipt.builder import build_receipt
from archiver.receipt.factory import ReceiptRendererFactory
from archiver.receipt.models import Receipt, ReceiptFields

__all__ = [
    "BaseReceiptRenderer",
    "Receipt",
    "ReceiptFields",
    "ReceiptRendererFactory",
    "build_receipt",
]
