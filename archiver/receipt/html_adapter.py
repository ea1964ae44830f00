from html import escape

from archiver.receipt.base import BaseReceiptRenderer
from archiver.receipt.models import Notice, Receipt, ReceiptSection

_STYLE = """
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
       max-width: 800px; margin: 40px auto; padding: 20px; line-height: 1.6; }
h1 { color: #333; border-bottom: 3px solid #007bff; padding-bottom: 10px; }
h2 { color: #555; margin-top: 30px; }
h3 { color: #666; margin-top: 20px; }
.info-table { width: 100%; border-collapse: collapse; margin: 20px 0; }
.info-table th, .info-table td { border: 1px solid #ddd; padding: 12px; text-align: left; }
.info-table th { background: #f5f5f5; font-weight: 600; width: 30%; }
.info-table td { font-family: 'Courier New', monospace; word-break: break-all; }
.notice { padding: 15px; margin: 20px 0; border-left: 4px solid; }
.success { background: #e8f5e9; border-color: #4caf50; }
.info { background: #e3f2fd; border-color: #2196f3; }
.warning { background: #fff3e0; border-color: #ff9800; }
.error { background: #ffebee; border-color: #f44336; }
@media print { body { margin: 0; } .no-print { display: none; } }
"""


def _notice_html(notice: Notice) -> str:
    body = "".join(f"<li>{escape(line)}</li>" for line in notice.lines)
    return (
        f'<div class="notice {escape(notice.level)}">'
        f"<strong>{escape(notice.heading)}</strong>"
        f"<ul>{body}</ul></div>"
    )


def _section_html(section: ReceiptSection, previous_title: str | None) -> str:
    parts = []
    if section.title != previous_title:
        parts.append(f"<h2>{escape(section.title)}</h2>")
    if section.subtitle:
        parts.append(f"<h3>{escape(section.subtitle)}</h3>")
    rows = "".join(
        f"<tr><th>{escape(label)}</th><td>{escape(value)}</td></tr>"
        for label, value in section.rows
    )
    parts.append(f'<table class="info-table">{rows}</table>')
    return "".join(parts)


class HtmlReceiptRenderer(BaseReceiptRenderer):
    """Renders a standalone HTML page with print styles."""

    extension = "html"
    media_type = "text/html"

    def render(self, receipt: Receipt) -> bytes:
        notices = "".join(_notice_html(n) for n in receipt.notices)
        sections = []
        previous: str | None = None
        for section in receipt.sections:
            sections.append(_section_html(section, previous))
            previous = section.title
        page = (
            "<!DOCTYPE html>\n"
            '<html lang="en"><head><meta charset="UTF-8">'
            f"<title>{escape(receipt.title)} - {escape(receipt.receipt_id)}</title>"
            f"<style>{_STYLE}</style></head><body>"
            f"<h1>{escape(receipt.title)}</h1>"
            f"{notices}{''.join(sections)}"
            '<div class="no-print"><button onclick="window.print()">Print this receipt</button></div>'
            "</body></html>\n"
        )
        return page.encode("utf-8")
