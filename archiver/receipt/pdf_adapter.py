import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from archiver.receipt.base import BaseReceiptRenderer
from archiver.receipt.models import Notice, Receipt, ReceiptSection

# Built-in CID font for text Helvetica cannot encode (e.g. Japanese names).
CJK_FONT = "HeiseiKakuGo-W5"

_NOTICE_COLORS = {
    "success": (colors.HexColor("#e8f5e9"), colors.HexColor("#4caf50")),
    "info": (colors.HexColor("#e3f2fd"), colors.HexColor("#2196f3")),
    "warning": (colors.HexColor("#fff3e0"), colors.HexColor("#ff9800")),
    "error": (colors.HexColor("#ffebee"), colors.HexColor("#f44336")),
}


def _needs_cjk(text: str) -> bool:
    try:
        text.encode("latin-1")
    except UnicodeEncodeError:
        return True
    return False


def _cjk_font() -> str:
    if CJK_FONT not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(UnicodeCIDFont(CJK_FONT))
    return CJK_FONT


class PdfReceiptRenderer(BaseReceiptRenderer):
    """Renders an A4 PDF with reportlab; output is byte-for-byte reproducible."""

    extension = "pdf"
    media_type = "application/pdf"

    def __init__(self) -> None:
        styles = getSampleStyleSheet()
        self._title = styles["Title"]
        self._heading = styles["Heading2"]
        self._subheading = styles["Heading3"]
        self._body = styles["BodyText"]
        self._cell = ParagraphStyle("Cell", parent=styles["BodyText"], fontName="Courier")

    def _paragraph(self, text: str, style: ParagraphStyle) -> Paragraph:
        if _needs_cjk(text):
            style = ParagraphStyle(f"{style.name}-cjk", parent=style, fontName=_cjk_font())
        return Paragraph(escape(text), style)

    def _notice(self, notice: Notice) -> Table:
        background, border = _NOTICE_COLORS.get(notice.level, _NOTICE_COLORS["info"])
        content = [self._paragraph(notice.heading, self._subheading)]
        content.extend(self._paragraph(line, self._body) for line in notice.lines)
        table = Table([[content]], colWidths=[170 * mm])
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), background),
                    ("LINEBEFORE", (0, 0), (0, -1), 3, border),
                    ("LEFTPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        return table

    def _section(self, section: ReceiptSection) -> Table:
        rows = [
            [self._paragraph(label, self._body), self._paragraph(value, self._cell)]
            for label, value in section.rows
        ]
        table = Table(rows, colWidths=[50 * mm, 120 * mm])
        table.setStyle(
            TableStyle(
                [
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#dddddd")),
                    ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#f5f5f5")),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        return table

    def render(self, receipt: Receipt) -> bytes:
        buf = io.BytesIO()
        doc = SimpleDocTemplate(
            buf,
            pagesize=A4,
            title=f"{receipt.title} - {receipt.receipt_id}",
            invariant=1,
        )
        story: list[object] = [self._paragraph(receipt.title, self._title)]
        for notice in receipt.notices:
            story.extend([self._notice(notice), Spacer(1, 4 * mm)])
        previous: str | None = None
        for section in receipt.sections:
            if section.title != previous:
                story.append(self._paragraph(section.title, self._heading))
                previous = section.title
            if section.subtitle:
                story.append(self._paragraph(section.subtitle, self._subheading))
            story.append(self._section(section))
        doc.build(story)
        return buf.getvalue()
