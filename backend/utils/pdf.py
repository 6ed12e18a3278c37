# backend/utils/pdf.py
import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

# Optional TTF fonts; the built-in Helvetica covers French accents (WinAnsi)
FONT_DIR = Path("assets/fonts")
FONT_REGULAR_PATH = FONT_DIR / "DejaVuSans.ttf"
FONT_BOLD_PATH = FONT_DIR / "DejaVuSans-Bold.ttf"
LOGO_PATH = Path("depot.jpg")

FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

BRAND = "BÉBÉ-DÉPÔT"
FOOTER = "BÉBÉ-DÉPÔT - Back Office"

# Brand colors (lavender #805ad5, peach #fed7d7)
LAVENDER = (128 / 255, 90 / 255, 213 / 255)
PEACH = (254 / 255, 215 / 255, 215 / 255)
GRID = (200 / 255, 200 / 255, 200 / 255)

PAGE_WIDTH, PAGE_HEIGHT = A4
TABLE_X = 14 * mm
TABLE_TOP = 50 * mm  # distance from the top edge
ROW_HEIGHT = 7 * mm
BOTTOM_LIMIT = 270 * mm

_fonts_inited = False
def _init_fonts():
    """Switch to DejaVu when the TTF files are shipped with the app."""
    global _fonts_inited, FONT_REGULAR_NAME, FONT_BOLD_NAME
    if _fonts_inited:
        return
    _fonts_inited = True

    if not FONT_REGULAR_PATH.exists():
        return

    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    pdfmetrics.registerFont(TTFont("DejaVuSans", str(FONT_REGULAR_PATH)))
    FONT_REGULAR_NAME = "DejaVuSans"
    FONT_BOLD_NAME = "DejaVuSans"
    if FONT_BOLD_PATH.exists():
        pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(FONT_BOLD_PATH)))
        FONT_BOLD_NAME = "DejaVuSans-Bold"


def _top(y_mm_from_top: float) -> float:
    """ReportLab measures from the bottom edge."""
    return PAGE_HEIGHT - y_mm_from_top


class _NumberedCanvas(canvas.Canvas):
    """Defers page output until save() so every footer can show 'Page i / n'."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int):
        self.setFont(FONT_REGULAR_NAME, 8)
        self.setFillColorRGB(0.5, 0.5, 0.5)
        self.drawCentredString(PAGE_WIDTH / 2, _top(290 * mm), f"Page {self._pageNumber} / {total}")
        self.drawCentredString(PAGE_WIDTH / 2, _top(293 * mm), FOOTER)
        self.setFillColorRGB(0, 0, 0)


def _fit(c: canvas.Canvas, text: Any, width: float, font: str, size: float) -> str:
    """Cut `text` with an ellipsis so it fits in a column."""
    text = "" if text is None else str(text)
    if c.stringWidth(text, font, size) <= width:
        return text
    while text and c.stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


def _draw_page_header(c: canvas.Canvas, title: str):
    if LOGO_PATH.exists():
        try:
            c.drawImage(str(LOGO_PATH), 14 * mm, _top(40 * mm), 30 * mm, 30 * mm)
        except OSError as e:
            logger.warning("Logo not drawn: %s", e)

    c.setFillColorRGB(*LAVENDER)
    c.rect(0, _top(15 * mm), PAGE_WIDTH, 15 * mm, fill=1, stroke=0)

    c.setFont(FONT_BOLD_NAME, 18)
    c.drawCentredString(110 * mm, _top(25 * mm), BRAND)
    c.setFont(FONT_BOLD_NAME, 14)
    c.drawCentredString(PAGE_WIDTH / 2, _top(35 * mm), title)
    c.setFillColorRGB(0, 0, 0)


def _draw_table_header(c: canvas.Canvas, headers: Sequence[str], widths: Sequence[float]):
    table_width = sum(widths)
    y = _top(TABLE_TOP)
    c.setFillColorRGB(*LAVENDER)
    c.rect(TABLE_X, y, table_width, 8 * mm, fill=1, stroke=0)

    c.setStrokeColorRGB(*GRID)
    c.setLineWidth(0.2)
    c.rect(TABLE_X, y, table_width, 8 * mm, fill=0, stroke=1)

    c.setFillColorRGB(1, 1, 1)
    c.setFont(FONT_BOLD_NAME, 10)
    x = TABLE_X
    for header, width in zip(headers, widths):
        c.drawString(x + 2 * mm, y + 2 * mm, _fit(c, header, width - 3 * mm, FONT_BOLD_NAME, 10))
        x += width
    c.setFillColorRGB(0, 0, 0)


def render_table_pdf(
    title: str,
    headers: Sequence[str],
    col_widths_mm: Sequence[float],
    rows: Iterable[Sequence[Any]],
) -> bytes:
    """
    Render a branded tabular report and return the PDF bytes.

    Layout:
    - lavender band + "BÉBÉ-DÉPÔT" + report title on every page
    - lavender table header repeated after each page break
    - peach background on every other row
    - "Page i / n" footer
    """
    _init_fonts()
    widths = [w * mm for w in col_widths_mm]
    table_width = sum(widths)

    buffer = BytesIO()
    c = _NumberedCanvas(buffer, pagesize=A4)
    c.setTitle(f"{BRAND} - {title}")

    _draw_page_header(c, title)
    _draw_table_header(c, headers, widths)
    y_from_top = TABLE_TOP + ROW_HEIGHT

    for index, row in enumerate(rows):
        if y_from_top > BOTTOM_LIMIT:
            c.showPage()
            _draw_page_header(c, title)
            _draw_table_header(c, headers, widths)
            y_from_top = TABLE_TOP + ROW_HEIGHT

        baseline = _top(y_from_top)
        if index % 2 == 0:
            c.setFillColorRGB(*PEACH)
            c.rect(TABLE_X, baseline - 1 * mm, table_width, ROW_HEIGHT, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)

        c.setFont(FONT_REGULAR_NAME, 9)
        x = TABLE_X
        for cell, width in zip(row, widths):
            c.drawString(x + 2 * mm, baseline + 1 * mm, _fit(c, cell, width - 3 * mm, FONT_REGULAR_NAME, 9))
            x += width

        # Grid: line under the row and column separators
        c.setStrokeColorRGB(*GRID)
        c.setLineWidth(0.2)
        c.line(TABLE_X, baseline - 1 * mm, TABLE_X + table_width, baseline - 1 * mm)
        x = TABLE_X
        for width in widths[:-1]:
            x += width
            c.line(x, baseline - 1 * mm, x, baseline - 1 * mm + ROW_HEIGHT)

        y_from_top += ROW_HEIGHT

    c.showPage()
    c.save()
    return buffer.getvalue()
