"""
Formulario Backend — PDF Document Renderer
============================================

What:  Lays out formulas onto A4 (or Letter) pages and returns the PDF bytes.
Why:   Users download a single formula or a whole book as a printable file.
How:   A DocumentBuilder owns one reportlab canvas plus the layout cursor;
       PDFService drives it through two fixed templates.
Who:   Called by the /api/pdf routes (in the threadpool, rendering is CPU-bound).
When:  Once per download request; nothing is cached or persisted.

Templates:
    Single formula (one page, description may continue on extra pages)
        Fórmula title → divider → "Libro: …" → name → formula box
        → "Descripción:" section → "Generado el: …" footer

    Collection (exactly N + 3 pages while the index fits on one page)
        cover → index → one page per formula → colophon

Coordinates:
    reportlab measures y from the bottom of the page. The builder keeps its
    cursor as the distance from the TOP edge, which is how the templates
    read, and converts only when it draws.
"""

import io
import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape
from zoneinfo import ZoneInfo

from reportlab.lib import colors
from reportlab.lib.enums import TA_JUSTIFY
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph

from formulario.config import settings
from formulario.exceptions import DocumentGenerationError, FormularioError, ValidationError
from formulario.models.formula import Formula

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}

# ── Palette ───────────────────────────────────────────────────────────────
INK = colors.HexColor("#2c3e50")
ACCENT = colors.HexColor("#3498db")
MUTED = colors.HexColor("#7f8c8d")
FAINT = colors.HexColor("#95a5a6")
SECTION = colors.HexColor("#34495e")
BODY = colors.HexColor("#555555")
BOX_FILL = colors.HexColor("#e8f4f8")

MARGIN = 50
LINE_SPACING = 1.2
FORMULA_BOX_HEIGHT = 80
FORMULA_BOX_RADIUS = 10
FORMULA_BOX_PADDING = 20
FORMULA_FONT = "Courier"
FORMULA_FONT_SIZE = 18
FORMULA_MIN_FONT_SIZE = 8
FOOTER_RESERVE = 30

SPANISH_MONTHS = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def format_spanish_datetime(moment: datetime) -> str:
    """
    Long Spanish date with time, e.g. "19 de octubre de 2026, 09:05".

    Matches what es-ES locales print for a long month with 2-digit
    hour and minute, without depending on the host's installed locales.
    """
    month = SPANISH_MONTHS[moment.month - 1]
    return f"{moment.day} de {month} de {moment.year}, {moment:%H:%M}"


class DocumentBuilder:
    """
    Append-only page builder around a single reportlab canvas.

    State:
        cursor:      distance from the top edge where the next block starts
        page_count:  pages started so far (the first page counts)

    Every append method draws at the cursor and moves it down. Methods that
    may run past the printable area start a new page themselves; `paragraph`
    reports whether that happened. `finish()` closes the document and is the
    only way to get the bytes.
    """

    def __init__(
        self,
        page_size: Tuple[float, float] = A4,
        margin: float = MARGIN,
        title: Optional[str] = None,
    ):
        self.page_width, self.page_height = page_size
        self.margin = margin
        self._buffer = io.BytesIO()
        # invariant=1 keeps ids and creation dates out of the file, so equal
        # input (and equal timestamp) gives equal bytes
        self._canvas = canvas.Canvas(self._buffer, pagesize=page_size, invariant=1)
        if title:
            self._canvas.setTitle(title)
        self._canvas.setAuthor("Formulario")
        self.cursor = float(margin)
        self.page_count = 1
        self._leading = 12 * LINE_SPACING
        self._finished = False

    # ── Geometry ──────────────────────────────────────────────────────────

    @property
    def printable_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        """Lowest cursor position content may reach (measured from the top)."""
        return self.page_height - self.margin

    @property
    def remaining_height(self) -> float:
        return self.bottom_limit - self.cursor

    def _baseline(self, top: float, size: float) -> float:
        return self.page_height - top - size

    # ── Pages ─────────────────────────────────────────────────────────────

    def new_page(self) -> None:
        self._ensure_open()
        self._canvas.showPage()
        self.page_count += 1
        self.cursor = float(self.margin)

    def move_down(self, lines: float = 1.0) -> None:
        """Advance by a multiple of the last text line height."""
        self.cursor += self._leading * lines

    # ── Text ──────────────────────────────────────────────────────────────

    def text(
        self,
        content: str,
        size: float = 12,
        color=INK,
        align: str = "left",
        font: str = "Helvetica",
        indent: float = 0,
        underline: bool = False,
    ) -> None:
        """
        Draw wrapped text at the cursor.

        Lines that would cross the bottom margin move to a new page.
        """
        self._ensure_open()
        leading = size * LINE_SPACING
        self._leading = leading
        width = self.printable_width - indent
        for line in simpleSplit(content, font, size, width) or [""]:
            if self.cursor + leading > self.bottom_limit:
                self.new_page()
            self._draw_line(line, self.cursor, size, color, align, font, indent, underline)
            self.cursor += leading

    def text_at(
        self,
        content: str,
        top: float,
        size: float = 8,
        color=FAINT,
        align: str = "center",
        font: str = "Helvetica",
    ) -> None:
        """Draw one line at a fixed position; the cursor does not move."""
        self._ensure_open()
        self._draw_line(content, top, size, color, align, font, 0, False)

    def footer(self, content: str) -> None:
        """Small centered line on the last printable row of the current page."""
        self.text_at(content, self.bottom_limit - 8, size=8, color=FAINT)

    def _draw_line(self, line, top, size, color, align, font, indent, underline) -> None:
        c = self._canvas
        c.setFont(font, size)
        c.setFillColor(color)
        y = self._baseline(top, size)
        line_width = c.stringWidth(line, font, size)
        if align == "center":
            x = self.page_width / 2 - line_width / 2
        elif align == "right":
            x = self.page_width - self.margin - line_width
        else:
            x = self.margin + indent
        c.drawString(x, y, line)
        if underline and line:
            c.setStrokeColor(color)
            c.setLineWidth(max(size / 16, 0.5))
            c.line(x, y - 2, x + line_width, y - 2)

    # ── Blocks ────────────────────────────────────────────────────────────

    def divider(self, color=ACCENT, width: float = 2) -> None:
        """Horizontal rule across the printable width at the cursor."""
        self._ensure_open()
        c = self._canvas
        y = self.page_height - self.cursor
        c.setStrokeColor(color)
        c.setLineWidth(width)
        c.line(self.margin, y, self.page_width - self.margin, y)
        self.cursor += width

    def formula_box(self, formula_text: str, height: float = FORMULA_BOX_HEIGHT) -> None:
        """
        Rounded, filled box of fixed height holding the formula in monospace.

        The font steps down from 18pt until the wrapped text fits inside the
        box; at the 8pt floor, lines that still do not fit are dropped.
        """
        self._ensure_open()
        if self.cursor + height > self.bottom_limit:
            self.new_page()
        c = self._canvas
        top = self.cursor
        c.setFillColor(BOX_FILL)
        c.setStrokeColor(ACCENT)
        c.setLineWidth(1)
        c.roundRect(
            self.margin,
            self.page_height - top - height,
            self.printable_width,
            height,
            radius=FORMULA_BOX_RADIUS,
            stroke=1,
            fill=1,
        )

        inner_width = self.printable_width - 2 * FORMULA_BOX_PADDING
        inner_height = height - FORMULA_BOX_PADDING
        size, lines = fit_formula_text(formula_text, inner_width, inner_height)
        leading = size * LINE_SPACING
        block = leading * len(lines)
        line_top = top + (height - block) / 2
        for line in lines:
            self._draw_line(line, line_top, size, INK, "center", FORMULA_FONT, 0, False)
            line_top += leading
        self.cursor = top + height

    def paragraph(
        self,
        content: str,
        size: float = 12,
        color=BODY,
        allow_page_break: bool = True,
        reserve: float = 0,
    ) -> bool:
        """
        Justified prose block, width-capped to the printable area.

        With allow_page_break the text continues on as many new pages as
        needed; without it, the part that does not fit on the current page
        is dropped. `reserve` keeps that many points free above the bottom
        margin on the current page (footer space).

        Returns True when at least one new page was started.
        """
        self._ensure_open()
        style = ParagraphStyle(
            "body",
            fontName="Helvetica",
            fontSize=size,
            leading=size * 1.25,
            textColor=color,
            alignment=TA_JUSTIFY,
        )
        markup = escape(content).replace("\n", "<br/>")
        pending: Optional[Paragraph] = Paragraph(markup, style)
        broke = False

        while pending is not None:
            available = self.remaining_height - reserve
            _, needed = pending.wrap(self.printable_width, available)
            if needed <= available:
                self._draw_flowable(pending, needed)
                pending = None
                break

            parts = pending.split(self.printable_width, available)
            if parts:
                head = parts[0]
                _, head_height = head.wrap(self.printable_width, available)
                self._draw_flowable(head, head_height)
                pending = parts[1] if len(parts) > 1 else None
            elif self.cursor <= self.margin:
                # Not even one line fits on an empty page; draw it anyway
                self._draw_flowable(pending, needed)
                pending = None

            if pending is None or not allow_page_break:
                break
            self.new_page()
            reserve = 0
            broke = True

        return broke

    def _draw_flowable(self, flowable: Paragraph, height: float) -> None:
        flowable.drawOn(self._canvas, self.margin, self.page_height - self.cursor - height)
        self.cursor += height
        self._leading = flowable.style.leading

    # ── Output ────────────────────────────────────────────────────────────

    def finish(self) -> bytes:
        """Close the document and return its bytes. Can be called once."""
        self._ensure_open()
        self._canvas.save()
        self._finished = True
        return self._buffer.getvalue()

    def _ensure_open(self) -> None:
        if self._finished:
            raise RuntimeError("Document already finished")


def fit_formula_text(
    formula_text: str,
    max_width: float,
    max_height: float,
) -> Tuple[float, List[str]]:
    """Largest font size (18pt down to 8pt) whose wrapped lines fit the box."""
    size = float(FORMULA_FONT_SIZE)
    while True:
        lines = simpleSplit(formula_text, FORMULA_FONT, size, max_width) or [""]
        if len(lines) * size * LINE_SPACING <= max_height or size <= FORMULA_MIN_FONT_SIZE:
            break
        size -= 1
    max_lines = max(int(max_height // (size * LINE_SPACING)), 1)
    return size, lines[:max_lines]


class PDFService:
    """
    Renders the two document templates.

    Each call builds its own DocumentBuilder, so concurrent calls share
    nothing. Any exception raised while drawing is re-raised as
    DocumentGenerationError; callers never receive partial bytes.
    """

    def __init__(self, page_size: Optional[str] = None, timezone: Optional[str] = None):
        self.page_size = PAGE_SIZES[(page_size or settings.pdf_page_size).upper()]
        self.timezone = ZoneInfo(timezone or settings.pdf_timezone)

    def _timestamp(self, generated_at: Optional[datetime]) -> str:
        moment = generated_at or datetime.now(self.timezone)
        if moment.tzinfo is not None:
            moment = moment.astimezone(self.timezone)
        return format_spanish_datetime(moment)

    def generate_formula_pdf(
        self,
        formula: Formula,
        book_name: Optional[str],
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """
        One formula on one page.

        Args:
            formula: Record with name, formula_text and optional description
            book_name: Owning book's display name; the "Libro" line is
                       skipped when empty
            generated_at: Stamp for the footer (defaults to now)

        Raises:
            DocumentGenerationError: Drawing failed; no bytes are returned
        """
        try:
            builder = DocumentBuilder(self.page_size, title=formula.name)

            builder.text("Fórmula", size=24, color=INK, align="center")
            builder.move_down(0.5)
            builder.divider()
            builder.move_down(1)

            if book_name:
                builder.text(f"Libro: {book_name}", size=12, color=MUTED)
                builder.move_down(0.5)

            builder.text(formula.name, size=20, color=INK)
            builder.move_down(1)
            builder.formula_box(formula.formula_text)
            builder.footer(f"Generado el: {self._timestamp(generated_at)}")
            builder.move_down(1.5)

            if formula.description:
                builder.text("Descripción:", size=14, color=SECTION, underline=True)
                builder.move_down(0.5)
                builder.paragraph(formula.description, reserve=FOOTER_RESERVE)

            pdf = builder.finish()
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Formula PDF generation failed for '%s': %s", formula.name, e, exc_info=True)
            raise DocumentGenerationError(
                message="Error generando el PDF de la fórmula",
                cause=e,
                context={"formula": formula.name},
            ) from e

        logger.info(
            "Generated formula PDF '%s': %d page(s), %d bytes",
            formula.name, builder.page_count, len(pdf),
        )
        return pdf

    def generate_collection_pdf(
        self,
        title: str,
        formulas: Sequence[Formula],
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """
        Cover, index, one page per formula (input order), colophon.

        Args:
            title: Book name or custom collection title for the cover
            formulas: Non-empty, already ordered; never re-sorted here
            generated_at: Stamp for the colophon (defaults to now)

        Raises:
            ValidationError: `formulas` is empty
            DocumentGenerationError: Drawing failed; no bytes are returned
        """
        if not formulas:
            raise ValidationError("La colección no contiene fórmulas", field="formulas")

        total = len(formulas)
        try:
            builder = DocumentBuilder(self.page_size, title=title)

            # Cover
            builder.text("Colección de Fórmulas", size=28, color=INK, align="center")
            builder.move_down(1)
            builder.text(title, size=20, color=ACCENT, align="center")
            builder.move_down(0.5)
            builder.text(f"Total de fórmulas: {total}", size=12, color=MUTED, align="center")
            builder.move_down(3)
            builder.divider()

            # Index
            builder.new_page()
            builder.text("Índice", size=18, color=INK, underline=True)
            builder.move_down(1)
            for number, formula in enumerate(formulas, start=1):
                builder.text(f"{number}. {formula.name}", size=12, color=BODY, indent=20)
                builder.move_down(0.3)

            # One page per formula
            for number, formula in enumerate(formulas, start=1):
                builder.new_page()
                builder.text(f"Fórmula {number} de {total}", size=10, color=FAINT, align="right")
                builder.move_down(0.5)
                builder.text(formula.name, size=20, color=INK)
                builder.move_down(1)
                builder.formula_box(formula.formula_text)
                builder.footer(f"Página {number + 2}")
                builder.move_down(1.5)

                if formula.description:
                    builder.text("Descripción:", size=14, color=SECTION, underline=True)
                    builder.move_down(0.5)
                    builder.paragraph(
                        formula.description,
                        allow_page_break=False,
                        reserve=FOOTER_RESERVE,
                    )

            # Colophon
            builder.new_page()
            builder.text("Documento generado automáticamente", size=12, color=MUTED, align="center")
            builder.move_down(0.5)
            builder.text(f"Fecha: {self._timestamp(generated_at)}", size=10, color=MUTED, align="center")

            pdf = builder.finish()
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Collection PDF generation failed for '%s': %s", title, e, exc_info=True)
            raise DocumentGenerationError(
                message="Error generando el PDF de la colección",
                cause=e,
                context={"title": title, "formulas": total},
            ) from e

        logger.info(
            "Generated collection PDF '%s': %d formulas, %d pages, %d bytes",
            title, total, builder.page_count, len(pdf),
        )
        return pdf


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless between calls; every render gets its own builder
pdf_service = PDFService()
