"""Text measurement for the layout engine.

Measurement and placement share one code path: layout_block() builds and wraps a
reportlab Paragraph, and the very same object is later drawn by the PageStream.
The height returned here is therefore the height the block occupies on the page.
"""

from __future__ import annotations

import logging
import re

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase import pdfmetrics
from reportlab.platypus import Paragraph

logger = logging.getLogger(__name__)

# baseline-to-baseline distance as a multiple of the font size (before line_gap)
LINE_HEIGHT_RATIO = 1.2

# large enough that wrap() never truncates; page breaks are the cursor's job
_UNBOUNDED_HEIGHT = 1e6

ALIGNMENTS = {
    "left": TA_LEFT,
    "center": TA_CENTER,
    "right": TA_RIGHT,
    "justify": TA_JUSTIFY,
}


class MeasurementError(ValueError):
    """Raised when a block cannot be sized (bad text, unknown font, bad markup)."""


def escape_markup(text: str) -> str:
    """Escape plain text for reportlab Paragraph XML."""
    if not text:
        return ""
    text = re.sub(r"\s+", " ", text)
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def line_height(font_size: float, line_gap: float = 0.0) -> float:
    return font_size * LINE_HEIGHT_RATIO + line_gap


def check_font(font_name: str) -> None:
    try:
        pdfmetrics.getFont(font_name)
    except Exception as e:
        raise MeasurementError(f"Unknown font {font_name!r}") from e


def make_style(
    name: str,
    font_name: str,
    font_size: float,
    color: str = "#000000",
    align: str = "left",
    line_gap: float = 0.0,
    left_indent: float = 0.0,
    first_line_indent: float = 0.0,
) -> ParagraphStyle:
    """ParagraphStyle whose leading follows line_height(font_size, line_gap)."""
    check_font(font_name)
    try:
        alignment = ALIGNMENTS[align]
    except KeyError:
        raise MeasurementError(f"Unknown alignment {align!r}") from None
    return ParagraphStyle(
        name,
        fontName=font_name,
        fontSize=font_size,
        leading=line_height(font_size, line_gap),
        textColor=HexColor(color),
        alignment=alignment,
        leftIndent=left_indent,
        firstLineIndent=first_line_indent,
        spaceBefore=0,
        spaceAfter=0,
        allowWidows=0,
    )


def build_paragraph(markup: str, style: ParagraphStyle) -> Paragraph:
    """Parse Paragraph markup, converting parser failures into MeasurementError."""
    if not isinstance(markup, str):
        raise MeasurementError(f"Expected text, got {type(markup).__name__}")
    try:
        markup.encode("utf-8")
    except UnicodeEncodeError as e:
        raise MeasurementError(f"Text is not encodable: {e}") from e
    try:
        return Paragraph(markup, style)
    except ValueError as e:
        raise MeasurementError(f"Malformed paragraph markup: {e}") from e


def layout_block(markup: str, width: float, style: ParagraphStyle):
    """Wrap *markup* at *width*. Returns (paragraph, height).

    The returned paragraph is ready to draw; drawing it anywhere occupies exactly
    *height* points vertically.
    """
    if not width or width <= 0:
        raise MeasurementError(f"Wrap width must be positive, got {width!r}")
    paragraph = build_paragraph(markup, style)
    try:
        _, height = paragraph.wrap(width, _UNBOUNDED_HEIGHT)
    except (ValueError, KeyError, TypeError) as e:
        raise MeasurementError(f"Cannot wrap text: {e}") from e
    return paragraph, float(height)


def measure_block(markup: str, width: float, style: ParagraphStyle) -> float:
    """Height of *markup* wrapped at *width* in *style*. No side effects."""
    if isinstance(markup, str) and not markup.strip():
        return 0.0
    return layout_block(markup, width, style)[1]


def measure(
    text: str,
    width: float,
    font_name: str,
    font_size: float,
    line_gap: float = 0.0,
    align: str = "left",
) -> float:
    """Rendered height of plain *text* wrapped at *width*.

    Includes *line_gap* in the leading of every wrapped line, the same way the
    placement step lays the text out.
    """
    if not isinstance(text, str):
        raise MeasurementError(f"Expected text, got {type(text).__name__}")
    style = make_style("measure", font_name, font_size, align=align, line_gap=line_gap)
    return measure_block(escape_markup(text), width, style)


def string_width(text: str, font_name: str, font_size: float) -> float:
    """Width of a single unwrapped line."""
    check_font(font_name)
    try:
        return pdfmetrics.stringWidth(text, font_name, font_size)
    except (UnicodeError, TypeError) as e:
        raise MeasurementError(f"Cannot measure {text!r}: {e}") from e
