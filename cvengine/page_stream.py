"""PageStream: draw-instruction sink and PDF serializer.

Renderers never touch a reportlab canvas directly. They emit instructions
positioned in top-down page coordinates (offset from the top edge); the stream
keeps them per page and only converts to PDF space when serialize() runs.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass

from reportlab.lib.colors import HexColor
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen.canvas import Canvas

from cvengine.measure import line_height

logger = logging.getLogger(__name__)


class SerializationError(RuntimeError):
    """Raised when the PDF encoder cannot finalize the document."""


@dataclass(frozen=True, eq=False)
class ParagraphBlock:
    """A wrapped reportlab Paragraph occupying [top, top + height)."""

    x: float
    top: float
    width: float
    height: float
    paragraph: object
    text: str
    kind: str = "text"

    def draw(self, canv: Canvas, page_height: float) -> None:
        self.paragraph.drawOn(canv, self.x, page_height - self.top - self.height)


@dataclass(frozen=True)
class TextSpan:
    """A single unwrapped line of text, optionally underlined."""

    x: float
    top: float
    text: str
    font_name: str
    font_size: float
    color: str
    underline: bool = False
    kind: str = "span"

    @property
    def width(self) -> float:
        return pdfmetrics.stringWidth(self.text, self.font_name, self.font_size)

    @property
    def height(self) -> float:
        return line_height(self.font_size)

    def draw(self, canv: Canvas, page_height: float) -> None:
        ascent, _ = pdfmetrics.getAscentDescent(self.font_name, self.font_size)
        baseline = page_height - self.top - ascent
        canv.saveState()
        canv.setFillColor(HexColor(self.color))
        canv.setFont(self.font_name, self.font_size)
        canv.drawString(self.x, baseline, self.text)
        if self.underline:
            canv.setStrokeColor(HexColor(self.color))
            canv.setLineWidth(0.5)
            canv.line(self.x, baseline - 1.5, self.x + self.width, baseline - 1.5)
        canv.restoreState()


@dataclass(frozen=True)
class RuleLine:
    """Horizontal rule; its height is the stroke thickness."""

    x: float
    top: float
    width: float
    color: str
    thickness: float
    kind: str = "rule"
    text: str = ""

    @property
    def height(self) -> float:
        return self.thickness

    def draw(self, canv: Canvas, page_height: float) -> None:
        y = page_height - self.top - self.thickness / 2
        canv.saveState()
        canv.setStrokeColor(HexColor(self.color))
        canv.setLineWidth(self.thickness)
        canv.line(self.x, y, self.x + self.width, y)
        canv.restoreState()


@dataclass(frozen=True)
class LinkArea:
    """Clickable rectangle pointing at *url*."""

    x: float
    top: float
    width: float
    height: float
    url: str
    kind: str = "link"
    text: str = ""

    def draw(self, canv: Canvas, page_height: float) -> None:
        y0 = page_height - self.top - self.height
        canv.linkURL(self.url, (self.x, y0, self.x + self.width, y0 + self.height),
                     relative=0, thickness=0)


class PageStream:
    """Accumulates instructions into fixed-size pages and encodes them as PDF."""

    def __init__(self, page_size, title: str = "", author: str = "", invariant: bool = True):
        self.page_width = float(page_size[0])
        self.page_height = float(page_size[1])
        self.title = title
        self.author = author
        self.invariant = invariant
        self.pages = [[]]

    @classmethod
    def for_config(cls, config, title: str = "", author: str = "") -> "PageStream":
        return cls(config.page_size, title=title, author=author, invariant=config.invariant)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> list:
        return self.pages[-1]

    def emit(self, instruction) -> None:
        self.current_page.append(instruction)

    def new_page(self) -> None:
        """Finalize the current page and start an empty one."""
        logger.debug("Finalized page %d with %d instructions", len(self.pages), len(self.current_page))
        self.pages.append([])

    def page_text(self, index: int) -> str:
        return "\n".join(i.text for i in self.pages[index] if i.text)

    def text(self) -> str:
        """Plain text of every instruction, page by page, in draw order."""
        return "\n".join(self.page_text(i) for i in range(self.page_count))

    def serialize(self) -> bytes:
        """Encode all pages into a PDF byte string.

        Raises:
            SerializationError: if the encoder fails; no partial output is returned
        """
        buffer = io.BytesIO()
        try:
            canv = Canvas(
                buffer,
                pagesize=(self.page_width, self.page_height),
                invariant=1 if self.invariant else 0,
            )
            if self.title:
                canv.setTitle(self.title)
            if self.author:
                canv.setAuthor(self.author)
            canv.setCreator("cvengine")
            for page in self.pages:
                for instruction in page:
                    instruction.draw(canv, self.page_height)
                canv.showPage()
            canv.save()
        except Exception as e:
            logger.error("PDF serialization failed: %s", e)
            raise SerializationError(f"Failed to serialize document: {e}") from e
        return buffer.getvalue()

    async def serialize_async(self) -> bytes:
        """serialize() off the event loop; the single await point of a render."""
        return await asyncio.to_thread(self.serialize)
