"""CV PDF generation: lay out a DocumentModel and serialize it.

layout_document() is pure and synchronous: measurement, page-break decisions and
draw instructions all happen in memory. render() adds the single asynchronous
step, PDF serialization.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from cvengine.config import LayoutConfig
from cvengine.cursor import LayoutCursor
from cvengine.page_stream import PageStream
from cvengine.sections import RENDERERS, SectionLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutResult:
    stream: PageStream
    cursor: LayoutCursor
    sections: tuple
    headings: tuple = ()

    @property
    def page_count(self) -> int:
        return self.cursor.page_index


@dataclass(frozen=True)
class RenderResult:
    pdf: bytes
    sections: tuple
    page_count: int
    headings: tuple = ()


def layout_document(model, config: LayoutConfig | None = None) -> LayoutResult:
    """Run every section renderer in order against a fresh cursor and stream."""
    config = config or LayoutConfig()
    name = model.profile.full_name
    stream = PageStream.for_config(config, title=f"{name} - CV", author=name)
    cursor = LayoutCursor.for_config(config, on_page_break=stream.new_page)
    layout = SectionLayout(config, cursor, stream)

    rendered, headings = [], []
    for renderer_cls in RENDERERS:
        renderer = renderer_cls(layout)
        if renderer.render(model):
            rendered.append(renderer.name)
            if getattr(renderer, "key", None):
                headings.append(renderer.title)
        else:
            logger.debug("Section %s omitted: nothing to render", renderer.name)

    return LayoutResult(stream=stream, cursor=cursor, sections=tuple(rendered), headings=tuple(headings))


async def render(model, config: LayoutConfig | None = None) -> RenderResult:
    """Lay out and serialize *model*.

    Raises:
        SerializationError: if the PDF cannot be finalized (no bytes are returned)
    """
    result = layout_document(model, config)
    pdf = await result.stream.serialize_async()
    logger.info(
        "CV rendered: %d page(s), %d bytes, sections=%s",
        result.page_count, len(pdf), ", ".join(result.sections),
    )
    return RenderResult(
        pdf=pdf, sections=result.sections, page_count=result.page_count, headings=result.headings,
    )


async def render_bytes(model, config: LayoutConfig | None = None) -> bytes:
    return (await render(model, config)).pdf


def render_to_file(model, output_path: str, config: LayoutConfig | None = None) -> RenderResult:
    """Blocking convenience for scripts: render and write the PDF to *output_path*."""
    result = asyncio.run(render(model, config))
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(result.pdf)
    logger.info("PDF generated: %s", output_path)
    return result
