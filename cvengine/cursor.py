"""LayoutCursor: vertical write position plus the page-break decision.

Offsets are measured downward from the top edge of the page, in points. The
break check always happens before content is drawn: callers reserve() the
height they are about to place, then advance() by what they consumed.
"""

import logging

logger = logging.getLogger(__name__)


class LayoutCursor:
    """Tracks the write offset on the active page and starts new pages.

    Args:
        top_margin: Offset every page starts at
        threshold: Largest offset content may reach on a page
        on_page_break: Called with no arguments when a new page must begin
    """

    def __init__(self, top_margin: float, threshold: float, on_page_break=None):
        if threshold <= top_margin:
            raise ValueError("threshold must be greater than top_margin")
        self.top_margin = float(top_margin)
        self.threshold = float(threshold)
        self.offset = self.top_margin
        self.page_index = 1
        self._on_page_break = on_page_break

    @classmethod
    def for_config(cls, config, on_page_break=None) -> "LayoutCursor":
        return cls(config.top, config.threshold, on_page_break=on_page_break)

    @property
    def remaining(self) -> float:
        return self.threshold - self.offset

    @property
    def at_page_top(self) -> bool:
        return self.offset <= self.top_margin

    def fits(self, required_height: float) -> bool:
        return self.offset + required_height <= self.threshold

    def reserve(self, required_height: float) -> bool:
        """Break the page first if *required_height* would overflow it.

        A block taller than a whole page is never split: on a fresh page it is
        placed as-is and allowed to run past the threshold. Returns True when
        a page break fired.
        """
        if required_height < 0:
            raise ValueError(f"required_height must be >= 0, got {required_height}")
        if self.fits(required_height) or self.at_page_top:
            return False
        self.page_break()
        return True

    def advance(self, consumed_height: float) -> None:
        if consumed_height < 0:
            raise ValueError(f"consumed_height must be >= 0, got {consumed_height}")
        self.offset += consumed_height

    def page_break(self) -> None:
        logger.debug(
            "Page break at offset %.1f on page %d (threshold %.1f)",
            self.offset, self.page_index, self.threshold,
        )
        if self._on_page_break is not None:
            self._on_page_break()
        self.page_index += 1
        self.offset = self.top_margin
