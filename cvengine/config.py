"""Layout configuration for the CV engine.

Every geometry constant the renderer uses lives here: page size, margins,
usable width, the overflow threshold, font sizes per block kind, colors and
spacing. Defaults reproduce the classic A4 / Helvetica CV look; a JSON file can
override any field (see load_layout_config).
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field

from reportlab.lib.pagesizes import A4, LETTER

logger = logging.getLogger(__name__)

# regular, bold, oblique face names for reportlab's built-in families
FONT_FAMILIES = {
    "Helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique"),
    "Times": ("Times-Roman", "Times-Bold", "Times-Italic"),
    "Courier": ("Courier", "Courier-Bold", "Courier-Oblique"),
}

PAGE_SIZES = {
    "A4": A4,
    "LETTER": LETTER,
}

LINK_STYLES = ("title", "label")

DEFAULT_SECTION_TITLES = {
    "summary": "PROFESSIONAL SUMMARY",
    "education": "EDUCATION",
    "experience": "WORK EXPERIENCE",
    "projects": "PROJECTS",
    "skills": "TECHNICAL SKILLS",
    "certifications": "CERTIFICATIONS & ACHIEVEMENTS",
    "interests": "INTERESTS",
}


@dataclass(frozen=True)
class LayoutConfig:
    """Immutable render settings. One instance may be shared across renders."""

    # --- Page geometry ---
    page_size: tuple = A4
    margin: float = 50.0
    usable_width: float | None = None  # defaults to page width - 2 * margin
    overflow_threshold: float | None = None  # defaults to page height - margin
    font_family: str = "Helvetica"

    # --- Font sizes (in points) ---
    name_size: float = 28.0
    subtitle_size: float = 13.0
    contact_size: float = 11.0
    link_size: float = 10.0
    heading_size: float = 16.0
    entry_title_size: float = 12.0
    entry_subtitle_size: float = 11.0
    date_size: float = 10.0
    body_size: float = 10.0
    summary_size: float = 11.0
    skills_size: float = 11.0
    cert_title_size: float = 11.0

    # --- Colors ---
    text_color: str = "#000000"
    secondary_color: str = "#3E3E3E"
    link_color: str = "#0066CC"
    separator_color: str = "#9A9A9A"

    # --- Spacing ---
    line_gap: float = 0.0
    space_after_name: float = 6.0
    space_after_subtitle: float = 4.0
    space_after_contact: float = 4.0
    space_after_links: float = 4.0
    space_after_header_rule: float = 14.0
    space_after_heading: float = 6.0
    space_between_entries: float = 10.0
    space_between_blocks: float = 2.0
    space_before_separator: float = 8.0
    space_after_separator: float = 14.0
    space_between_bullets: float = 3.0
    bullet_indent: float = 10.0
    link_spacing: float = 18.0
    rule_thickness: float = 0.6
    header_rule_thickness: float = 1.0

    # --- Behaviour ---
    link_style: str = "title"
    contact_delimiter: str = " | "
    list_separator: str = " • "
    bullet_char: str = "•"
    section_titles: dict = field(default_factory=lambda: dict(DEFAULT_SECTION_TITLES))
    invariant: bool = True

    def __post_init__(self):
        if self.font_family not in FONT_FAMILIES:
            raise ValueError(
                f"Unknown font_family {self.font_family!r}; expected one of {sorted(FONT_FAMILIES)}"
            )
        if self.link_style not in LINK_STYLES:
            raise ValueError(f"Unknown link_style {self.link_style!r}; expected one of {LINK_STYLES}")
        if self.margin < 0:
            raise ValueError("margin must be >= 0")
        if self.content_width <= 0:
            raise ValueError("usable width must be positive")
        if not self.margin < self.threshold <= self.page_height:
            raise ValueError("overflow_threshold must lie between the top margin and the page height")
        missing = set(DEFAULT_SECTION_TITLES) - set(self.section_titles)
        if missing:
            raise ValueError(f"section_titles missing keys: {sorted(missing)}")

    @property
    def page_width(self) -> float:
        return float(self.page_size[0])

    @property
    def page_height(self) -> float:
        return float(self.page_size[1])

    @property
    def content_width(self) -> float:
        if self.usable_width is not None:
            return float(self.usable_width)
        return self.page_width - 2 * self.margin

    @property
    def threshold(self) -> float:
        """Lowest offset (from the page top) content may reach before a break."""
        if self.overflow_threshold is not None:
            return float(self.overflow_threshold)
        return self.page_height - self.margin

    @property
    def left(self) -> float:
        return self.margin

    @property
    def top(self) -> float:
        return self.margin

    @property
    def fonts(self) -> tuple:
        return FONT_FAMILIES[self.font_family]

    def with_overrides(self, **overrides) -> "LayoutConfig":
        return dataclasses.replace(self, **overrides)


def _coerce_page_size(value):
    if isinstance(value, str):
        try:
            return PAGE_SIZES[value.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown page size {value!r}; expected one of {sorted(PAGE_SIZES)}"
            ) from None
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return (float(value[0]), float(value[1]))
    raise ValueError(f"page_size must be a name or a [width, height] pair, got {value!r}")


def config_from_dict(overrides: dict, base: LayoutConfig | None = None) -> LayoutConfig:
    """Apply a dict of overrides on top of *base* (or the defaults)."""
    base = base or LayoutConfig()
    known = {f.name for f in dataclasses.fields(LayoutConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown layout config keys: {unknown}")
    values = dict(overrides)
    if "page_size" in values:
        values["page_size"] = _coerce_page_size(values["page_size"])
    if "section_titles" in values:
        titles = dict(base.section_titles)
        titles.update(values["section_titles"] or {})
        values["section_titles"] = titles
    return base.with_overrides(**values)


def load_layout_config(path: str | None) -> LayoutConfig:
    """Load a LayoutConfig from a JSON overrides file. None or '' gives the defaults."""
    if not path:
        return LayoutConfig()
    with open(path, "r", encoding="utf-8") as f:
        overrides = json.load(f)
    if not isinstance(overrides, dict):
        raise ValueError(f"Layout config {path} must contain a JSON object")
    config = config_from_dict(overrides)
    logger.info("Loaded layout config from %s (%d overrides)", path, len(overrides))
    return config
