"""Section renderers: Header, Summary, Education, Experience, Projects, Skills,
Certifications, Interests.

Every renderer measures an entry completely before drawing any of it, so an
entry that cannot be sized is skipped whole. Sections with nothing to show emit
nothing at all (no heading, no separator).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from cvengine.measure import (
    MeasurementError,
    escape_markup,
    layout_block,
    line_height,
    make_style,
    string_width,
)
from cvengine.page_stream import LinkArea, ParagraphBlock, RuleLine, TextSpan

logger = logging.getLogger(__name__)

# hanging indent of wrapped bullet lines, relative to the glyph
BULLET_HANG = 9.0


def build_styles(config) -> dict:
    """Build all ParagraphStyles used in the CV."""
    regular, bold, oblique = config.fonts
    gap = config.line_gap
    text, secondary = config.text_color, config.secondary_color
    return {
        "name": make_style("name", bold, config.name_size, text, "center", gap),
        "subtitle": make_style("subtitle", regular, config.subtitle_size, secondary, "center", gap),
        "contact": make_style("contact", regular, config.contact_size, text, "center", gap),
        "heading": make_style("heading", bold, config.heading_size, text, "left", gap),
        "entry_title": make_style("entry_title", bold, config.entry_title_size, text, "left", gap),
        "entry_subtitle": make_style(
            "entry_subtitle", oblique, config.entry_subtitle_size, secondary, "left", gap
        ),
        "date": make_style("date", regular, config.date_size, secondary, "left", gap),
        "body": make_style("body", regular, config.body_size, text, "justify", gap),
        "detail": make_style("detail", regular, config.body_size, text, "left", gap),
        "bullet": make_style(
            "bullet", regular, config.body_size, text, "left", gap,
            left_indent=BULLET_HANG, first_line_indent=-BULLET_HANG,
        ),
        "summary": make_style("summary", regular, config.summary_size, text, "justify", gap),
        "list": make_style("list", regular, config.skills_size, text, "justify", gap),
        "cert_title": make_style("cert_title", bold, config.cert_title_size, text, "left", gap),
        "cert_issuer": make_style(
            "cert_issuer", oblique, config.body_size, secondary, "left", gap
        ),
    }


def _ensure_url(url: str) -> str:
    """Ensure URL has scheme for href. Adds https:// if missing."""
    url = (url or "").strip()
    if not url:
        return ""
    if not url.startswith(("http://", "https://", "mailto:")):
        return "https://" + url
    return url


def _clean_url(url: str) -> str:
    """'https://github.com/foo/' -> 'github.com/foo' for display."""
    if not url:
        return ""
    return re.sub(r"^https?://", "", url).rstrip("/")


def _escape_href(url: str) -> str:
    return (url.replace("&", "&amp;").replace('"', "&quot;")
            .replace("<", "&lt;").replace(">", "&gt;"))


def _link_markup(url: str, label_markup: str, color: str, underline: bool = False) -> str:
    """reportlab <a href> markup around already-escaped label markup."""
    href = _escape_href(_ensure_url(url))
    if underline:
        label_markup = f"<u>{label_markup}</u>"
    return f'<a href="{href}" color="{color}">{label_markup}</a>'


def format_date_range(start: str, end: str) -> str:
    """'start – end'; missing end reads 'Present', missing start leaves the left side empty."""
    if not start and not end:
        return ""
    return f"{start or ''} – {end or 'Present'}".strip()


def _build_degree_with_field(degree: str, field_of_study: str) -> str:
    """Append the field of study unless the degree already names it.

    "BSc", "Computer Science" -> "BSc, Computer Science"
    """
    if field_of_study and field_of_study.lower() not in degree.lower():
        return f"{degree}, {field_of_study}"
    return degree


def _dedup_edu_location(institution: str, location: str) -> str:
    """Drop the city from *location* when the institution name already ends with it.

    institution="University of Leeds, Leeds", location="Leeds, UK" -> "UK"
    """
    if not location or not institution:
        return location
    inst_parts = [p.strip() for p in institution.split(",")]
    if len(inst_parts) >= 2:
        loc_parts = [p.strip() for p in location.split(",")]
        if loc_parts[0].lower() == inst_parts[-1].lower():
            remaining = ", ".join(loc_parts[1:]).strip()
            return remaining or location
    return location


@dataclass
class Block:
    """A measured paragraph waiting to be placed."""

    paragraph: object
    height: float
    x: float
    width: float
    text: str
    kind: str


@dataclass
class EntryLayout:
    """Measured blocks of one entry.

    head blocks are kept together on one page; body blocks are reserved one at
    a time, each preceded by its gap.
    """

    head: list
    body: list = field(default_factory=list)  # [(gap_before, Block), ...]

    @property
    def head_height(self) -> float:
        return sum(b.height for b in self.head)


class SectionLayout:
    """Drawing helpers shared by all renderers: measure, reserve, emit, advance."""

    def __init__(self, config, cursor, stream):
        self.config = config
        self.cursor = cursor
        self.stream = stream
        self.styles = build_styles(config)

    def prepare(self, markup: str, style: str, text: str, kind: str, indent: float = 0.0) -> Block:
        width = self.config.content_width - indent
        paragraph, height = layout_block(markup, width, self.styles[style])
        return Block(paragraph, height, self.config.left + indent, width, text, kind)

    def prepare_text(self, text: str, style: str, kind: str, indent: float = 0.0) -> Block:
        return self.prepare(escape_markup(text), style, text, kind, indent=indent)

    def draw(self, block: Block, reserve: bool = True) -> None:
        if reserve:
            self.cursor.reserve(block.height)
        self.stream.emit(ParagraphBlock(
            x=block.x, top=self.cursor.offset, width=block.width, height=block.height,
            paragraph=block.paragraph, text=block.text, kind=block.kind,
        ))
        self.cursor.advance(block.height)

    def draw_group(self, blocks: list, reserve: bool = True) -> None:
        if reserve:
            self.cursor.reserve(sum(b.height for b in blocks))
        for block in blocks:
            self.draw(block, reserve=reserve)

    def space(self, height: float) -> None:
        if height > 0:
            self.cursor.advance(height)

    def rule(self, thickness: float, color: str) -> None:
        self.cursor.reserve(thickness)
        self.stream.emit(RuleLine(
            x=self.config.left, top=self.cursor.offset, width=self.config.content_width,
            color=color, thickness=thickness,
        ))
        self.cursor.advance(thickness)

    def separator(self) -> None:
        self.space(self.config.space_before_separator)
        self.rule(self.config.rule_thickness, self.config.separator_color)
        self.space(self.config.space_after_separator)


class HeaderRenderer:
    """Name, optional target-path subtitle, contact line, link row(s), header rule."""

    name = "Personal Info"

    def __init__(self, layout: SectionLayout):
        self.layout = layout

    def render(self, model) -> bool:
        layout, config = self.layout, self.layout.config
        profile = model.profile

        layout.draw(layout.prepare_text(profile.full_name.upper(), "name", "name"))
        layout.space(config.space_after_name)

        if profile.target_path:
            layout.draw(layout.prepare_text(profile.target_path, "subtitle", "subtitle"))
            layout.space(config.space_after_subtitle)

        contact_parts = [p for p in (profile.email, model.contact.phone) if p]
        if contact_parts:
            contact = config.contact_delimiter.join(contact_parts)
            layout.draw(layout.prepare_text(contact, "contact", "contact"))
            layout.space(config.space_after_contact)

        if model.contact.links:
            self._draw_links(model.contact.links)
            layout.space(config.space_after_links)

        layout.rule(config.header_rule_thickness, config.text_color)
        layout.space(config.space_after_header_rule)
        return True

    def _link_rows(self, links) -> list:
        """Greedily pack (label, url, width) into rows no wider than the content width."""
        config = self.layout.config
        regular = config.fonts[0]
        rows, row, row_width = [], [], 0.0
        for label, url in links:
            w = string_width(label, regular, config.link_size)
            needed = w if not row else row_width + config.link_spacing + w
            if row and needed > config.content_width:
                rows.append((row, row_width))
                row, needed = [], w
            row.append((label, url, w))
            row_width = needed
        if row:
            rows.append((row, row_width))
        return rows

    def _draw_links(self, links) -> None:
        layout, config = self.layout, self.layout.config
        regular = config.fonts[0]
        height = line_height(config.link_size)
        for row, row_width in self._link_rows(links):
            layout.cursor.reserve(height)
            top = layout.cursor.offset
            x = config.left + (config.content_width - row_width) / 2
            for label, url, w in row:
                layout.stream.emit(TextSpan(
                    x=x, top=top, text=label, font_name=regular,
                    font_size=config.link_size, color=config.link_color, underline=True,
                ))
                layout.stream.emit(LinkArea(x=x, top=top, width=w, height=height, url=_ensure_url(url)))
                x += w + config.link_spacing
            layout.cursor.advance(height)


class SectionRenderer:
    """Heading, entries in input order, trailing separator.

    Subclasses set `key` (section_titles key) and `name`, and implement
    entries() and prepare_entry().
    """

    key = ""
    name = ""

    def __init__(self, layout: SectionLayout):
        self.layout = layout

    @property
    def title(self) -> str:
        return self.layout.config.section_titles[self.key]

    def entries(self, model) -> tuple:
        raise NotImplementedError

    def prepare_entry(self, entry) -> EntryLayout:
        raise NotImplementedError

    def prepare_heading(self) -> Block:
        return self.layout.prepare_text(self.title, "heading", "heading")

    def render(self, model) -> bool:
        entries = self.entries(model)
        if not entries:
            return False

        prepared = []
        for i, entry in enumerate(entries):
            try:
                prepared.append(self.prepare_entry(entry))
            except MeasurementError as e:
                logger.warning("Skipping %s entry %d: %s", self.name, i, e)
        if not prepared:
            return False

        layout, config = self.layout, self.layout.config
        heading = self.prepare_heading()
        # keep the heading with the first entry's head lines
        layout.cursor.reserve(heading.height + config.space_after_heading + prepared[0].head_height)
        layout.draw(heading)
        layout.space(config.space_after_heading)

        for i, entry in enumerate(prepared):
            if i:
                layout.space(config.space_between_entries)
            # the first head was reserved together with the heading
            self.draw_entry(entry, head_reserved=(i == 0))

        layout.separator()
        return True

    def draw_entry(self, entry: EntryLayout, head_reserved: bool = False) -> None:
        self.layout.draw_group(entry.head, reserve=not head_reserved)
        for gap, block in entry.body:
            self.layout.space(gap)
            self.layout.draw(block)

    # --- shared entry pieces ---

    def _bullets(self, items) -> list:
        config = self.layout.config
        body = []
        for i, item in enumerate(items):
            markup = f"{escape_markup(config.bullet_char)}&#160;&#160;{escape_markup(item)}"
            block = self.layout.prepare(
                markup, "bullet", f"{config.bullet_char} {item}", "bullet",
                indent=config.bullet_indent,
            )
            gap = config.space_between_blocks if i == 0 else config.space_between_bullets
            body.append((gap, block))
        return body

    def _title(self, title: str, link: str, style: str) -> Block:
        """Clickable colored title when a link exists (title link style), plain bold otherwise."""
        config = self.layout.config
        if link and config.link_style == "title":
            markup = _link_markup(link, escape_markup(title), config.link_color)
            return self.layout.prepare(markup, style, title, "title")
        return self.layout.prepare_text(title, style, "title")

    def _link_line(self, link: str) -> Block:
        config = self.layout.config
        bold = config.fonts[1]
        shown = _clean_url(link)
        markup = (
            f'<font name="{bold}">Link:</font> '
            + _link_markup(link, escape_markup(shown), config.link_color, underline=True)
        )
        return self.layout.prepare(markup, "detail", f"Link: {shown}", "link")


class SummaryRenderer(SectionRenderer):
    key = "summary"
    name = "Professional Summary"

    def entries(self, model) -> tuple:
        summary = (model.summary or "").strip()
        return (summary,) if summary else ()

    def prepare_entry(self, entry) -> EntryLayout:
        return EntryLayout(head=[self.layout.prepare_text(entry, "summary", "summary")])


class EducationRenderer(SectionRenderer):
    key = "education"
    name = "Education"

    def entries(self, model) -> tuple:
        return model.education

    def prepare_entry(self, entry) -> EntryLayout:
        layout = self.layout
        degree = _build_degree_with_field(entry.degree, entry.field)
        head = [layout.prepare_text(degree, "entry_title", "title")]

        location = _dedup_edu_location(entry.institution, entry.location)
        subtitle = f"{entry.institution} • {location}" if location else entry.institution
        head.append(layout.prepare_text(subtitle, "entry_subtitle", "subtitle"))

        dates = format_date_range(entry.start_date, entry.end_date)
        if dates:
            head.append(layout.prepare_text(dates, "date", "date"))
        return EntryLayout(head=head)


class ExperienceRenderer(SectionRenderer):
    key = "experience"
    name = "Work Experience"

    def entries(self, model) -> tuple:
        return model.experience

    def prepare_entry(self, entry) -> EntryLayout:
        layout, config = self.layout, self.layout.config
        head = [layout.prepare_text(entry.position, "entry_title", "title")]

        subtitle = f"{entry.company} • {entry.location}" if entry.location else entry.company
        head.append(layout.prepare_text(subtitle, "entry_subtitle", "subtitle"))

        dates = format_date_range(entry.start_date, entry.end_date)
        if dates:
            head.append(layout.prepare_text(dates, "date", "date"))

        body = []
        if entry.description:
            body.append((config.space_between_blocks,
                         layout.prepare_text(entry.description, "body", "description")))
        body.extend(self._bullets(entry.achievements))
        return EntryLayout(head=head, body=body)


class ProjectsRenderer(SectionRenderer):
    key = "projects"
    name = "Projects"

    def entries(self, model) -> tuple:
        return model.projects

    def prepare_entry(self, entry) -> EntryLayout:
        layout, config = self.layout, self.layout.config
        head = [self._title(entry.title, entry.link, "entry_title")]

        body = [(config.space_between_blocks,
                 layout.prepare_text(entry.description, "body", "description"))]
        if entry.technologies:
            bold = config.fonts[1]
            markup = (
                f'<font name="{bold}">Technologies:</font> '
                f'<font color="{config.secondary_color}">{escape_markup(entry.technologies)}</font>'
            )
            body.append((config.space_between_blocks, layout.prepare(
                markup, "detail", f"Technologies: {entry.technologies}", "technologies",
            )))
        body.extend(self._bullets(entry.details))
        if entry.link and config.link_style == "label":
            body.append((config.space_between_blocks, self._link_line(entry.link)))
        return EntryLayout(head=head, body=body)


class SkillsRenderer(SectionRenderer):
    key = "skills"
    name = "Skills"

    def entries(self, model) -> tuple:
        return (model.skills,) if model.skills else ()

    def prepare_entry(self, entry) -> EntryLayout:
        text = self.layout.config.list_separator.join(entry)
        return EntryLayout(head=[self.layout.prepare_text(text, "list", "skills")])


class CertificationsRenderer(SectionRenderer):
    key = "certifications"
    name = "Certifications"

    def entries(self, model) -> tuple:
        return model.certifications

    def prepare_entry(self, entry) -> EntryLayout:
        layout, config = self.layout, self.layout.config
        head = [self._title(entry.title, entry.link, "cert_title")]
        issuer = f"{entry.issuer} • {entry.date}" if entry.date else entry.issuer
        head.append(layout.prepare_text(issuer, "cert_issuer", "subtitle"))

        body = []
        if entry.link and config.link_style == "label":
            body.append((config.space_between_blocks, self._link_line(entry.link)))
        return EntryLayout(head=head, body=body)


class InterestsRenderer(SectionRenderer):
    key = "interests"
    name = "Interests"

    def entries(self, model) -> tuple:
        return (model.interests,) if model.interests else ()

    def prepare_entry(self, entry) -> EntryLayout:
        text = self.layout.config.list_separator.join(entry)
        return EntryLayout(head=[self.layout.prepare_text(text, "list", "interests")])


# fixed render order; each section starts where the previous one left the cursor
RENDERERS = (
    HeaderRenderer,
    SummaryRenderer,
    EducationRenderer,
    ExperienceRenderer,
    ProjectsRenderer,
    SkillsRenderer,
    CertificationsRenderer,
    InterestsRenderer,
)
