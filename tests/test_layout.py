"""Tests for sections.py and generator.py — placement, pagination and section order."""

import asyncio

import pytest

from cvengine.config import LayoutConfig
from cvengine.cursor import LayoutCursor
from cvengine.generator import layout_document, render, render_to_file
from cvengine.model import (
    CandidateProfile,
    ContactInfo,
    DocumentModel,
    EducationEntry,
    ExperienceEntry,
    ProjectEntry,
)
from cvengine.page_stream import LinkArea, PageStream, RuleLine, SerializationError, TextSpan
from cvengine.sections import (
    EducationRenderer,
    ExperienceRenderer,
    SectionLayout,
    format_date_range,
)

LONG_PARAGRAPH = " ".join(["Designed and operated data pipelines for analytics teams."] * 12)


def placed_instructions(stream):
    """(page_index, instruction) for every instruction in draw order."""
    return [(i, instr) for i, page in enumerate(stream.pages) for instr in page]


def blocks_of_kind(stream, kind):
    return [(i, instr) for i, instr in placed_instructions(stream) if instr.kind == kind]


def _profile(**kw):
    kw.setdefault("full_name", "Lee Min")
    kw.setdefault("email", "lee@example.com")
    return CandidateProfile(**kw)


def _section_layout(config):
    stream = PageStream.for_config(config)
    cursor = LayoutCursor.for_config(config, on_page_break=stream.new_page)
    return SectionLayout(config, cursor, stream)


@pytest.fixture
def long_model():
    experience = tuple(
        ExperienceEntry(
            company=f"Company {i}", position=f"Engineer {i}", start_date="2019",
            description=LONG_PARAGRAPH, achievements=("Cut batch runtime by half", "Mentored two hires"),
        )
        for i in range(25)
    )
    return DocumentModel(profile=_profile(), summary="Short summary.", experience=experience)


class TestPagination:

    def test_no_block_crosses_threshold(self, long_model, config):
        result = layout_document(long_model, config)
        assert result.page_count > 1
        for _, instr in placed_instructions(result.stream):
            assert instr.top >= config.top
            assert instr.top + instr.height <= config.threshold + 1e-6

    def test_page_count_matches_stream(self, long_model, config):
        result = layout_document(long_model, config)
        assert result.page_count == result.stream.page_count

    def test_every_page_has_content(self, long_model, config):
        result = layout_document(long_model, config)
        assert all(result.stream.pages)

    def test_long_description_moves_to_next_page_top(self, config):
        layout = _section_layout(config)
        renderer = ExperienceRenderer(layout)
        entry = renderer.prepare_entry(
            ExperienceEntry(company="Acme", position="Engineer", description=LONG_PARAGRAPH)
        )
        # head fits at the bottom of page one, the description does not
        layout.cursor.offset = config.threshold - entry.head_height - 1
        renderer.draw_entry(entry)

        titles = blocks_of_kind(layout.stream, "title")
        descriptions = blocks_of_kind(layout.stream, "description")
        assert titles[0][0] == 0
        assert len(descriptions) == 1
        page, block = descriptions[0]
        assert page == 1
        assert block.top == pytest.approx(config.top)

    def test_heading_kept_with_first_entry(self, config):
        layout = _section_layout(config)
        renderer = EducationRenderer(layout)
        model = DocumentModel(
            profile=_profile(),
            education=(EducationEntry(degree="BSc", institution="UCL", start_date="2015", end_date="2018"),),
        )
        heading_height = renderer.prepare_heading().height
        # room for the heading alone, not for the heading plus the entry
        layout.cursor.offset = config.threshold - heading_height - 1
        assert renderer.render(model)

        (heading_page, heading), = blocks_of_kind(layout.stream, "heading")
        title_page, _ = blocks_of_kind(layout.stream, "title")[0]
        assert heading_page == title_page == 1
        assert heading.top == pytest.approx(config.top)

    def test_oversized_summary_starts_new_page_and_overflows(self, config):
        huge = " ".join(["Summary sentence that keeps going on."] * 600)
        model = DocumentModel(profile=_profile(), summary=huge)
        result = layout_document(model, config)

        (heading_page, heading), = blocks_of_kind(result.stream, "heading")
        (summary_page, summary), = blocks_of_kind(result.stream, "summary")
        assert heading_page == summary_page == 1
        assert heading.top == pytest.approx(config.top)
        assert summary.height > config.threshold - config.top
        assert summary.top == pytest.approx(heading.top + heading.height + config.space_after_heading)


class TestSections:

    def test_minimal_document(self, config):
        result = layout_document(DocumentModel(profile=_profile()), config)
        assert result.page_count == 1
        assert result.sections == ("Personal Info",)
        assert result.headings == ()
        kinds = [instr.kind for _, instr in placed_instructions(result.stream)]
        assert kinds == ["name", "contact", "rule"]
        assert "LEE MIN" in result.stream.text()
        assert "lee@example.com" in result.stream.text()

    def test_empty_sections_have_no_heading_or_separator(self, full_model, config):
        model = DocumentModel(profile=full_model.profile, experience=full_model.experience)
        result = layout_document(model, config)
        assert result.headings == ("WORK EXPERIENCE", "INTERESTS")
        rules = [i for _, i in placed_instructions(result.stream) if isinstance(i, RuleLine)]
        assert len(rules) == 1 + len(result.headings)

    def test_full_document_section_order(self, full_model, config):
        result = layout_document(full_model, config)
        assert result.headings == (
            "PROFESSIONAL SUMMARY",
            "EDUCATION",
            "WORK EXPERIENCE",
            "PROJECTS",
            "TECHNICAL SKILLS",
            "CERTIFICATIONS & ACHIEVEMENTS",
            "INTERESTS",
        )
        drawn = [i.text for _, i in blocks_of_kind(result.stream, "heading")]
        assert drawn == list(result.headings)
        rules = [i for _, i in placed_instructions(result.stream) if isinstance(i, RuleLine)]
        assert len(rules) == 1 + len(result.headings)

    def test_custom_section_titles(self, full_model):
        config = LayoutConfig(section_titles={
            **LayoutConfig().section_titles, "experience": "EXPERIENCE",
        })
        result = layout_document(full_model, config)
        assert "EXPERIENCE" in result.headings
        assert "WORK EXPERIENCE" not in result.headings

    def test_entries_keep_input_order(self, config):
        experience = tuple(
            ExperienceEntry(company=c, position=f"Role at {c}") for c in ("Zeta", "Alpha", "Mid")
        )
        result = layout_document(DocumentModel(profile=_profile(), experience=experience), config)
        titles = [i.text for _, i in blocks_of_kind(result.stream, "title")]
        assert titles == ["Role at Zeta", "Role at Alpha", "Role at Mid"]

    def test_target_path_subtitle(self, full_model, config):
        result = layout_document(full_model, config)
        subtitles = [i.text for _, i in blocks_of_kind(result.stream, "subtitle")]
        assert subtitles[0] == "Data Engineering"

    def test_education_field_and_location(self, full_model, config):
        text = layout_document(full_model, config).stream.text()
        assert "BSc, Computer Science" in text
        assert "University of Lagos • Lagos, Nigeria" in text

    def test_skills_joined_in_union_order(self, full_model, config):
        (_, skills), = blocks_of_kind(layout_document(full_model, config).stream, "skills")
        assert skills.text == "Python • SQL • Data Modelling • Airflow • dbt"

    def test_unmeasurable_entry_skipped(self, config):
        experience = (
            ExperienceEntry(company="Good", position="Engineer"),
            ExperienceEntry(company="Bad", position="Broken \ud800 title"),
        )
        result = layout_document(DocumentModel(profile=_profile(), experience=experience), config)
        titles = [i.text for _, i in blocks_of_kind(result.stream, "title")]
        assert titles == ["Engineer"]
        assert "WORK EXPERIENCE" in result.headings

    def test_section_dropped_when_every_entry_fails(self, config):
        experience = (ExperienceEntry(company="Bad", position="\ud800"),)
        result = layout_document(DocumentModel(profile=_profile(), experience=experience), config)
        assert result.headings == ()


class TestDates:

    def test_missing_end_reads_present(self):
        assert format_date_range("2021", "") == "2021 – Present"

    def test_missing_start(self):
        assert format_date_range("", "2020") == "– 2020"

    def test_both_missing(self):
        assert format_date_range("", "") == ""

    def test_date_line_only_when_dates_given(self, config):
        experience = (
            ExperienceEntry(company="A", position="One", start_date="2020"),
            ExperienceEntry(company="B", position="Two"),
        )
        result = layout_document(DocumentModel(profile=_profile(), experience=experience), config)
        dates = [i.text for _, i in blocks_of_kind(result.stream, "date")]
        assert dates == ["2020 – Present"]


class TestLinks:

    def _project_model(self):
        return DocumentModel(
            profile=_profile(),
            projects=(ProjectEntry(
                title="Open Transit", description="GTFS tooling",
                link="github.com/amara/open-transit/",
            ),),
        )

    def test_title_link_style(self, config):
        result = layout_document(self._project_model(), config)
        (_, title), = blocks_of_kind(result.stream, "title")
        assert 'href="https://github.com/amara/open-transit/"' in title.paragraph.text
        assert blocks_of_kind(result.stream, "link") == []

    def test_label_link_style(self):
        config = LayoutConfig(link_style="label")
        result = layout_document(self._project_model(), config)
        (_, title), = blocks_of_kind(result.stream, "title")
        assert "href" not in title.paragraph.text
        (_, link), = [(p, i) for p, i in blocks_of_kind(result.stream, "link")
                      if not isinstance(i, LinkArea)]
        assert link.text == "Link: github.com/amara/open-transit"

    def test_header_link_row_is_centered(self, config):
        model = DocumentModel(
            profile=_profile(),
            contact=ContactInfo(links=(
                ("LinkedIn", "https://linkedin.com/in/lee"),
                ("GitHub", "github.com/lee"),
            )),
        )
        stream = layout_document(model, config).stream
        spans = [i for _, i in placed_instructions(stream) if isinstance(i, TextSpan)]
        areas = [i for _, i in placed_instructions(stream) if isinstance(i, LinkArea)]
        assert [s.text for s in spans] == ["LinkedIn", "GitHub"]
        assert [a.url for a in areas] == ["https://linkedin.com/in/lee", "https://github.com/lee"]

        left_gap = spans[0].x - config.left
        right_gap = config.left + config.content_width - (spans[-1].x + spans[-1].width)
        assert left_gap == pytest.approx(right_gap)
        assert spans[1].x == pytest.approx(spans[0].x + spans[0].width + config.link_spacing)

    def test_many_links_wrap_into_rows(self, config):
        links = tuple((f"Profile link number {i}", f"https://example.com/{i}") for i in range(12))
        model = DocumentModel(profile=_profile(), contact=ContactInfo(links=links))
        stream = layout_document(model, config).stream
        spans = [i for _, i in placed_instructions(stream) if isinstance(i, TextSpan)]
        assert len({s.top for s in spans}) > 1
        for span in spans:
            assert span.x >= config.left - 1e-6
            assert span.x + span.width <= config.left + config.content_width + 1e-6


class TestRender:

    def test_render_is_deterministic(self, full_model, config):
        first = asyncio.run(render(full_model, config))
        second = asyncio.run(render(full_model, config))
        assert first.pdf.startswith(b"%PDF")
        assert first.pdf == second.pdf

    def test_render_to_file(self, full_model, tmp_path):
        path = tmp_path / "out" / "cv.pdf"
        result = render_to_file(full_model, str(path))
        assert path.read_bytes() == result.pdf
        assert result.page_count >= 1

    def test_serialization_failure_returns_no_bytes(self, config):
        class Broken:
            kind, text, top, height = "broken", "", 100.0, 10.0

            def draw(self, canv, page_height):
                raise RuntimeError("encoder exploded")

        stream = PageStream.for_config(config)
        stream.emit(Broken())
        with pytest.raises(SerializationError):
            stream.serialize()

    def test_serialize_async_matches_sync(self, full_model, config):
        stream = layout_document(full_model, config).stream
        assert asyncio.run(stream.serialize_async()) == stream.serialize()
