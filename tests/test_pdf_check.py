"""Tests for pdf_check.py — rendered PDFs stay text-extractable."""

import asyncio

import pytest

from cvengine.generator import render
from cvengine.model import CandidateProfile, DocumentModel
from cvengine.pdf_check import extract_text, run_parseability_check


@pytest.fixture
def full_render(full_model, config):
    return asyncio.run(render(full_model, config))


class TestParseability:

    def test_headings_survive_extraction(self, full_render):
        result = run_parseability_check(full_render.pdf, full_render.headings)
        assert result["text_extractable"]
        assert result["sections_found"] == list(full_render.headings)
        assert result["issues"] == []
        assert result["page_count"] == full_render.page_count

    def test_name_and_contact_extracted(self, full_render):
        text = extract_text(full_render.pdf)
        assert "AMARA OKAFOR" in text
        assert "amara.okafor@example.com" in text

    def test_omitted_section_absent(self, config):
        model = DocumentModel(profile=CandidateProfile(full_name="Lee Min", email="lee@example.com"))
        pdf = asyncio.run(render(model, config)).pdf
        text = extract_text(pdf)
        assert "LEE MIN" in text
        assert "EDUCATION" not in text

    def test_missing_heading_reported(self, full_render):
        result = run_parseability_check(full_render.pdf, ["VOLUNTEERING"])
        assert result["sections_found"] == []
        assert any("VOLUNTEERING" in issue for issue in result["issues"])

    def test_garbage_bytes(self):
        result = run_parseability_check(b"not a pdf")
        assert not result["text_extractable"]
        assert result["issues"]
