"""Parseability check: extract text from a rendered PDF and look for its sections."""

import io
import logging

import pdfplumber

logger = logging.getLogger(__name__)


def extract_text(pdf_bytes: bytes) -> str:
    """Concatenated text of every page."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        return "\n".join((page.extract_text() or "") for page in pdf.pages)


def run_parseability_check(pdf_bytes: bytes, expected_headings=()) -> dict:
    """Extract text from generated PDF bytes and verify the headings survived."""
    result = {
        "text_extractable": False,
        "total_chars": 0,
        "page_count": 0,
        "sections_found": [],
        "issues": [],
    }
    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            result["page_count"] = len(pdf.pages)
            full_text = "\n".join((page.extract_text() or "") for page in pdf.pages)
    except Exception as e:
        result["issues"].append(f"PDF parse error: {e}")
        return result

    result["text_extractable"] = bool(full_text.strip())
    result["total_chars"] = len(full_text)

    lowered = full_text.lower()
    for heading in expected_headings:
        if heading.lower() in lowered:
            result["sections_found"].append(heading)
        else:
            result["issues"].append(f"Section '{heading}' not found in extracted text")

    garbled_count = sum(1 for c in full_text if ord(c) > 65535)
    if garbled_count > 5:
        result["issues"].append(f"Found {garbled_count} potentially garbled characters")

    if result["issues"]:
        logger.warning("Parseability issues: %s", "; ".join(result["issues"]))
    return result
