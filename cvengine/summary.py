"""Professional summary generation.

The layout engine treats the summary as opaque text. This module is the
collaborator that produces it: a SummaryGenerator takes the validated
DocumentModel and returns a short narrative string, or raises
SummaryGenerationError.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class SummaryGenerationError(RuntimeError):
    """Raised when the text-generation service fails or returns nothing usable."""


class SummaryGenerator(Protocol):
    def generate(self, model) -> str:
        ...


def build_summary_prompt(model) -> str:
    """Prompt for a 3-4 sentence CV summary from the candidate's validated data."""
    profile = model.profile
    experiences = ", ".join(f"{e.position} at {e.company}" for e in model.experience)
    projects = ", ".join(p.title for p in model.projects)
    return f"""Generate a professional summary for a CV based on the following information:
- Name: {profile.full_name}
- Career Stage: {profile.career_stage or 'Not specified'}
- Skills: {', '.join(model.skills)}
- Interests: {', '.join(profile.interests)}
- Selected Path: {profile.target_path or 'Not specified'}
- Work Experiences: {experiences}
- Projects: {projects}

Create a compelling 3-4 sentence professional summary that highlights their strengths, career focus, and key achievements. Make it professional and engaging.
Return only the summary text, with no heading, preamble or quotation marks."""


class AnthropicSummaryGenerator:
    """Summary generator backed by the Anthropic Messages API.

    Args:
        client: An anthropic.Anthropic instance (built from api_key when omitted)
        api_key: Used only when client is None
        model_name: Anthropic model id
        max_tokens: Response token cap
    """

    def __init__(self, client=None, api_key: str = "", model_name: str = DEFAULT_MODEL,
                 max_tokens: int = 400):
        if client is None:
            import anthropic
            client = anthropic.Anthropic(api_key=api_key)
        self.client = client
        self.model_name = model_name
        self.max_tokens = max_tokens

    def generate(self, model) -> str:
        from cvengine.api_utils import messages_create_with_retry

        prompt = build_summary_prompt(model)
        logger.info("Generating professional summary for %s", model.profile.full_name)
        try:
            response = messages_create_with_retry(
                self.client,
                model=self.model_name,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            logger.error("Summary generation failed: %s", e)
            raise SummaryGenerationError(f"Summary generation failed: {e}") from e

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        ).strip()
        if not text:
            raise SummaryGenerationError("Summary generation returned no text")
        return text


class StaticSummaryGenerator:
    """Returns a fixed summary; '' leaves the summary section out."""

    def __init__(self, text: str = ""):
        self.text = text

    def generate(self, model) -> str:
        return self.text
