"""CV generation service: request in, response envelope out.

Pipeline per request:
  1. Parse and validate the request body (talentId required)
  2. Fetch the talent record (+ optional career-path title) from the store
  3. Build the DocumentModel (skill union, entry validation)
  4. Generate the professional summary
  5. Render the PDF
  6. Wrap it in the JSON envelope: success, base64 pdfData, metadata

Collaborators (store, summary generator, layout config) are injected, never
module-level singletons.
"""

from __future__ import annotations

import asyncio
import base64
import dataclasses
import json
import logging
import traceback
from datetime import datetime, timezone

from cvengine.config import LayoutConfig, load_layout_config
from cvengine.generator import render
from cvengine.model import build_document_model
from cvengine.summary import DEFAULT_MODEL, AnthropicSummaryGenerator, StaticSummaryGenerator
from cvengine.talent_store import (
    JsonTalentStore,
    TalentNotFoundError,
    TalentStoreAccessError,
)

logger = logging.getLogger(__name__)


class RequestValidationError(ValueError):
    """Raised for a malformed request body or a missing talentId."""


def parse_request(body) -> dict:
    """Accept a dict, JSON str or JSON bytes; return the request dict."""
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        if not body.strip():
            raise RequestValidationError("Request body is empty")
        try:
            body = json.loads(body)
        except json.JSONDecodeError as e:
            raise RequestValidationError(f"Request body is not valid JSON: {e.msg}") from e
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be a JSON object")
    talent_id = body.get("talentId")
    if not isinstance(talent_id, (str, int)) or not str(talent_id).strip():
        raise RequestValidationError("talentId is required")
    return body


def _error(message: str, status: int, details: str | None = None) -> tuple:
    envelope = {"success": False, "error": message}
    if details:
        envelope["details"] = details
    return envelope, status


class CVService:
    """Generates CVs for talents in *store*.

    Args:
        store: Object with get_talent(talent_id) and get_career_path_title(path_id)
        summarizer: Object with generate(model) -> str
        layout_config: LayoutConfig for every render
        debug: Include tracebacks in 500 envelopes
    """

    def __init__(self, store, summarizer, layout_config: LayoutConfig | None = None,
                 debug: bool = False):
        self.store = store
        self.summarizer = summarizer
        self.layout_config = layout_config or LayoutConfig()
        self.debug = debug

    async def build_model(self, payload: dict):
        """Steps 2-4: fetch talent, normalize, attach the generated summary."""
        talent_id = str(payload["talentId"]).strip()
        logger.info("Fetching talent data for ID: %s", talent_id)
        talent = self.store.get_talent(talent_id)
        logger.info("Found talent: %s", talent.get("fullname"))

        path_title = self.store.get_career_path_title(talent.get("selectedPath"))
        model = build_document_model(talent, payload, career_path_title=path_title)

        summary = await asyncio.to_thread(self.summarizer.generate, model)
        return dataclasses.replace(model, summary=(summary or "").strip())

    async def generate(self, body) -> tuple:
        """Handle one CV request. Returns (envelope, http_status); never raises."""
        try:
            payload = parse_request(body)
            logger.info("Starting CV generation...")
            model = await self.build_model(payload)
            result = await render(model, self.layout_config)
        except RequestValidationError as e:
            return _error(str(e), 400)
        except TalentStoreAccessError as e:
            logger.error("Database access failed: %s", e)
            return _error(
                "Database access not authorized. Please check store permissions.", 403,
                details="The service needs read access to the talents collection",
            )
        except TalentNotFoundError:
            return _error("Talent not found", 404)
        except Exception as e:
            logger.exception("CV generation failed: %s", e)
            return _error(
                str(e) or "Failed to generate CV", 500,
                details=traceback.format_exc() if self.debug else None,
            )

        logger.info("CV generation completed successfully")
        envelope = {
            "success": True,
            "pdfData": base64.b64encode(result.pdf).decode("ascii"),
            "metadata": {
                "talentName": model.profile.full_name,
                "generatedAt": datetime.now(timezone.utc).isoformat(),
                "sections": list(result.sections),
                "pageCount": result.page_count,
            },
        }
        return envelope, 200


def build_service(
    store_path: str,
    layout_config_path: str | None = None,
    api_key: str = "",
    summary_model: str = DEFAULT_MODEL,
    summary_text: str | None = None,
    debug: bool = False,
) -> CVService:
    """Wire a CVService from plain settings values.

    summary_text, when not None, replaces the text-generation call with a fixed summary.
    """
    if summary_text is not None:
        summarizer = StaticSummaryGenerator(summary_text)
    else:
        summarizer = AnthropicSummaryGenerator(api_key=api_key, model_name=summary_model)
    return CVService(
        store=JsonTalentStore(store_path),
        summarizer=summarizer,
        layout_config=load_layout_config(layout_config_path),
        debug=debug,
    )
