"""CV Engine — command-line CV generator

Runs the full pipeline for one talent:
  1. Load the CV request (JSON body) and the talent record from the store
  2. Build the document model (skill union, entry validation)
  3. Generate the professional summary (Anthropic, or --summary / --no-summary)
  4. Lay out and render the PDF
  5. Check the PDF text is extractable and every rendered heading survived

Usage:
    python main.py --talent-id t-001
    python main.py --request data/sample_request.json --output output/cv.pdf
    python main.py --talent-id t-001 --no-summary --layout-config layout.json
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("cv-engine")


def load_request(request_file: str = None, talent_id: str = None) -> dict:
    """Read the request JSON (if given) and let --talent-id override its talentId."""
    payload = {}
    if request_file:
        with open(request_file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    if talent_id:
        payload["talentId"] = talent_id
    return payload


async def run_pipeline(service, payload: dict):
    """Build the model and render it. Returns the RenderResult."""
    from cvengine.generator import render
    from cvengine.service import parse_request

    payload = parse_request(payload)
    model = await service.build_model(payload)
    return await render(model, service.layout_config)


def main():
    parser = argparse.ArgumentParser(description="CV Engine — render a talent's CV to PDF")
    parser.add_argument("--talent-id", type=str, help="Talent to render (overrides talentId in --request)")
    parser.add_argument("--request", type=str, help="Path to a JSON CV request body")
    parser.add_argument(
        "--store", type=str,
        default=os.environ.get("CV_TALENT_STORE", "data/talents.json"),
        help="Talent store JSON file (default: $CV_TALENT_STORE or data/talents.json)",
    )
    parser.add_argument(
        "--layout-config", type=str, default=os.environ.get("CV_LAYOUT_CONFIG", ""),
        help="JSON file of layout overrides (page size, margins, fonts, colors, spacing)",
    )
    parser.add_argument("--summary", type=str, help="Use this summary text instead of generating one")
    parser.add_argument("--no-summary", action="store_true", help="Render without a summary section")
    parser.add_argument("--output", type=str, help="Output PDF path (default: output/<name>_CV.pdf)")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose/debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.talent_id and not args.request:
        parser.print_help()
        sys.exit(1)

    from cvengine.page_stream import SerializationError
    from cvengine.pdf_check import run_parseability_check
    from cvengine.service import build_service
    from cvengine.summary import DEFAULT_MODEL, SummaryGenerationError
    from cvengine.talent_store import TalentStoreError

    summary_text = "" if args.no_summary else args.summary
    try:
        service = build_service(
            store_path=args.store,
            layout_config_path=args.layout_config or None,
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            summary_model=os.environ.get("CV_SUMMARY_MODEL", DEFAULT_MODEL),
            summary_text=summary_text,
        )
        payload = load_request(args.request, args.talent_id)
        result = asyncio.run(run_pipeline(service, payload))
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)
    except (TalentStoreError, SummaryGenerationError, SerializationError) as e:
        logger.error("%s", e)
        sys.exit(1)

    output_path = args.output
    if not output_path:
        out_dir = os.environ.get("CV_OUTPUT_DIR", "output")
        output_path = os.path.join(out_dir, f"{payload['talentId']}_CV.pdf")
    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(result.pdf)

    check = run_parseability_check(result.pdf, result.headings)
    logger.info("PDF generated: %s", output_path)
    logger.info("  Pages: %d", result.page_count)
    logger.info("  Sections: %s", ", ".join(result.sections))
    logger.info("  Headings found in text: %d/%d", len(check["sections_found"]), len(result.headings))


if __name__ == "__main__":
    main()
