"""FastAPI app for the CV generation service."""

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request  # noqa: E402

from cvengine.service import build_service  # noqa: E402
from web import config  # noqa: E402
from web.routes import cv  # noqa: E402

logger = logging.getLogger(__name__)

app = FastAPI(title="CV Engine", version="0.1.0")


def get_service(request: Request):
    """CVService for this app, built from settings on first use.

    Tests (or embedding code) may set app.state.service beforehand.
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        service = build_service(
            store_path=config.TALENT_STORE_PATH,
            layout_config_path=config.LAYOUT_CONFIG_PATH or None,
            api_key=config.ANTHROPIC_API_KEY,
            summary_model=config.SUMMARY_MODEL,
            debug=config.DEBUG,
        )
        request.app.state.service = service
        logger.info("CV service initialised (store=%s)", config.TALENT_STORE_PATH)
    return service


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(cv.router, tags=["cv"])
