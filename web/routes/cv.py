"""CV route: POST a CV request, get back the JSON envelope with base64 PDF data."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _service(request: Request):
    from web.app import get_service
    return get_service(request)


@router.post("/cv")
async def generate_cv(request: Request, service=Depends(_service)):
    body = await request.body()
    envelope, status = await service.generate(body)
    if status != 200:
        logger.info("CV request failed with %d: %s", status, envelope.get("error"))
    return JSONResponse(content=envelope, status_code=status)
