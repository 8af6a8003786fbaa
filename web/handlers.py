"""
HTTP request handlers.
"""
import logging

from aiohttp import web
from pydantic import ValidationError

from models import ErrorResponse, ExtractionRequest
from services.extraction import MenuExtractionService

logger = logging.getLogger(__name__)

EXTRACTION_SERVICE = web.AppKey("extraction_service", MenuExtractionService)

routes = web.RouteTableDef()


def _error(status: int, error: str, message: str) -> web.Response:
    body = ErrorResponse(error=error, message=message)
    return web.json_response(body.model_dump(), status=status)


@routes.get("/health")
async def health(request: web.Request) -> web.Response:
    """Liveness probe."""
    return web.json_response({"ok": True})


@routes.post("/extract")
async def extract(request: web.Request) -> web.Response:
    """
    POST /extract {url, model?, engine?, geo?, headless?, timeoutMs?}

    Returns {items, meta} or {error, message}.
    """
    try:
        body = await request.json()
    except ValueError:
        return _error(400, "invalid_request", "Body must be a JSON object")

    if not isinstance(body, dict):
        return _error(400, "invalid_request", "Body must be a JSON object")

    try:
        extraction_request = ExtractionRequest.model_validate(body)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        return _error(400, "invalid_request", errors)

    service = request.app[EXTRACTION_SERVICE]

    try:
        result = await service.extract(extraction_request)
    except Exception as e:
        logger.error(f"[API] Extraction failed for {extraction_request.url}: {e}", exc_info=True)
        return _error(500, "extract_failed", str(e) or e.__class__.__name__)

    return web.json_response(result.model_dump())
