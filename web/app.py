"""
aiohttp application factory.
"""
import logging
from typing import Optional

from aiohttp import web

from services.extraction import MenuExtractionService, extraction_service
from utils.http_client import http_client
from web.handlers import EXTRACTION_SERVICE, routes

logger = logging.getLogger(__name__)


async def on_cleanup(app: web.Application) -> None:
    """Actions to perform on server shutdown."""
    logger.info("Server shutting down...")
    await http_client.close()
    logger.info("Cleanup complete")


def create_app(service: Optional[MenuExtractionService] = None) -> web.Application:
    """Build the web application around an extraction service."""
    app = web.Application()
    app[EXTRACTION_SERVICE] = service or extraction_service
    app.add_routes(routes)
    app.on_cleanup.append(on_cleanup)
    return app
