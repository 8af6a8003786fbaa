"""
Menu extraction HTTP service.

Entry point for the application.
POST /extract renders an ordering page and returns its menu items.
"""
import logging
import sys

from aiohttp import web

from config import settings
from web import create_app

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

# Reduce noise from external libraries
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.CRITICAL)

logger = logging.getLogger(__name__)


def main() -> None:
    """Validate configuration and serve until interrupted."""
    if not settings.openai_api_key:
        logger.error("Missing OPENAI_API_KEY")
        sys.exit(1)

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    web.run_app(
        create_app(),
        host=settings.host,
        port=settings.port,
        print=None,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
